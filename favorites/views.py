"""
Favorites — Views

The signed-in user's favorites: list (paged, searchable), add, remove
and a per-post status check.

@file favorites/views.py
"""

from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from .serializers import FavoriteCreateSerializer, FavoriteItemSerializer, FavoriteListQuerySerializer
from .services import FavoriteService


class FavoriteViewSet(viewsets.ViewSet):
    """Routes are keyed by post id: /favorites/<post_id>/."""

    permission_classes = [IsAuthenticated]
    lookup_field = 'post_id'

    def list(self, request):
        query = FavoriteListQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        result = FavoriteService.list_favorites(request.user, **query.validated_data)
        return Response({
            'success': True,
            'data': FavoriteItemSerializer(result['items'], many=True).data,
            'meta': {'count': result['total'], **query.validated_data},
        })

    def create(self, request):
        serializer = FavoriteCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        favorite, created = FavoriteService.add_favorite(request.user, serializer.validated_data['post_id'])
        return Response(
            {'success': True, 'data': FavoriteItemSerializer(favorite.as_item()).data},
            status=status.HTTP_201_CREATED if created else status.HTTP_200_OK,
        )

    def destroy(self, request, post_id=None):
        FavoriteService.remove_favorite(request.user, post_id)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=['get'], url_path='status', url_name='status')
    def favorite_status(self, request, post_id=None):
        favorited = FavoriteService.is_favorited(request.user, post_id)
        return Response({'success': True, 'data': {'post_id': post_id, 'favorited': favorited}})
