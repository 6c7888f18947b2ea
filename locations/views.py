"""
Locations — Views

ViewSet for the directory location tree. Reads are open to any signed-in
user; writes go through LocationService and are admin-only.

@file locations/views.py
"""

from dataclasses import asdict

from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from posts.serializers import PostListSerializer
from posts.services import PostService

from .models import Location
from .permissions import CanModifyLocations
from .serializers import (
    LocationCreateSerializer,
    LocationReadSerializer,
    LocationTreeNodeSerializer,
    LocationUpdateSerializer,
)
from .services import UNSET, LocationService


def _ancestor_names(rows) -> dict:
    """One lookup for every country / province named by ``rows``."""
    ids = {pk for row in rows for pk in row.ancestor_ids()}
    if not ids:
        return {}
    return dict(Location.objects.filter(pk__in=ids).values_list('pk', 'name'))


class LocationViewSet(viewsets.ReadOnlyModelViewSet):
    """
    Browse and manage locations.

    List / retrieve / tree / children / hierarchy open to any
    authenticated user. Create / update / delete restricted to admins.
    """

    permission_classes = [IsAuthenticated, CanModifyLocations]
    serializer_class = LocationReadSerializer
    filterset_fields = ['location_type', 'parent', 'country', 'province']
    search_fields = ['name']
    ordering_fields = ['name', 'location_type', 'created_at']
    ordering = ['location_type', 'name']

    def get_queryset(self):
        return Location.objects.all()

    def get_object(self):
        return LocationService.get_location(self.kwargs['pk'])

    def _read_serializer(self, rows):
        context = {**self.get_serializer_context(), 'ancestor_names': _ancestor_names(rows)}
        return LocationReadSerializer(rows, many=True, context=context)

    def list(self, request, *args, **kwargs):
        queryset = self.filter_queryset(self.get_queryset())
        page = self.paginate_queryset(queryset)
        if page is not None:
            return self.get_paginated_response(self._read_serializer(page).data)
        return Response(self._read_serializer(list(queryset)).data)

    def create(self, request):
        serializer = LocationCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        location = LocationService.create_location(
            name=data['name'],
            location_type=data['type'],
            parent_id=data.get('parent_id'),
            actor=request.user,
        )
        return Response(
            {'success': True, 'data': LocationReadSerializer(location).data},
            status=status.HTTP_201_CREATED,
        )

    def partial_update(self, request, pk=None):
        serializer = LocationUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        location = LocationService.update_location(
            location_id=pk,
            name=data.get('name', UNSET),
            parent_id=data.get('parent_id', UNSET),
            location_type=data.get('type', UNSET),
            expected_version=data.get('expected_version'),
            actor=request.user,
        )
        return Response({'success': True, 'data': LocationReadSerializer(location).data})

    def update(self, request, pk=None):
        return self.partial_update(request, pk=pk)

    def destroy(self, request, pk=None):
        report = LocationService.delete_location(location_id=pk, actor=request.user)
        return Response({'success': True, 'data': {**asdict(report), 'complete': report.complete}})

    @action(detail=False, methods=['get'], url_path='tree')
    def tree(self, request):
        roots = LocationService.list_tree()
        return Response({'success': True, 'data': LocationTreeNodeSerializer(roots, many=True).data})

    @action(detail=True, methods=['get'], url_path='children')
    def children(self, request, pk=None):
        rows = LocationService.get_children(pk)
        return Response({'success': True, 'data': self._read_serializer(rows).data})

    @action(detail=True, methods=['get'], url_path='hierarchy')
    def hierarchy(self, request, pk=None):
        return Response({'success': True, 'data': LocationService.get_hierarchy(pk)})

    @action(detail=True, methods=['get'], url_path='posts')
    def posts(self, request, pk=None):
        """Published directory posts scoped to this location."""
        qs = PostService.list_by_location(pk)
        return Response({'success': True, 'data': PostListSerializer(qs, many=True).data})
