"""
Posts — Views

Post and category ViewSets plus the image upload endpoint. Reads are
open to any signed-in user (published content only for non-admins);
writes and admin listings are admin-only and go through the services.

@file posts/views.py
"""

from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.parsers import FormParser, MultiPartParser
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from core.exceptions import BusinessRuleViolation, ResourceNotFoundError
from users.permissions import IsAdminOrReadOnly, IsAdminRole, is_admin

from .models import Post
from .serializers import (
    CategorySerializer,
    CategoryWriteSerializer,
    FeedRowSerializer,
    ImageUploadSerializer,
    PostListSerializer,
    PostReadSerializer,
    PostWriteSerializer,
)
from .services import CategoryService, ImageUploadService, PostService


def _int_param(request, name, default):
    raw = request.query_params.get(name)
    if raw in (None, ''):
        return default
    try:
        return int(raw)
    except ValueError:
        raise BusinessRuleViolation(detail=f'"{name}" must be an integer.')


class PostViewSet(viewsets.ReadOnlyModelViewSet):
    """
    Browse and manage posts.

    list / retrieve: published posts (admins also see drafts).
    create / update / delete / publish / admin: admins only.
    """

    permission_classes = [IsAuthenticated, IsAdminOrReadOnly]
    filterset_fields = ['post_type', 'featured']
    search_fields = ['title', 'summary']
    ordering_fields = ['published_at', 'created_at', 'title']
    ordering = ['-published_at', '-created_at']

    def get_queryset(self):
        qs = Post.objects.prefetch_related('categories')
        if not is_admin(self.request.user):
            qs = qs.filter(published=True)
        return qs

    def get_serializer_class(self):
        if self.action == 'list':
            return PostListSerializer
        return PostReadSerializer

    def get_object(self):
        post = self.get_queryset().filter(pk=PostService.get_post(self.kwargs['pk']).pk).first()
        if post is None:
            raise ResourceNotFoundError(detail='Post not found.')
        return post

    def create(self, request):
        serializer = PostWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        post = PostService.create_post(actor=request.user, **serializer.validated_data)
        return Response(
            {'success': True, 'data': PostReadSerializer(post).data},
            status=status.HTTP_201_CREATED,
        )

    def partial_update(self, request, pk=None):
        serializer = PostWriteSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        post = PostService.update_post(post_id=pk, actor=request.user, **serializer.validated_data)
        return Response({'success': True, 'data': PostReadSerializer(post).data})

    def update(self, request, pk=None):
        return self.partial_update(request, pk=pk)

    def destroy(self, request, pk=None):
        PostService.delete_post(post_id=pk, actor=request.user)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=['post'], url_path='publish', permission_classes=[IsAdminRole])
    def publish(self, request, pk=None):
        post = PostService.publish(post_id=pk, actor=request.user)
        return Response({'success': True, 'data': PostReadSerializer(post).data})

    @action(detail=False, methods=['get'], url_path='by-type')
    def by_type(self, request):
        post_type = request.query_params.get('type', '')
        posts = PostService.list_by_type(post_type, limit=_int_param(request, 'limit', 20))
        return Response({'success': True, 'data': PostListSerializer(posts, many=True).data})

    @action(detail=False, methods=['get'], url_path='by-category')
    def by_category(self, request):
        posts = PostService.list_by_category(
            request.query_params.get('category', ''),
            post_type=request.query_params.get('type') or None,
        )
        return Response({'success': True, 'data': PostListSerializer(posts, many=True).data})

    @action(detail=False, methods=['get'], url_path='featured')
    def featured(self, request):
        posts = PostService.list_featured(limit=_int_param(request, 'limit', 20))
        return Response({'success': True, 'data': PostListSerializer(posts, many=True).data})

    @action(detail=False, methods=['get'], url_path='admin', permission_classes=[IsAdminRole])
    def admin(self, request):
        post_type = request.query_params.get('type')
        if post_type:
            posts = PostService.list_by_type_admin(post_type)
        else:
            posts = PostService.list_all_for_admin()
        return Response({'success': True, 'data': PostListSerializer(posts, many=True).data})

    @action(detail=False, methods=['get'], url_path='feed')
    def feed(self, request):
        """Home carousel rows sized for the caller's viewport width."""
        rows = PostService.feed_rows(_int_param(request, 'width', 1024))
        return Response({'success': True, 'data': FeedRowSerializer(rows, many=True).data})


class CategoryViewSet(viewsets.ViewSet):
    """Categories: list for signed-in users, writes for admins."""

    permission_classes = [IsAuthenticated, IsAdminOrReadOnly]

    def list(self, request):
        categories = CategoryService.list_categories()
        return Response({'success': True, 'data': CategorySerializer(categories, many=True).data})

    def retrieve(self, request, pk=None):
        category = CategoryService.get_category(pk)
        return Response({'success': True, 'data': CategorySerializer(category).data})

    def create(self, request):
        serializer = CategoryWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        category = CategoryService.create_category(name=serializer.validated_data['name'], actor=request.user)
        return Response(
            {'success': True, 'data': CategorySerializer(category).data},
            status=status.HTTP_201_CREATED,
        )

    def partial_update(self, request, pk=None):
        serializer = CategoryWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        category = CategoryService.update_category(
            category_id=pk, name=serializer.validated_data['name'], actor=request.user,
        )
        return Response({'success': True, 'data': CategorySerializer(category).data})

    def update(self, request, pk=None):
        return self.partial_update(request, pk=pk)

    def destroy(self, request, pk=None):
        CategoryService.delete_category(category_id=pk, actor=request.user)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=['get'], url_path='posts')
    def posts(self, request, pk=None):
        category = CategoryService.get_category(pk)
        posts = PostService.list_by_category(category.pk, post_type=request.query_params.get('type') or None)
        return Response({'success': True, 'data': PostListSerializer(posts, many=True).data})


class ImageUploadView(APIView):
    """POST /api/v1/uploads/images/ — multipart ``file`` + ``postId``."""

    permission_classes = [IsAuthenticated]
    parser_classes = [MultiPartParser, FormParser]

    def post(self, request):
        serializer = ImageUploadSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        result = ImageUploadService.upload(
            upload=serializer.validated_data['file'],
            post_id=serializer.validated_data.get('postId') or 'unspecified',
            actor=request.user,
            build_url=request.build_absolute_uri,
        )
        return Response({'success': True, 'data': result}, status=status.HTTP_201_CREATED)
