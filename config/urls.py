"""
Being Happy — Root URL Configuration

All API endpoints are namespaced under /api/v1/.
The DRF browsable API is available for route inspection in development.

@file config/urls.py
"""

from django.conf import settings
from django.conf.urls.static import static
from django.contrib import admin
from django.urls import include, path
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.reverse import reverse

admin.site.site_header = 'Being Happy Administration'
admin.site.site_title = 'Being Happy'
admin.site.index_title = 'Content & Directory Management'


@api_view(['GET'])
@permission_classes([AllowAny])
def api_root(request, format=None):
    """Being Happy API v1 — endpoint directory."""
    return Response({
        'auth': {
            'register': reverse('api-v1:auth:register', request=request, format=format),
            'login': reverse('api-v1:auth:login', request=request, format=format),
            'refresh': reverse('api-v1:auth:token-refresh', request=request, format=format),
            'logout': reverse('api-v1:auth:logout', request=request, format=format),
            'me': reverse('api-v1:auth:me', request=request, format=format),
        },
        'locations': {
            'list': reverse('api-v1:locations:location-list', request=request, format=format),
            'tree': reverse('api-v1:locations:location-tree', request=request, format=format),
        },
        'posts': {
            'list': reverse('api-v1:posts:post-list', request=request, format=format),
            'feed': reverse('api-v1:posts:post-feed', request=request, format=format),
            'featured': reverse('api-v1:posts:post-featured', request=request, format=format),
        },
        'categories': reverse('api-v1:categories:category-list', request=request, format=format),
        'favorites': reverse('api-v1:favorites:favorite-list', request=request, format=format),
        'uploads': {
            'images': reverse('api-v1:uploads:image-upload', request=request, format=format),
        },
    })


api_v1_patterns = [
    path('', api_root, name='api-root'),
    path('auth/', include('users.urls', namespace='auth')),
    path('locations/', include('locations.urls', namespace='locations')),
    path('posts/', include('posts.urls', namespace='posts')),
    path('categories/', include('posts.urls_categories', namespace='categories')),
    path('favorites/', include('favorites.urls', namespace='favorites')),
    path('uploads/', include('posts.urls_uploads', namespace='uploads')),
]

urlpatterns = [
    path('admin/', admin.site.urls),

    # DRF session auth (powers the "Log in" button on the browsable API)
    path('api/auth/', include('rest_framework.urls', namespace='rest_framework')),

    # Versioned API
    path('api/v1/', include((api_v1_patterns, 'api-v1'))),
]

if settings.DEBUG:
    urlpatterns += static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)
