"""
Posts — URL Configuration

@file posts/urls.py
"""

from django.urls import include, path
from rest_framework.routers import SimpleRouter

from .views import PostViewSet

app_name = 'posts'

router = SimpleRouter()
router.register('', PostViewSet, basename='post')

urlpatterns = [
    path('', include(router.urls)),
]
