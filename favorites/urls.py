"""
Favorites — URL Configuration

@file favorites/urls.py
"""

from django.urls import include, path
from rest_framework.routers import SimpleRouter

from .views import FavoriteViewSet

app_name = 'favorites'

router = SimpleRouter()
router.register('', FavoriteViewSet, basename='favorite')

urlpatterns = [
    path('', include(router.urls)),
]
