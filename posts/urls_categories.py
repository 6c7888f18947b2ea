"""
Categories — URL Configuration

@file posts/urls_categories.py
"""

from django.urls import include, path
from rest_framework.routers import SimpleRouter

from .views import CategoryViewSet

app_name = 'categories'

router = SimpleRouter()
router.register('', CategoryViewSet, basename='category')

urlpatterns = [
    path('', include(router.urls)),
]
