"""
Locations — URL Configuration

@file locations/urls.py
"""

from django.urls import include, path
from rest_framework.routers import SimpleRouter

from .views import LocationViewSet

app_name = 'locations'

router = SimpleRouter()
router.register('', LocationViewSet, basename='location')

urlpatterns = [
    path('', include(router.urls)),
]
