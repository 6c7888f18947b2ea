"""
Favorites — Application Configuration
"""

from django.apps import AppConfig


class FavoritesConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'favorites'
    verbose_name = 'Favorites'
