"""
Locations — Management Command: seed_locations

Loads a Country → Province → City tree from a JSON file.

Usage::

    python manage.py seed_locations --file locations.json

Expected JSON shape::

    [
      {
        "name": "Canada",
        "provinces": [
          {"name": "Ontario", "cities": ["Toronto", "Ottawa"]}
        ]
      }
    ]

Idempotent: nodes that already exist under the same parent are reused.

@file locations/management/commands/seed_locations.py
"""

import json
import logging
from collections import Counter

from django.core.management.base import BaseCommand, CommandError

from locations.models import Location
from locations.services import LocationService

logger = logging.getLogger('beinghappy')


class Command(BaseCommand):
    help = 'Seed the directory location tree from a JSON file.'

    def add_arguments(self, parser):
        parser.add_argument('--file', type=str, required=True, help='Path to the JSON file.')

    def handle(self, *args, **options):
        try:
            with open(options['file'], 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as exc:
            raise CommandError(f'Cannot read {options["file"]}: {exc}')

        if isinstance(data, dict):
            data = data.get('countries', [data])
        if not isinstance(data, list):
            raise CommandError('Unexpected JSON structure.')

        counter = Counter()
        for country_data in data:
            country = self._ensure(country_data, Location.LocationType.COUNTRY, None, counter)
            if country is None:
                continue
            for province_data in self._children(country_data, 'provinces'):
                province = self._ensure(province_data, Location.LocationType.PROVINCE, country, counter)
                if province is None:
                    continue
                for city_data in self._children(province_data, 'cities'):
                    self._ensure(city_data, Location.LocationType.CITY, province, counter)

        self.stdout.write(self.style.SUCCESS(
            f'Done. Countries: {counter["country"]}, Provinces: {counter["province"]}, '
            f'Cities: {counter["city"]} (created: {counter["created"]})'
        ))

    @staticmethod
    def _children(node, key):
        return node.get(key, []) if isinstance(node, dict) else []

    @staticmethod
    def _ensure(node, location_type, parent, counter):
        name = (node if isinstance(node, str) else node.get('name', '')).strip()
        if not name:
            return None

        location = Location.objects.filter(
            name=name,
            location_type=location_type,
            parent_id=parent.pk if parent else None,
        ).first()
        if location is None:
            location = LocationService.create_location(
                name=name,
                location_type=location_type,
                parent_id=parent.pk if parent else None,
            )
            counter['created'] += 1
        counter[location_type] += 1
        return location
