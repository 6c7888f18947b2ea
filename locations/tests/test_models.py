"""
Locations — Model Tests

@file locations/tests/test_models.py
"""

import pytest
from django.db import IntegrityError

from locations.models import Location
from tests.factories import CityFactory, CountryFactory, ProvinceFactory


@pytest.mark.django_db
class TestLocation:
    def test_country_is_root(self):
        country = CountryFactory(name='Canada')
        assert country.location_type == 'country'
        assert country.parent_id is None

    def test_city_ancestry(self):
        city = CityFactory()
        province = Location.objects.get(pk=city.parent_id)
        assert city.province_id == province.pk
        assert city.country_id == province.parent_id

    def test_full_path(self):
        country = CountryFactory(name='Canada')
        province = ProvinceFactory(name='Ontario', parent=country)
        city = CityFactory(name='Toronto', parent=province)
        assert city.full_path == 'Canada > Ontario > Toronto'

    def test_full_path_skips_dangling_ancestor(self):
        city = CityFactory(name='Orphan')
        country = Location.objects.get(pk=city.country_id)
        Location.objects.filter(pk=city.province_id).delete()
        assert city.full_path == f'{country.name} > Orphan'

    def test_path_from_uses_given_names(self, django_assert_num_queries):
        city = CityFactory(name='Toronto')
        names = {city.country_id: 'Canada', city.province_id: 'Ontario'}
        with django_assert_num_queries(0):
            assert city.path_from(names) == 'Canada > Ontario > Toronto'

    def test_country_must_not_have_parent(self):
        other = CountryFactory()
        with pytest.raises(IntegrityError):
            Location.objects.create(name='Bad', location_type='country', parent=other)

    def test_city_must_have_parent(self):
        with pytest.raises(IntegrityError):
            Location.objects.create(name='Orphan City', location_type='city', parent=None)

    def test_as_node(self):
        city = CityFactory(name='Lyon')
        node = city.as_node()
        assert node['id'] == str(city.pk)
        assert node['type'] == 'city'
        assert node['parent_id'] == str(city.parent_id)
        assert node['version'] == 1
