"""
Locations — Service Tests

Hierarchy validation, moves, retyping, optimistic concurrency and the
best-effort delete cascade.

@file locations/tests/test_services.py
"""

import pytest
from django.db import DatabaseError
from django.db.models.query import QuerySet

from core.exceptions import (
    BusinessRuleViolation,
    ConcurrentModificationError,
    InvalidStateTransition,
    OfflineError,
    ResourceNotFoundError,
)
from core.models import AuditLog
from locations.models import Location
from locations.services import LocationService
from posts.models import Post
from tests.factories import (
    CityFactory,
    CountryFactory,
    PostFactory,
    ProvinceFactory,
    directory_location,
)


@pytest.fixture
def tree(db):
    canada = CountryFactory(name='Canada')
    france = CountryFactory(name='France')
    ontario = ProvinceFactory(name='Ontario', parent=canada)
    quebec = ProvinceFactory(name='Quebec', parent=canada)
    toronto = CityFactory(name='Toronto', parent=ontario)
    ottawa = CityFactory(name='Ottawa', parent=ontario)
    return {
        'canada': canada, 'france': france,
        'ontario': ontario, 'quebec': quebec,
        'toronto': toronto, 'ottawa': ottawa,
    }


def _reload(location):
    return Location.objects.filter(pk=location.pk).first()


@pytest.mark.django_db
class TestCreateLocation:
    def test_create_country(self, admin_user):
        country = LocationService.create_location(name='  Kenya ', location_type='Country', actor=admin_user)
        assert country.name == 'Kenya'
        assert country.location_type == 'country'
        assert country.parent_id is None
        assert country.version == 1
        assert AuditLog.objects.filter(model_name='Location', object_id=str(country.pk)).exists()

    def test_country_ignores_supplied_parent(self, tree):
        country = LocationService.create_location(
            name='Spain', location_type='country', parent_id=tree['france'].pk,
        )
        assert country.parent_id is None
        assert country.country_id is None

    def test_create_province(self, tree):
        province = LocationService.create_location(
            name='Alberta', location_type='province', parent_id=str(tree['canada'].pk),
        )
        assert province.parent_id == tree['canada'].pk
        assert province.country_id == tree['canada'].pk
        assert province.province_id is None

    def test_create_city(self, tree):
        city = LocationService.create_location(
            name='Kingston', location_type='city', parent_id=tree['ontario'].pk,
        )
        assert city.parent_id == tree['ontario'].pk
        assert city.province_id == tree['ontario'].pk
        assert city.country_id == tree['canada'].pk

    @pytest.mark.parametrize('name,location_type', [('', 'country'), ('   ', 'country'), ('X', ''), (None, None)])
    def test_name_and_type_required(self, db, name, location_type):
        with pytest.raises(BusinessRuleViolation, match='Name and type are required.'):
            LocationService.create_location(name=name, location_type=location_type)

    def test_invalid_type(self, db):
        with pytest.raises(BusinessRuleViolation, match='Invalid type.'):
            LocationService.create_location(name='Somewhere', location_type='region')

    def test_province_requires_parent(self, db):
        with pytest.raises(BusinessRuleViolation, match='A province must have a parent country.'):
            LocationService.create_location(name='Ontario', location_type='province')

    def test_province_parent_must_be_country(self, tree):
        with pytest.raises(BusinessRuleViolation, match='Parent country not found'):
            LocationService.create_location(
                name='Nested', location_type='province', parent_id=tree['ontario'].pk,
            )

    def test_city_requires_parent(self, db):
        with pytest.raises(BusinessRuleViolation, match='A city must have a parent province.'):
            LocationService.create_location(name='Lost', location_type='city')

    def test_city_parent_must_be_province(self, tree):
        with pytest.raises(BusinessRuleViolation, match='Parent province not found'):
            LocationService.create_location(
                name='Direct', location_type='city', parent_id=tree['canada'].pk,
            )

    def test_unknown_or_malformed_parent(self, tree):
        for parent_id in ('not-a-uuid', '00000000-0000-0000-0000-000000000000'):
            with pytest.raises(BusinessRuleViolation):
                LocationService.create_location(name='X', location_type='city', parent_id=parent_id)

    def test_offline_blocks_writes(self, db, offline):
        with pytest.raises(OfflineError, match='Online connection required to create locations.'):
            LocationService.create_location(name='Kenya', location_type='country')
        assert not Location.objects.exists()


@pytest.mark.django_db
class TestUpdateLocation:
    def test_rename_bumps_version(self, tree):
        updated = LocationService.update_location(location_id=tree['toronto'].pk, name='Toronto City')
        assert updated.name == 'Toronto City'
        assert updated.version == 2

    def test_empty_name_rejected(self, tree):
        with pytest.raises(BusinessRuleViolation, match='Name is required.'):
            LocationService.update_location(location_id=tree['toronto'].pk, name='  ')

    def test_unknown_location(self, db):
        with pytest.raises(ResourceNotFoundError):
            LocationService.update_location(location_id='00000000-0000-0000-0000-000000000000', name='X')

    def test_stale_version_rejected(self, tree):
        LocationService.update_location(location_id=tree['toronto'].pk, name='T1')
        with pytest.raises(ConcurrentModificationError):
            LocationService.update_location(location_id=tree['toronto'].pk, name='T2', expected_version=1)
        assert _reload(tree['toronto']).name == 'T1'

    def test_matching_version_accepted(self, tree):
        updated = LocationService.update_location(
            location_id=tree['toronto'].pk, name='T1', expected_version=1,
        )
        assert updated.version == 2

    def test_move_city_to_other_province(self, tree):
        moved = LocationService.update_location(
            location_id=tree['toronto'].pk, parent_id=tree['quebec'].pk,
        )
        assert moved.parent_id == tree['quebec'].pk
        assert moved.province_id == tree['quebec'].pk
        assert moved.country_id == tree['canada'].pk

    def test_move_city_under_country_rejected(self, tree):
        with pytest.raises(BusinessRuleViolation):
            LocationService.update_location(location_id=tree['toronto'].pk, parent_id=tree['canada'].pk)

    def test_move_province_rederives_children(self, tree):
        LocationService.update_location(location_id=tree['ontario'].pk, parent_id=tree['france'].pk)

        ontario = _reload(tree['ontario'])
        assert ontario.country_id == tree['france'].pk
        for city in ('toronto', 'ottawa'):
            child = _reload(tree[city])
            assert child.province_id == ontario.pk
            assert child.country_id == tree['france'].pk
            assert child.version == 2

    def test_country_stays_root(self, tree):
        updated = LocationService.update_location(
            location_id=tree['france'].pk, parent_id=tree['canada'].pk,
        )
        assert updated.parent_id is None
        assert updated.country_id is None

    def test_type_change_blocked_with_children(self, tree):
        with pytest.raises(InvalidStateTransition, match='Cannot change type while location has child locations'):
            LocationService.update_location(location_id=tree['ontario'].pk, location_type='city')

    def test_same_type_with_children_allowed(self, tree):
        updated = LocationService.update_location(location_id=tree['ontario'].pk, location_type='Province')
        assert updated.location_type == 'province'

    def test_retype_leaf_revalidates_existing_parent(self, tree):
        with pytest.raises(BusinessRuleViolation, match='Parent country not found'):
            LocationService.update_location(location_id=tree['toronto'].pk, location_type='province')
        assert _reload(tree['toronto']).location_type == 'city'

    def test_retype_leaf_with_new_parent(self, tree):
        updated = LocationService.update_location(
            location_id=tree['toronto'].pk, location_type='province', parent_id=tree['france'].pk,
        )
        assert updated.location_type == 'province'
        assert updated.parent_id == tree['france'].pk
        assert updated.country_id == tree['france'].pk
        assert updated.province_id is None

    def test_retype_leaf_moves_posts_to_new_tier(self, tree):
        post = PostFactory(post_type='directory', location=directory_location(tree['toronto']))
        LocationService.update_location(
            location_id=tree['toronto'].pk, location_type='province', parent_id=tree['france'].pk,
        )
        post.refresh_from_db()
        assert post.location['city_id'] is None
        assert post.location['city_name'] is None
        assert post.location['province_id'] == str(tree['toronto'].pk)
        assert post.location['province_name'] == 'Toronto'
        assert post.location['country_id'] == str(tree['france'].pk)
        assert post.location['country_name'] == 'France'

    def test_retyped_location_delete_clears_its_posts(self, tree):
        post = PostFactory(post_type='directory', location=directory_location(tree['toronto']))
        LocationService.update_location(
            location_id=tree['toronto'].pk, location_type='province', parent_id=tree['france'].pk,
        )
        LocationService.delete_location(location_id=tree['toronto'].pk)
        post.refresh_from_db()
        assert str(tree['toronto'].pk) not in post.location.values()
        assert post.location['country_id'] == str(tree['france'].pk)

    def test_retype_leaf_to_country(self, tree):
        updated = LocationService.update_location(location_id=tree['quebec'].pk, location_type='country')
        assert updated.parent_id is None
        assert updated.country_id is None

    def test_rename_syncs_posts(self, tree):
        post = PostFactory(post_type='directory', location=directory_location(tree['toronto']))
        LocationService.update_location(location_id=tree['ontario'].pk, name='Ontario Province')
        post.refresh_from_db()
        assert post.location['province_name'] == 'Ontario Province'
        assert post.location['city_name'] == 'Toronto'

    def test_offline_blocks_update(self, tree, offline):
        with pytest.raises(OfflineError):
            LocationService.update_location(location_id=tree['toronto'].pk, name='X')


@pytest.mark.django_db
class TestDeleteLocation:
    def test_delete_city_clears_city_fields(self, tree):
        post = PostFactory(post_type='directory', location=directory_location(tree['toronto']))
        report = LocationService.delete_location(location_id=tree['toronto'].pk)

        post.refresh_from_db()
        assert post.location['city_id'] is None
        assert post.location['city_name'] is None
        assert post.location['province_id'] == str(tree['ontario'].pk)
        assert post.location['country_id'] == str(tree['canada'].pk)
        assert report.posts_updated == 1
        assert report.complete
        assert _reload(tree['toronto']) is None

    def test_delete_province_cascades(self, tree):
        post = PostFactory(post_type='directory', location=directory_location(tree['ottawa']))
        report = LocationService.delete_location(location_id=tree['ontario'].pk)

        post.refresh_from_db()
        assert post.location['country_id'] == str(tree['canada'].pk)
        assert post.location['country_name'] == 'Canada'
        for key in ('province_id', 'province_name', 'city_id', 'city_name'):
            assert post.location[key] is None
        assert report.descendants_deleted == 2
        assert not Location.objects.filter(pk__in=[tree['toronto'].pk, tree['ottawa'].pk]).exists()
        assert _reload(tree['quebec']) is not None

    def test_delete_country_removes_subtree_and_post_locations(self, tree):
        post = PostFactory(post_type='directory', location=directory_location(tree['toronto']))
        unrelated = PostFactory(post_type='directory', location=None)
        report = LocationService.delete_location(location_id=tree['canada'].pk)

        post.refresh_from_db()
        unrelated.refresh_from_db()
        assert post.location is None
        assert report.descendants_deleted == 4
        assert list(Location.objects.values_list('name', flat=True)) == ['France']

    def test_delete_unknown(self, db):
        with pytest.raises(ResourceNotFoundError):
            LocationService.delete_location(location_id='00000000-0000-0000-0000-000000000000')

    def test_failed_post_update_does_not_abort(self, tree, monkeypatch):
        bad = PostFactory(post_type='directory', location=directory_location(tree['toronto']))
        good = PostFactory(post_type='directory', location=directory_location(tree['toronto']))
        original_save = Post.save

        def flaky_save(self, *args, **kwargs):
            if self.pk == bad.pk:
                raise DatabaseError('write rejected')
            return original_save(self, *args, **kwargs)

        monkeypatch.setattr(Post, 'save', flaky_save)
        report = LocationService.delete_location(location_id=tree['toronto'].pk)

        assert report.posts_failed == [str(bad.pk)]
        assert report.posts_updated == 1
        assert not report.complete
        assert _reload(tree['toronto']) is None
        good.refresh_from_db()
        assert good.location['city_id'] is None

    def test_failed_descendant_delete_does_not_abort(self, tree, monkeypatch):
        stuck = tree['toronto']
        original_delete = QuerySet.delete

        def flaky_delete(self):
            if self.model is Location and list(self.values_list('pk', flat=True)) == [stuck.pk]:
                raise DatabaseError('delete rejected')
            return original_delete(self)

        monkeypatch.setattr(QuerySet, 'delete', flaky_delete)
        report = LocationService.delete_location(location_id=tree['ontario'].pk)

        assert report.descendants_failed == [str(stuck.pk)]
        assert report.descendants_deleted == 1
        assert _reload(tree['ontario']) is None
        assert _reload(tree['ottawa']) is None
        assert _reload(stuck) is not None

    def test_delete_is_audited(self, tree, admin_user):
        LocationService.delete_location(location_id=tree['quebec'].pk, actor=admin_user)
        entry = AuditLog.objects.get(model_name='Location', object_id=str(tree['quebec'].pk), action='DELETE')
        assert entry.actor == admin_user
        assert entry.old_values['name'] == 'Quebec'

    def test_offline_blocks_delete(self, tree, offline):
        with pytest.raises(OfflineError, match='delete locations'):
            LocationService.delete_location(location_id=tree['quebec'].pk)
        assert _reload(tree['quebec']) is not None


@pytest.mark.django_db
class TestReads:
    def test_list_locations_ordered(self, tree):
        names = [loc.name for loc in LocationService.list_locations()]
        assert names == ['Ottawa', 'Toronto', 'Canada', 'France', 'Ontario', 'Quebec']

    def test_list_tree(self, tree):
        roots = LocationService.list_tree()
        assert [root['name'] for root in roots] == ['Canada', 'France']
        assert [p['name'] for p in roots[0]['children']] == ['Ontario', 'Quebec']
        assert [c['name'] for c in roots[0]['children'][0]['children']] == ['Ottawa', 'Toronto']

    def test_list_tree_empty(self, db):
        assert LocationService.list_tree() == []

    def test_get_children(self, tree):
        assert [c.name for c in LocationService.get_children(tree['ontario'].pk)] == ['Ottawa', 'Toronto']
        assert LocationService.get_children('bogus') == []

    def test_get_hierarchy(self, tree):
        chain = LocationService.get_hierarchy(tree['toronto'].pk)
        assert [entry['name'] for entry in chain] == ['Canada', 'Ontario', 'Toronto']
        assert [entry['type'] for entry in chain] == ['country', 'province', 'city']

    def test_get_hierarchy_unknown(self, db):
        assert LocationService.get_hierarchy('00000000-0000-0000-0000-000000000000') == []
