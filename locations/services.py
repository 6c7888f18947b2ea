"""
Locations — Service Layer

Hierarchy management for directory locations (Country → Province →
City): validated create / update / delete, re-derivation of ancestor
references after a move, and cascades to directory posts.

Cascades are a sequence of independent, idempotent steps. A failing
step is logged and skipped; it never aborts the remaining steps or the
operation that triggered it.

@file locations/services.py
"""

import logging
from dataclasses import dataclass, field

from django.core.exceptions import ValidationError
from django.db import DatabaseError, transaction
from django.db.models import F, Q
from django.utils import timezone

from core.connectivity import ensure_online
from core.constants import AUDIT_ACTION_CREATE, AUDIT_ACTION_DELETE, AUDIT_ACTION_UPDATE
from core.exceptions import (
    BusinessRuleViolation,
    ConcurrentModificationError,
    InvalidStateTransition,
    ResourceNotFoundError,
)
from core.queries import query_with_fallback
from core.services import AuditService
from posts.models import Post

from .models import Location
from .tree import build_location_tree

logger = logging.getLogger('beinghappy')

COUNTRY = Location.LocationType.COUNTRY
PROVINCE = Location.LocationType.PROVINCE
CITY = Location.LocationType.CITY

# Post location fields cleared when a location of the given type is
# deleted. None means the whole location mapping is dropped.
POST_CASCADE_FIELDS = {
    COUNTRY: None,
    PROVINCE: ('province_id', 'province_name', 'city_id', 'city_name'),
    CITY: ('city_id', 'city_name'),
}

MISSING_PARENT_MESSAGES = {
    PROVINCE: 'A province must have a parent country.',
    CITY: 'A city must have a parent province.',
}

WRONG_PARENT_MESSAGES = {
    PROVINCE: 'Parent country not found. A province must have a country as parent.',
    CITY: 'Parent province not found. A city must have a province as parent.',
}


class _Unset:
    def __repr__(self):
        return 'UNSET'


UNSET = _Unset()


@dataclass
class CascadeReport:
    """Outcome of a location delete. Informational; failures are already logged."""

    location_id: str
    location_type: str
    posts_updated: int = 0
    posts_failed: list[str] = field(default_factory=list)
    descendants_deleted: int = 0
    descendants_failed: list[str] = field(default_factory=list)

    @property
    def complete(self) -> bool:
        return not self.posts_failed and not self.descendants_failed


def _actor(actor):
    return actor if getattr(actor, 'is_authenticated', False) else None


class LocationService:
    """Create, move, rename, retype and delete directory locations."""

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    @staticmethod
    def find(location_id) -> Location | None:
        if not location_id:
            return None
        try:
            return Location.objects.filter(pk=location_id).first()
        except (ValidationError, ValueError):
            return None

    @classmethod
    def get_location(cls, location_id) -> Location:
        location = cls.find(location_id)
        if location is None:
            raise ResourceNotFoundError(detail='Location not found.')
        return location

    @staticmethod
    def normalise_type(value) -> str:
        location_type = (value or '').strip().lower()
        if location_type not in Location.LocationType.values:
            raise BusinessRuleViolation(detail='Invalid type.')
        return location_type

    @staticmethod
    def ancestry_under(location_type: str, parent: Location) -> tuple:
        """(country_id, province_id) for a node of ``location_type`` placed under ``parent``."""
        if location_type == PROVINCE:
            return parent.pk, None
        if location_type == CITY:
            return parent.country_id or parent.parent_id, parent.pk
        return None, None

    @classmethod
    def resolve_parent(cls, location_type: str, parent_id) -> tuple:
        """
        Validate the parent for ``location_type`` and return
        (parent_id, country_id, province_id). Countries are always roots.
        """
        if location_type == COUNTRY:
            return None, None, None

        if not parent_id:
            raise BusinessRuleViolation(detail=MISSING_PARENT_MESSAGES[location_type])

        parent = cls.find(parent_id)
        expected = Location.PARENT_TYPE_MAP[location_type]
        if parent is None or parent.location_type != expected:
            raise BusinessRuleViolation(detail=WRONG_PARENT_MESSAGES[location_type])

        country_id, province_id = cls.ancestry_under(location_type, parent)
        return parent.pk, country_id, province_id

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    @staticmethod
    def list_locations() -> list[Location]:
        """All locations ordered by type, then name. Empty on failure."""
        return query_with_fallback(
            lambda: Location.objects.order_by('location_type', 'name'),
            lambda: sorted(Location.objects.all(), key=lambda loc: (loc.location_type, loc.name)),
            label='list_locations',
        )

    @classmethod
    def list_tree(cls) -> list[dict]:
        return build_location_tree(loc.as_node() for loc in cls.list_locations())

    @classmethod
    def get_children(cls, parent_id) -> list[Location]:
        parent = cls.find(parent_id)
        if parent is None:
            return []
        return query_with_fallback(
            lambda: Location.objects.filter(parent_id=parent.pk).order_by('name'),
            None,
            label='get_children',
        )

    @classmethod
    def get_hierarchy(cls, location_id) -> list[dict]:
        """Return the chain from the root country down to the given location."""
        chain = []
        current = cls.find(location_id)
        while current is not None:
            chain.insert(0, {
                'id': str(current.pk),
                'name': current.name,
                'type': current.location_type,
            })
            current = cls.find(current.parent_id)
        return chain

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    @classmethod
    def create_location(cls, *, name, location_type, parent_id=None, actor=None) -> Location:
        ensure_online('create locations')

        name = (name or '').strip()
        if not name or not (location_type or '').strip():
            raise BusinessRuleViolation(detail='Name and type are required.')
        location_type = cls.normalise_type(location_type)
        parent_pk, country_id, province_id = cls.resolve_parent(location_type, parent_id)

        with transaction.atomic():
            location = Location.objects.create(
                name=name,
                location_type=location_type,
                parent_id=parent_pk,
                country_id=country_id,
                province_id=province_id,
                created_by=_actor(actor),
            )
            AuditService.record(
                location,
                actor=actor,
                action=AUDIT_ACTION_CREATE,
                new_values=location.as_node(),
            )

        logger.info('Location %s (%s) created by %s.', location.pk, location_type, actor)
        return location

    # ------------------------------------------------------------------
    # Update
    # ------------------------------------------------------------------

    @classmethod
    def update_location(
        cls,
        *,
        location_id,
        name=UNSET,
        parent_id=UNSET,
        location_type=UNSET,
        expected_version=None,
        actor=None,
    ) -> Location:
        """
        Rename, move and / or retype a location.

        A type change is refused while the location has children. When
        the parent is supplied (or the type changes) the parent is
        re-validated against the effective type and ancestor references
        are recomputed; countries are forced back to the root.
        """
        ensure_online('update locations')

        with transaction.atomic():
            location = cls.find(location_id)
            if location is None:
                raise ResourceNotFoundError(detail='Location not found.')
            location = Location.objects.select_for_update().get(pk=location.pk)

            if expected_version is not None and expected_version != location.version:
                raise ConcurrentModificationError()

            old_values = location.as_node()
            new_type = location.location_type

            if location_type is not UNSET:
                new_type = cls.normalise_type(location_type)
                if new_type != location.location_type and location.children.exists():
                    raise InvalidStateTransition(
                        detail=(
                            'Cannot change type while location has child locations. '
                            'Remove or reparent children first.'
                        ),
                    )

            if name is not UNSET:
                name = (name or '').strip()
                if not name:
                    raise BusinessRuleViolation(detail='Name is required.')
                location.name = name

            moved = parent_id is not UNSET
            if moved or new_type != location.location_type:
                target_parent = parent_id if moved else location.parent_id
                (
                    location.parent_id,
                    location.country_id,
                    location.province_id,
                ) = cls.resolve_parent(new_type, target_parent)

            location.location_type = new_type
            location.version += 1
            location.updated_by = _actor(actor)
            location.save()

            AuditService.record(
                location,
                actor=actor,
                action=AUDIT_ACTION_UPDATE,
                old_values=old_values,
                new_values=location.as_node(),
            )

        if moved:
            cls._refresh_children(location)
        if {**location.as_node(), 'version': None} != {**old_values, 'version': None}:
            cls._sync_posts(location, previous_type=old_values['type'])

        logger.info('Location %s updated by %s.', location.pk, actor)
        return location

    @classmethod
    def _refresh_children(cls, location: Location) -> list[str]:
        """Re-derive country / province on every direct child. Returns failed child ids."""
        failed: list[str] = []
        try:
            children = list(Location.objects.filter(parent_id=location.pk))
        except DatabaseError as exc:
            logger.warning('Failed to load children of location %s: %s', location.pk, exc)
            return failed

        for child in children:
            country_id, province_id = cls.ancestry_under(child.location_type, location)
            try:
                with transaction.atomic():
                    Location.objects.filter(pk=child.pk).update(
                        country_id=country_id,
                        province_id=province_id,
                        version=F('version') + 1,
                        updated_at=timezone.now(),
                    )
            except DatabaseError as exc:
                logger.warning('Failed to update child location %s: %s', child.pk, exc)
                failed.append(str(child.pk))
        return failed

    @classmethod
    def _post_labels(cls, location: Location) -> dict:
        """Post location fields describing ``location`` and its ancestors."""
        labels = {}
        for entry in cls.get_hierarchy(location.pk):
            labels[f"{entry['type']}_id"] = entry['id']
            labels[f"{entry['type']}_name"] = entry['name']
        return labels

    @classmethod
    def _sync_posts(cls, location: Location, previous_type=None) -> list[str]:
        """
        Refresh names and ancestor ids on posts referencing ``location``.
        After a retype, posts still keyed on the old tier lose that tier's
        fields first (the delete policy for the old type). Returns failed
        post ids.
        """
        failed: list[str] = []
        location_pk = str(location.pk)
        retyped = previous_type is not None and previous_type != location.location_type
        lookup = Q(**{f'location__{location.location_type}_id': location_pk})
        if retyped:
            lookup |= Q(**{f'location__{previous_type}_id': location_pk})
        labels = cls._post_labels(location)
        try:
            posts = list(Post.objects.filter(lookup))
        except DatabaseError as exc:
            logger.warning('Failed to load posts referencing location %s: %s', location.pk, exc)
            return failed

        for post in posts:
            current = post.location or {}
            if retyped and current.get(f'{previous_type}_id') == location_pk:
                stale = POST_CASCADE_FIELDS[previous_type]
                current = {} if stale is None else {**current, **dict.fromkeys(stale)}
            post.location = {**current, **labels}
            try:
                with transaction.atomic():
                    post.save(update_fields=['location', 'updated_at'])
            except DatabaseError as exc:
                logger.warning('Failed to sync post %s with location %s: %s', post.pk, location.pk, exc)
                failed.append(str(post.pk))
        return failed

    # ------------------------------------------------------------------
    # Delete
    # ------------------------------------------------------------------

    @classmethod
    def delete_location(cls, *, location_id, actor=None) -> CascadeReport:
        """
        Delete a location, every descendant (depth-first, children
        before parents) and the matching references on posts:

          country  → post.location cleared entirely
          province → province / city fields cleared, country kept
          city     → city fields cleared
        """
        ensure_online('delete locations')

        target = cls.get_location(location_id)
        report = CascadeReport(location_id=str(target.pk), location_type=target.location_type)

        cls._clear_post_references(target, report)
        cls._delete_descendants(target.pk, report)

        try:
            with transaction.atomic():
                Location.objects.filter(pk=target.pk).delete()
                AuditService.record(
                    target,
                    actor=actor,
                    action=AUDIT_ACTION_DELETE,
                    old_values=target.as_node(),
                    new_values={
                        'descendants_deleted': report.descendants_deleted,
                        'posts_updated': report.posts_updated,
                    },
                )
        except DatabaseError as exc:
            logger.error('Failed to delete location %s: %s', target.pk, exc)
            raise

        if report.complete:
            logger.info('Location %s deleted by %s.', target.pk, actor)
        else:
            logger.warning(
                'Location %s deleted with partial cascade: posts_failed=%s descendants_failed=%s',
                target.pk, report.posts_failed, report.descendants_failed,
            )
        return report

    @staticmethod
    def _clear_post_references(target: Location, report: CascadeReport) -> None:
        fields = POST_CASCADE_FIELDS[target.location_type]
        key = f'location__{target.location_type}_id'
        try:
            posts = list(Post.objects.filter(**{key: str(target.pk)}))
        except DatabaseError as exc:
            logger.warning('Failed to load posts referencing location %s: %s', target.pk, exc)
            return

        for post in posts:
            if fields is None:
                post.location = None
            else:
                post.location = {**(post.location or {}), **dict.fromkeys(fields)}
            try:
                with transaction.atomic():
                    post.save(update_fields=['location', 'updated_at'])
                report.posts_updated += 1
            except DatabaseError as exc:
                logger.warning(
                    'Failed to update post %s on %s delete: %s',
                    post.pk, target.location_type, exc,
                )
                report.posts_failed.append(str(post.pk))

    @classmethod
    def _delete_descendants(cls, parent_id, report: CascadeReport) -> None:
        try:
            child_ids = list(Location.objects.filter(parent_id=parent_id).values_list('pk', flat=True))
        except DatabaseError as exc:
            logger.warning('Failed to load descendants of location %s: %s', parent_id, exc)
            return

        for child_id in child_ids:
            cls._delete_descendants(child_id, report)
            try:
                with transaction.atomic():
                    Location.objects.filter(pk=child_id).delete()
                report.descendants_deleted += 1
            except DatabaseError as exc:
                logger.warning('Failed to delete child location %s: %s', child_id, exc)
                report.descendants_failed.append(str(child_id))
