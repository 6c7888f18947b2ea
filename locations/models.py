"""
Locations — Models

Self-referencing Location model for the directory's three tiers:
Country → Province → City.

Each node keeps denormalised ancestor references (country, province)
so directory posts and filters never need to walk the tree. References
are stored without database-level foreign keys: cascades are
best-effort, and a failed step may leave a dangling reference that
readers must tolerate.

@file locations/models.py
"""

from django.db import models
from django.utils.translation import gettext_lazy as _

from core.models import BaseModel


class Location(BaseModel):
    """
    One node of the directory location tree.

    Invariants (enforced by LocationService):
      COUNTRY  → parent, country, province all NULL
      PROVINCE → parent is a COUNTRY, country == parent, province NULL
      CITY     → parent is a PROVINCE, province == parent,
                 country == that province's country
    """

    class LocationType(models.TextChoices):
        COUNTRY = 'country', _('Country')
        PROVINCE = 'province', _('Province')
        CITY = 'city', _('City')

    PARENT_TYPE_MAP = {
        'province': 'country',
        'city': 'province',
    }

    name = models.CharField(_('name'), max_length=150)
    location_type = models.CharField(
        _('type'), max_length=10,
        choices=LocationType.choices, db_index=True,
    )
    parent = models.ForeignKey(
        'self',
        null=True, blank=True,
        on_delete=models.DO_NOTHING,
        db_constraint=False,
        related_name='children',
        verbose_name=_('parent'),
    )
    country = models.ForeignKey(
        'self',
        null=True, blank=True,
        on_delete=models.DO_NOTHING,
        db_constraint=False,
        related_name='+',
        verbose_name=_('country'),
    )
    province = models.ForeignKey(
        'self',
        null=True, blank=True,
        on_delete=models.DO_NOTHING,
        db_constraint=False,
        related_name='+',
        verbose_name=_('province'),
    )
    version = models.PositiveIntegerField(
        _('version'), default=1,
        help_text=_('Incremented on every mutation; used for optimistic concurrency.'),
    )

    class Meta:
        verbose_name = _('location')
        verbose_name_plural = _('locations')
        ordering = ['location_type', 'name']
        indexes = [
            models.Index(fields=['location_type', 'name']),
            models.Index(fields=['parent']),
            models.Index(fields=['country']),
            models.Index(fields=['province']),
        ]
        constraints = [
            models.CheckConstraint(
                condition=(
                    models.Q(location_type='country', parent__isnull=True)
                    | models.Q(location_type__in=['province', 'city'], parent__isnull=False)
                ),
                name='location_valid_parent_nullability',
            ),
        ]

    def __str__(self):
        return f'{self.name} ({self.get_location_type_display()})'

    def ancestor_ids(self) -> list:
        """Stored country and province ids, root first."""
        return [pk for pk in (self.country_id, self.province_id) if pk]

    def path_from(self, names) -> str:
        """Hierarchy path built from an ``{id: name}`` map; unknown ancestors are skipped."""
        parts = [names[pk] for pk in self.ancestor_ids() if pk in names]
        return ' > '.join([*parts, self.name])

    @property
    def full_path(self) -> str:
        """Return the hierarchy path, e.g. 'Canada > Ontario > Toronto'."""
        names = dict(Location.objects.filter(pk__in=self.ancestor_ids()).values_list('pk', 'name'))
        return self.path_from(names)

    def as_node(self) -> dict:
        """Plain mapping consumed by the tree builder and the audit log."""
        return {
            'id': str(self.pk),
            'name': self.name,
            'type': self.location_type,
            'parent_id': str(self.parent_id) if self.parent_id else None,
            'country_id': str(self.country_id) if self.country_id else None,
            'province_id': str(self.province_id) if self.province_id else None,
            'version': self.version,
        }
