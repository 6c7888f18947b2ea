"""
Locations — Serializers

Read serializers for flat and nested location payloads, and input
serializers validated by LocationService. Hierarchy rules are enforced
by the service, not here.

@file locations/serializers.py
"""

from rest_framework import serializers

from .models import Location


class LocationReadSerializer(serializers.ModelSerializer):
    type = serializers.CharField(source='location_type', read_only=True)
    parent_id = serializers.UUIDField(read_only=True)
    country_id = serializers.UUIDField(read_only=True)
    province_id = serializers.UUIDField(read_only=True)
    full_path = serializers.SerializerMethodField()

    class Meta:
        model = Location
        fields = [
            'id', 'name', 'type',
            'parent_id', 'country_id', 'province_id',
            'full_path', 'version', 'created_at', 'updated_at',
        ]
        read_only_fields = fields

    def get_full_path(self, obj):
        names = self.context.get('ancestor_names')
        return obj.path_from(names) if names is not None else obj.full_path


class LocationTreeNodeSerializer(serializers.Serializer):
    """Nested node produced by build_location_tree."""

    id = serializers.CharField()
    name = serializers.CharField()
    type = serializers.CharField()
    parent_id = serializers.CharField(allow_null=True)
    country_id = serializers.CharField(allow_null=True)
    province_id = serializers.CharField(allow_null=True)
    children = serializers.SerializerMethodField()

    def get_children(self, obj):
        return LocationTreeNodeSerializer(obj.get('children', []), many=True).data


class LocationCreateSerializer(serializers.Serializer):
    name = serializers.CharField(required=False, default='', allow_blank=True, trim_whitespace=False)
    type = serializers.CharField(required=False, default='', allow_blank=True)
    parent_id = serializers.CharField(required=False, allow_null=True, allow_blank=True)


class LocationUpdateSerializer(serializers.Serializer):
    """Partial update. Omitted fields are left untouched."""

    name = serializers.CharField(required=False, allow_blank=True, trim_whitespace=False)
    type = serializers.CharField(required=False)
    parent_id = serializers.CharField(required=False, allow_null=True, allow_blank=True)
    expected_version = serializers.IntegerField(required=False, min_value=1)
