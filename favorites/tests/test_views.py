"""
Tests — Favorites API endpoints.

@file favorites/tests/test_views.py
"""

import pytest
from django.urls import reverse

from favorites.models import Favorite
from tests.factories import FavoriteFactory, PostFactory


pytestmark = pytest.mark.django_db


def _detail(name, post_id):
    return reverse(f'api-v1:favorites:favorite-{name}', kwargs={'post_id': post_id})


class TestFavoriteEndpoints:

    def test_requires_auth(self, api_client):
        resp = api_client.get(reverse('api-v1:favorites:favorite-list'))
        assert resp.status_code == 401

    def test_add_then_readd(self, authenticated_client, user):
        post = PostFactory(title='Breathe')
        url = reverse('api-v1:favorites:favorite-list')
        resp = authenticated_client.post(url, {'post_id': str(post.pk)}, format='json')
        assert resp.status_code == 201
        assert resp.data['data']['title'] == 'Breathe'
        resp = authenticated_client.post(url, {'post_id': str(post.pk)}, format='json')
        assert resp.status_code == 200
        assert Favorite.objects.filter(user=user).count() == 1

    def test_add_unknown_post(self, authenticated_client):
        resp = authenticated_client.post(
            reverse('api-v1:favorites:favorite-list'), {'post_id': 'missing'}, format='json',
        )
        assert resp.status_code == 404

    def test_add_offline(self, authenticated_client, offline):
        resp = authenticated_client.post(
            reverse('api-v1:favorites:favorite-list'), {'post_id': str(PostFactory().pk)}, format='json',
        )
        assert resp.status_code == 503
        assert resp.data['message'] == 'Online connection required to add favorites.'

    def test_list_with_meta(self, authenticated_client, user):
        FavoriteFactory(user=user, post=PostFactory(title='Evening calm'))
        FavoriteFactory(user=user, post=PostFactory(title='Morning walk'))
        FavoriteFactory()
        resp = authenticated_client.get(reverse('api-v1:favorites:favorite-list'), {'search': 'calm'})
        assert resp.status_code == 200
        assert [item['title'] for item in resp.data['data']] == ['Evening calm']
        assert resp.data['meta'] == {'count': 1, 'page': 1, 'page_size': 10, 'search': 'calm'}

    def test_list_rejects_bad_page(self, authenticated_client):
        resp = authenticated_client.get(reverse('api-v1:favorites:favorite-list'), {'page': 0})
        assert resp.status_code == 400

    def test_remove(self, authenticated_client, user):
        favorite = FavoriteFactory(user=user)
        resp = authenticated_client.delete(_detail('detail', favorite.post_id))
        assert resp.status_code == 204
        assert not Favorite.objects.filter(pk=favorite.pk).exists()

    def test_status(self, authenticated_client, user):
        favorite = FavoriteFactory(user=user)
        resp = authenticated_client.get(_detail('status', favorite.post_id))
        assert resp.data['data'] == {'post_id': str(favorite.post_id), 'favorited': True}
        other = PostFactory()
        resp = authenticated_client.get(_detail('status', other.pk))
        assert resp.data['data']['favorited'] is False
