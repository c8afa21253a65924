"""Tests for favorite location management."""

import pytest

from weathersync.storage.cache_store import LocalCacheStore
from weathersync.sync.favorites import FavoritesManager


@pytest.fixture
def favorites(cache: LocalCacheStore) -> FavoritesManager:
    return FavoritesManager(cache)


class TestFavoritesManager:
    def test_add_and_list(self, favorites: FavoritesManager):
        assert favorites.locations() == []
        assert favorites.add("London") is True
        assert favorites.add("Paris") is True
        assert favorites.locations() == ["London", "Paris"]

    def test_duplicate_is_noop(self, favorites: FavoritesManager):
        favorites.add("London")
        assert favorites.add("London") is False
        assert favorites.locations() == ["London"]

    def test_casing_updated(self, favorites: FavoritesManager):
        favorites.add("london")
        favorites.add("Paris")
        assert favorites.add("London") is True
        assert favorites.locations() == ["Paris", "London"]

    def test_blank_rejected(self, favorites: FavoritesManager):
        assert favorites.add("   ") is False
        assert favorites.locations() == []

    def test_is_favorite_ignores_case(self, favorites: FavoritesManager):
        favorites.add("New York")
        assert favorites.is_favorite("new york")
        assert not favorites.is_favorite("York")

    def test_remove_deletes_cached_data(self, favorites: FavoritesManager, cache: LocalCacheStore):
        favorites.add("Tokyo")
        cache.save_current("Tokyo", "{}")
        cache.save_forecast("Tokyo", "{}")
        assert favorites.remove("tokyo") is True
        assert favorites.locations() == []
        assert cache.load_current("Tokyo").text is None
        assert cache.load_forecast("Tokyo").text is None

    def test_remove_missing(self, favorites: FavoritesManager):
        assert favorites.remove("Nowhere") is False

    def test_toggle(self, favorites: FavoritesManager):
        assert favorites.toggle("Oslo") is True
        assert favorites.is_favorite("Oslo")
        assert favorites.toggle("Oslo") is False
        assert not favorites.is_favorite("Oslo")

    def test_persisted_across_instances(self, favorites: FavoritesManager, cache: LocalCacheStore):
        favorites.add("Lima")
        assert FavoritesManager(LocalCacheStore(cache.base_dir)).locations() == ["Lima"]
