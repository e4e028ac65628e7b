import sys
import time
from datetime import timedelta

import pytest

from evento.cache import CacheEntry, CacheManager

URL = "https://example.com/api/events"


def test_generate_key_with_params():
    key = CacheManager.generate_key("GET", URL, [("page", "1"), ("size", "10")])
    assert key == URL + "|2|page=1|size=10"


def test_generate_key_with_numeric_verb_and_no_params():
    assert CacheManager.generate_key(4, URL, {}) == URL + "|4"
    assert CacheManager.generate_key(4, URL) == URL + "|4"


def test_generate_key_mapping_keeps_order():
    key = CacheManager.generate_key("post", URL, {"b": 2, "a": 1})
    assert key.endswith("|b=2|a=1")
    assert key == CacheManager.generate_key("POST", URL, [("b", 2), ("a", 1)])


def test_generate_key_unknown_verb():
    with pytest.raises(ValueError):
        CacheManager.generate_key("FETCH", URL, None)


def test_generate_stem_is_stable_and_decimal():
    stem = CacheManager.generate_stem(URL)
    assert stem == CacheManager.generate_stem(URL)
    assert stem.isdigit()
    assert stem != CacheManager.generate_stem(URL + "?x=1")


def test_insert_and_get_round_trip():
    cache = CacheManager()
    entry = CacheEntry({"id": 1}, ttl=60, size=10)
    cache.insert("a", entry)
    assert cache.get("a") is entry
    assert cache.get("missing") is None
    assert cache.current_size() == 10


def test_reinsert_replaces_size():
    cache = CacheManager()
    cache.insert("a", CacheEntry(1, ttl=60, size=10))
    cache.insert("a", CacheEntry(2, ttl=60, size=3))
    assert cache.current_size() == 3
    assert cache.get("a").data == 2
    assert len(cache) == 1


def test_eviction_drops_oldest():
    cache = CacheManager()
    half = CacheManager.MAX_CACHE_SIZE // 2
    cache.insert("a", CacheEntry("a", ttl=60, size=half))
    cache.insert("b", CacheEntry("b", ttl=60, size=half))
    cache.insert("c", CacheEntry("c", ttl=60, size=1))
    assert cache.get("a") is None
    assert cache.get("b").data == "b"
    assert cache.get("c").data == "c"
    assert cache.current_size() == half + 1
    assert cache.current_size() <= CacheManager.MAX_CACHE_SIZE


def test_reinsert_refreshes_position():
    cache = CacheManager()
    half = CacheManager.MAX_CACHE_SIZE // 2
    cache.insert("a", CacheEntry("a", ttl=60, size=half))
    cache.insert("b", CacheEntry("b", ttl=60, size=half))
    cache.insert("a", CacheEntry("a2", ttl=60, size=half))
    cache.insert("c", CacheEntry("c", ttl=60, size=1))
    assert "b" not in cache
    assert cache.get("a").data == "a2"


def test_expired_entry_is_removed():
    cache = CacheManager()
    cache.insert("old", CacheEntry("x", ttl=0, size=7))
    assert cache.current_size() == 7
    assert cache.get("old") is None
    assert cache.current_size() == 0
    assert "old" not in cache


def test_is_expired():
    fresh = CacheEntry("x", ttl=timedelta(minutes=1), size=1)
    stale = CacheEntry("x", ttl=10, size=1, insert_time=time.monotonic() - 20)
    assert CacheManager.is_expired(fresh) is False
    assert CacheManager.is_expired(stale) is True
    assert fresh.ttl == 60.0


def test_clear_memory_cache():
    cache = CacheManager()
    cache.insert("a", CacheEntry("a", ttl=60, size=5))
    cache.clear_memory_cache()
    assert cache.current_size() == 0
    assert cache.get("a") is None


def test_cache_dir_uses_xdg_cache_home(monkeypatch, tmp_path):
    monkeypatch.setattr(sys, "platform", "linux")
    monkeypatch.setenv("XDG_CACHE_HOME", str(tmp_path))
    directory = CacheManager.cache_dir()
    assert directory == (tmp_path / "evento").absolute()
    assert directory.is_dir()


def test_cache_dir_falls_back_to_home(monkeypatch, tmp_path):
    monkeypatch.setattr(sys, "platform", "linux")
    monkeypatch.delenv("XDG_CACHE_HOME", raising=False)
    monkeypatch.setenv("HOME", str(tmp_path))
    assert CacheManager.cache_dir() == (tmp_path / ".cache" / "evento").absolute()


def test_cache_dir_on_apple(monkeypatch, tmp_path):
    monkeypatch.setattr(sys, "platform", "darwin")
    monkeypatch.setenv("HOME", str(tmp_path))
    assert CacheManager.cache_dir() == (tmp_path / "Library" / "Caches" / "evento").absolute()


def test_cache_dir_without_home(monkeypatch):
    monkeypatch.setattr(sys, "platform", "linux")
    monkeypatch.delenv("XDG_CACHE_HOME", raising=False)
    monkeypatch.delenv("HOME", raising=False)
    assert CacheManager.cache_dir() is None


def test_clear_removes_directory(monkeypatch, tmp_path):
    monkeypatch.setattr(sys, "platform", "linux")
    monkeypatch.setenv("XDG_CACHE_HOME", str(tmp_path))
    directory = CacheManager.cache_dir()
    (directory / "file.bin").write_bytes(b"data")
    cache = CacheManager()
    cache.insert("a", CacheEntry("a", ttl=60, size=5))
    cache.clear()
    assert not directory.exists()
    assert cache.current_size() == 0