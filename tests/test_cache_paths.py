"""Tests for cache buckets, shards and entries."""

from pathlib import Path

import pytest

from gemfetch.cache import Cache, CacheBucket, CacheEntry, CacheShard


class TestCacheBucket:
    """Tests for CacheBucket."""

    def test_display(self):
        """Test that buckets render as their versioned directory name."""
        assert str(CacheBucket.RUBY) == "ruby-v0"
        assert str(CacheBucket.GEM) == "gem-v0"

    def test_iteration(self):
        """Test iterating over all buckets."""
        buckets = list(CacheBucket.iter())
        assert len(buckets) == 2
        assert CacheBucket.RUBY in buckets
        assert CacheBucket.GEM in buckets

    def test_is_bucket_name(self):
        """Test recognizing current bucket directory names."""
        assert CacheBucket.is_bucket_name("gem-v0")
        assert not CacheBucket.is_bucket_name("gem-v-0")
        assert not CacheBucket.is_bucket_name("gem")


class TestCacheEntry:
    """Tests for CacheEntry."""

    def test_creation(self):
        """Test creating an entry from a directory and a file name."""
        entry = CacheEntry.new("/base/path", "file.json")
        assert entry.path == Path("/base/path/file.json")
        assert entry.dir == Path("/base/path")

    def test_from_path(self):
        """Test creating an entry from a full path."""
        entry = CacheEntry.from_path("/base/path/file.json")
        assert entry == CacheEntry.new("/base/path", "file.json")

    def test_with_file(self):
        """Test deriving a sibling entry."""
        entry = CacheEntry.new("/base/path", "file.json")
        assert entry.with_file("other.json").path == Path("/base/path/other.json")

    def test_shard(self):
        """Test recovering the owning shard."""
        entry = CacheEntry.new("/base/path/subdir", "file.json")
        assert entry.shard() == CacheShard("/base/path/subdir")

    def test_fspath(self):
        """Test that entries can be passed to os functions."""
        entry = CacheEntry.new("/base", "file")
        assert Path(entry) == Path("/base/file")

    @pytest.mark.parametrize("path", ["/", "/file.json", "file.json"])
    def test_entry_requires_parent(self, path):
        """Test that entries without a non-root parent are rejected."""
        with pytest.raises(ValueError, match="no parent"):
            CacheEntry.from_path(path)


class TestCacheShard:
    """Tests for CacheShard."""

    def test_entry_and_nested_shard(self):
        """Test deriving entries and nested shards."""
        shard = CacheShard("/base/cache")
        assert shard.entry("file.json").path == Path("/base/cache/file.json")
        assert shard.shard("subdir").path == Path("/base/cache/subdir")

    def test_equality_and_ordering(self):
        """Test that equality and ordering follow the path."""
        assert CacheShard("/a") == CacheShard("/a")
        assert CacheShard("/a") != CacheShard("/b")
        assert CacheShard("/a") < CacheShard("/b")
        assert sorted([CacheShard("/b"), CacheShard("/a")]) == [CacheShard("/a"), CacheShard("/b")]
        assert len({CacheShard("/a"), CacheShard("/a")}) == 1


class TestCacheAddressing:
    """Tests for computing locations from a Cache."""

    def test_bucket_paths(self):
        """Test bucket directories below the root."""
        cache = Cache.from_path("/test/cache")
        assert cache.bucket(CacheBucket.RUBY) == Path("/test/cache/ruby-v0")
        assert cache.bucket_path(CacheBucket.GEM) == Path("/test/cache/gem-v0")

    def test_shard(self):
        """Test computing a shard."""
        cache = Cache.from_path("/test/cache")
        shard = cache.shard(CacheBucket.GEM, "gems")
        assert shard.path == Path("/test/cache/gem-v0/gems")

    def test_entry(self):
        """Test computing an entry."""
        cache = Cache.from_path("/test/cache")
        entry = cache.entry(CacheBucket.RUBY, "interpreters", "ruby-3.3.0.json")
        assert entry.path == Path("/test/cache/ruby-v0/interpreters/ruby-3.3.0.json")

    def test_no_io(self, tmp_path):
        """Test that computing locations does not touch the filesystem."""
        cache = Cache.from_path(tmp_path / "cache")
        cache.entry(CacheBucket.GEM, "gems", "x.gem")
        assert not (tmp_path / "cache").exists()
