"""
Tests for the result cache.
"""
import asyncio
import pytest
from unittest.mock import patch

from services.cache import ResultCache
from conftest import FakeClock, make_envelope


class TestResultCache:
    """Test cases for ResultCache."""

    def setup_method(self):
        """Set up test fixtures."""
        self.clock = FakeClock()
        self.cache = ResultCache(ttl_seconds=3600, check_period=600, clock=self.clock)

    def test_set_then_get_returns_same_envelope(self):
        """A value read back within the TTL is the stored object."""
        envelope = make_envelope(video_id="dQw4w9WgXcQ")

        assert self.cache.set("dQw4w9WgXcQ", envelope) is True
        assert self.cache.get("dQw4w9WgXcQ") is envelope

    def test_get_missing_key(self):
        """Unknown keys are misses."""
        assert self.cache.get("missing") is None

    def test_entry_expires_after_ttl(self):
        """An unrefreshed key is absent once the TTL has elapsed."""
        self.cache.set("abc123", make_envelope())

        self.clock.advance(3599)
        assert self.cache.get("abc123") is not None

        self.clock.advance(1)
        assert self.cache.get("abc123") is None

    def test_expired_entry_is_miss_before_sweep(self):
        """Logical expiry wins even if the sweeper has not run."""
        self.cache.set("abc123", make_envelope())
        self.clock.advance(4000)

        assert self.cache.size() == 1
        assert self.cache.get("abc123") is None
        assert self.cache.size() == 0

    def test_set_resets_ttl(self):
        """Overwriting a key starts a new TTL window."""
        self.cache.set("abc123", make_envelope(title="first"))
        self.clock.advance(3000)
        self.cache.set("abc123", make_envelope(title="second"))
        self.clock.advance(3000)

        cached = self.cache.get("abc123")
        assert cached is not None
        assert cached.title == "second"

    def test_delete(self):
        """Delete reports how many entries were removed."""
        self.cache.set("abc123", make_envelope())

        assert self.cache.delete("abc123") == 1
        assert self.cache.delete("abc123") == 0
        assert self.cache.get("abc123") is None

    def test_clear(self):
        """Clear empties the cache."""
        self.cache.set("a", make_envelope())
        self.cache.set("b", make_envelope())

        self.cache.clear()

        assert self.cache.size() == 0
        assert self.cache.keys() == []

    def test_keys_excludes_expired(self):
        """Only live keys are listed."""
        self.cache.set("old", make_envelope())
        self.clock.advance(3000)
        self.cache.set("new", make_envelope())
        self.clock.advance(1000)

        assert self.cache.keys() == ["new"]

    def test_sweep_removes_only_expired(self):
        """Sweep reclaims expired entries and leaves live ones."""
        self.cache.set("old", make_envelope())
        self.clock.advance(3000)
        self.cache.set("new", make_envelope())
        self.clock.advance(1000)

        assert self.cache.sweep() == 1
        assert self.cache.size() == 1
        assert self.cache.get("new") is not None

    def test_stats(self):
        """Hit, miss and set counters are tracked."""
        self.cache.set("abc123", make_envelope())
        self.cache.get("abc123")
        self.cache.get("nope")

        stats = self.cache.get_stats()

        assert stats["hits"] == 1
        assert stats["misses"] == 1
        assert stats["sets"] == 1
        assert stats["keys"] == 1
        assert stats["ttl"] == 3600


class TestCacheSweeper:
    """Test cases for the background sweeper."""

    @pytest.mark.asyncio
    async def test_run_sweeper_sweeps_until_cancelled(self):
        """The sweeper calls sweep on every period and stops on cancel."""
        cache = ResultCache(ttl_seconds=10, check_period=0)

        with patch.object(cache, "sweep", wraps=cache.sweep) as sweep:
            task = asyncio.create_task(cache.run_sweeper())
            for _ in range(5):
                await asyncio.sleep(0)
            task.cancel()
            with pytest.raises(asyncio.CancelledError):
                await task

        assert sweep.call_count >= 1


class TestGlobalCache:
    """Test the module-level cache instance."""

    def test_global_cache_uses_config(self):
        """The shared cache is built from configuration."""
        from services.cache import result_cache
        from config import config

        assert isinstance(result_cache, ResultCache)
        assert result_cache.ttl == config.cache_ttl
        assert result_cache.check_period == config.cache_check_period
