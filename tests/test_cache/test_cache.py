"""Tests for the StateCache module."""

from __future__ import annotations

import threading
import time

import pytest

from authflow.cache import StateCache, pkce_key, state_key


@pytest.fixture()
def cache(tmp_path):
    """Create a StateCache pointing at tmp_path."""
    c = StateCache(tmp_path, default_ttl=300)
    yield c
    c.close()


# ------------------------------------------------------------------ #
# Keys
# ------------------------------------------------------------------ #


class TestKeys:
    def test_state_key_per_client(self) -> None:
        assert state_key("c1") == "state:c1"
        assert state_key("c1") != state_key("c2")

    def test_state_key_per_platform(self) -> None:
        assert state_key("c1", "GITHUB") == "state:c1:GITHUB"
        assert state_key("c1", "GITHUB") != state_key("c1", "GITEE")
        assert state_key("c1", "GITHUB") != state_key("c1")

    def test_pkce_key_does_not_collide_with_state(self) -> None:
        assert pkce_key("c1") != state_key("c1")


# ------------------------------------------------------------------ #
# Core put/get behaviour
# ------------------------------------------------------------------ #


class TestPutGet:
    def test_put_and_get(self, cache: StateCache) -> None:
        cache.put("state:c1", "xyz")
        assert cache.get("state:c1") == "xyz"

    def test_miss_returns_none(self, cache: StateCache) -> None:
        assert cache.get("state:missing") is None

    def test_put_replaces(self, cache: StateCache) -> None:
        cache.put("state:c1", "old")
        cache.put("state:c1", "new")
        assert cache.get("state:c1") == "new"
        assert len(cache) == 1

    def test_pop_reads_once(self, cache: StateCache) -> None:
        cache.put("pkce:c1", "verifier")
        assert cache.pop("pkce:c1") == "verifier"
        assert cache.pop("pkce:c1") is None

    def test_delete(self, cache: StateCache) -> None:
        cache.put("state:c1", "xyz")
        cache.delete("state:c1")
        assert cache.get("state:c1") is None
        cache.delete("state:c1")

    def test_clear(self, cache: StateCache) -> None:
        cache.put("a", "1")
        cache.put("b", "2")
        cache.clear()
        assert len(cache) == 0

    def test_persists_across_instances(self, tmp_path) -> None:
        first = StateCache(tmp_path)
        first.put("state:c1", "xyz")
        first.close()

        second = StateCache(tmp_path)
        try:
            assert second.get("state:c1") == "xyz"
        finally:
            second.close()


# ------------------------------------------------------------------ #
# Verification
# ------------------------------------------------------------------ #


class TestVerify:
    def test_match(self, cache: StateCache) -> None:
        cache.put("state:c1", "xyz")
        assert cache.verify("xyz", "state:c1") is True

    def test_mismatch(self, cache: StateCache) -> None:
        cache.put("state:c1", "xyz")
        assert cache.verify("abc", "state:c1") is False

    def test_miss_is_false_not_error(self, cache: StateCache) -> None:
        assert cache.verify("xyz", "state:never-stored") is False

    @pytest.mark.parametrize("presented", [None, ""])
    def test_empty_presented_value(self, cache: StateCache, presented) -> None:
        cache.put("state:c1", "xyz")
        assert cache.verify(presented, "state:c1") is False

    def test_verify_does_not_consume(self, cache: StateCache) -> None:
        cache.put("state:c1", "xyz")
        cache.verify("xyz", "state:c1")
        assert cache.get("state:c1") == "xyz"


class TestConsume:
    def test_match_succeeds_once(self, cache: StateCache) -> None:
        cache.put("state:c1", "xyz")

        assert cache.consume("xyz", "state:c1") is True
        assert cache.consume("xyz", "state:c1") is False
        assert cache.get("state:c1") is None

    def test_mismatch_leaves_entry(self, cache: StateCache) -> None:
        cache.put("state:c1", "xyz")

        assert cache.consume("forged", "state:c1") is False
        assert cache.get("state:c1") == "xyz"

    def test_miss_is_false_not_error(self, cache: StateCache) -> None:
        assert cache.consume("xyz", "state:never-stored") is False

    @pytest.mark.parametrize("presented", [None, ""])
    def test_empty_presented_value(self, cache: StateCache, presented) -> None:
        cache.put("state:c1", "xyz")

        assert cache.consume(presented, "state:c1") is False
        assert cache.get("state:c1") == "xyz"


# ------------------------------------------------------------------ #
# TTL expiry
# ------------------------------------------------------------------ #


class TestTTLExpiry:
    def test_entry_expires(self, cache: StateCache) -> None:
        """An entry is gone once its TTL elapses."""
        cache.put("state:c1", "xyz", ttl=1)
        assert cache.verify("xyz", "state:c1")

        time.sleep(1.5)

        assert cache.get("state:c1") is None
        assert cache.verify("xyz", "state:c1") is False

    def test_default_ttl_applies(self, tmp_path) -> None:
        short = StateCache(tmp_path / "short", default_ttl=1)
        try:
            short.put("state:c1", "xyz")
            time.sleep(1.5)
            assert short.get("state:c1") is None
        finally:
            short.close()


# ------------------------------------------------------------------ #
# Concurrency
# ------------------------------------------------------------------ #


class TestConcurrency:
    def test_concurrent_put_and_verify(self, cache: StateCache) -> None:
        """Readers racing writers only ever see a value some writer stored."""
        values = [f"state-{i}" for i in range(10)]
        cache.put("state:c1", values[0])
        seen: list[str] = []
        errors: list[Exception] = []

        def writer(value: str) -> None:
            try:
                for _ in range(20):
                    cache.put("state:c1", value)
            except Exception as exc:
                errors.append(exc)

        def reader() -> None:
            try:
                for _ in range(20):
                    value = cache.get("state:c1")
                    if value is not None:
                        seen.append(value)
                        assert cache.verify("not-a-state", "state:c1") is False
            except Exception as exc:
                errors.append(exc)

        threads = [threading.Thread(target=writer, args=(v,)) for v in values]
        threads += [threading.Thread(target=reader) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert errors == []
        assert set(seen) <= set(values)
        assert cache.get("state:c1") in values

    def test_concurrent_consume_succeeds_once(self, cache: StateCache) -> None:
        """Only one of many racing callbacks may consume a state."""
        cache.put("state:c1", "xyz")
        results: list[bool] = []
        errors: list[Exception] = []
        barrier = threading.Barrier(8)

        def consumer() -> None:
            try:
                barrier.wait()
                results.append(cache.consume("xyz", "state:c1"))
            except Exception as exc:
                errors.append(exc)

        threads = [threading.Thread(target=consumer) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert errors == []
        assert results.count(True) == 1
        assert results.count(False) == 7
