"""Testes para os stores de dedupe (memória e Redis)."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from domipets_bot.config.settings import Settings
from domipets_bot.infra.dedupe import (
    DedupeError,
    InMemoryDedupeStore,
    RedisDedupeStore,
    create_dedupe_store,
)


class TestInMemoryDedupeStore:
    def test_first_mark_is_new(self):
        store = InMemoryDedupeStore()

        assert store.mark_if_new("wamid.1") is True
        assert store.mark_if_new("wamid.1") is False

    def test_clear_allows_new_mark(self):
        """clear desfaz a marca (rollback do trabalho protegido)."""
        store = InMemoryDedupeStore()
        store.mark_if_new("order-commit:abc")

        assert store.clear("order-commit:abc") is True
        assert store.mark_if_new("order-commit:abc") is True

    def test_expired_keys_are_forgotten(self):
        store = InMemoryDedupeStore(ttl_seconds=-1)
        store.mark_if_new("wamid.1")

        assert store.mark_if_new("wamid.1") is True


class TestRedisDedupeStore:
    def test_mark_uses_set_nx_with_ttl(self):
        """Deve usar SET NX EX com prefixo."""
        redis_client = MagicMock()
        redis_client.set.return_value = True
        store = RedisDedupeStore(redis_client, ttl_seconds=60)

        assert store.mark_if_new("wamid.1") is True
        redis_client.set.assert_called_once_with("dedupe:wamid.1", "1", nx=True, ex=60)

    def test_duplicate(self):
        redis_client = MagicMock()
        redis_client.set.return_value = None

        assert RedisDedupeStore(redis_client).mark_if_new("wamid.1") is False

    def test_fail_closed_raises(self):
        """Erro do Redis em modo fail-closed levanta DedupeError."""
        redis_client = MagicMock()
        redis_client.set.side_effect = ConnectionError("down")

        with pytest.raises(DedupeError):
            RedisDedupeStore(redis_client, fail_closed=True).mark_if_new("wamid.1")

    def test_fail_open_treats_as_new(self):
        redis_client = MagicMock()
        redis_client.set.side_effect = ConnectionError("down")

        assert RedisDedupeStore(redis_client, fail_closed=False).mark_if_new("wamid.1") is True

    def test_clear(self):
        redis_client = MagicMock()
        redis_client.delete.return_value = 1

        assert RedisDedupeStore(redis_client).clear("wamid.1") is True
        redis_client.delete.assert_called_once_with("dedupe:wamid.1")


class TestCreateDedupeStore:
    def test_memory(self):
        store = create_dedupe_store(Settings(dedupe_backend="memory", dedupe_ttl_seconds=30))

        assert isinstance(store, InMemoryDedupeStore)
        assert store.ttl_seconds == 30

    def test_redis_requires_client(self):
        with pytest.raises(ValueError):
            create_dedupe_store(Settings(dedupe_backend="redis"))

    def test_redis(self):
        store = create_dedupe_store(Settings(dedupe_backend="redis"), redis_client=MagicMock())

        assert isinstance(store, RedisDedupeStore)

    def test_unknown_backend(self):
        with pytest.raises(ValueError):
            create_dedupe_store(Settings(dedupe_backend="memcached"))
