"""Testes para SessionManager."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from unittest.mock import MagicMock

import pytest

from domipets_bot.application.session_manager import SessionManager
from domipets_bot.domain.session import ConversationSession, ConversationState
from domipets_bot.infra.session_contract import SessionStoreError
from domipets_bot.infra.session_store_memory import InMemorySessionStore
from tests.helpers.conversation import PHONE


@pytest.fixture()
def store() -> InMemorySessionStore:
    return InMemorySessionStore()


@pytest.fixture()
def manager(store) -> SessionManager:
    return SessionManager(store)


class TestGetOrCreate:
    @pytest.mark.asyncio
    async def test_new_session_starts_in_init_and_is_not_persisted(self, manager, store):
        """Sessão nova fica em INIT e só é gravada pelo motor."""
        session = await manager.get_or_create(PHONE)

        assert session.state == ConversationState.INIT
        assert session.identifier == PHONE
        assert store.load(PHONE) is None

    @pytest.mark.asyncio
    async def test_existing_session_is_loaded(self, manager, store):
        saved = ConversationSession.new(PHONE, state=ConversationState.SEARCH)
        store.save(saved)

        session = await manager.get_or_create(PHONE)

        assert session.state == ConversationState.SEARCH

    @pytest.mark.asyncio
    async def test_store_error_propagates(self):
        """Erro de backend sobe para o motor tratar como fatal."""
        broken = MagicMock()
        broken.load.side_effect = SessionStoreError("redis down")

        with pytest.raises(SessionStoreError):
            await SessionManager(broken).get_or_create(PHONE)


class TestReset:
    @pytest.mark.asyncio
    async def test_reset_persists_fresh_menu_session(self, manager, store):
        """Reset apaga o registro e grava sessão vazia em MENU."""
        old = ConversationSession.new(PHONE, state=ConversationState.VIEW_CART)
        old.error_count = 2
        store.save(old)
        now = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)

        session = await manager.reset(PHONE, now)

        assert session.state == ConversationState.MENU
        stored = store.load(PHONE)
        assert stored.state == ConversationState.MENU
        assert stored.error_count == 0
        assert stored.last_activity_at == now

    @pytest.mark.asyncio
    async def test_discard(self, manager, store):
        store.save(ConversationSession.new(PHONE))

        assert await manager.discard(PHONE) is True
        assert await manager.discard(PHONE) is False


class TestSweepAndList:
    @pytest.mark.asyncio
    async def test_sweep_removes_only_abandoned_sessions(self, manager, store):
        """Remove sessões sem atividade além do limite."""
        now = datetime.now(tz=UTC)
        store.save(ConversationSession.new("573000000001", now=now - timedelta(hours=3)))
        store.save(ConversationSession.new("573000000002", now=now))

        removed = await manager.sweep_inactive(timedelta(hours=1))

        assert removed == 1
        assert store.load("573000000001") is None
        assert store.load("573000000002") is not None

    @pytest.mark.asyncio
    async def test_list_all_newest_first(self, manager, store):
        now = datetime.now(tz=UTC)
        store.save(ConversationSession.new("573000000001", now=now - timedelta(minutes=5)))
        store.save(ConversationSession.new("573000000002", now=now))

        summaries = await manager.list_all()

        assert [s.identifier for s in summaries] == ["573000000002", "573000000001"]
        assert summaries[0].state == "INIT"
