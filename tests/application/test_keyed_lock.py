"""Testes para KeyedLock."""

from __future__ import annotations

import asyncio

import pytest

from domipets_bot.application.locks import KeyedLock


class TestKeyedLock:
    @pytest.mark.asyncio
    async def test_same_key_is_serialized(self):
        """Seções críticas da mesma chave nunca se sobrepõem."""
        locks = KeyedLock()
        events: list[str] = []

        async def worker(name: str) -> None:
            async with locks.hold("573001112233"):
                events.append(f"{name}:start")
                await asyncio.sleep(0)
                events.append(f"{name}:end")

        await asyncio.gather(worker("a"), worker("b"))

        assert events == ["a:start", "a:end", "b:start", "b:end"]

    @pytest.mark.asyncio
    async def test_different_keys_run_concurrently(self):
        """Chaves diferentes não esperam uma pela outra."""
        locks = KeyedLock()
        inside = asyncio.Event()
        released = asyncio.Event()

        async def holder() -> None:
            async with locks.hold("a"):
                inside.set()
                await released.wait()

        task = asyncio.create_task(holder())
        await inside.wait()
        async with locks.hold("b"):
            released.set()
        await task

    @pytest.mark.asyncio
    async def test_entries_are_removed_after_use(self):
        """Locks sem usuários são descartados."""
        locks = KeyedLock()
        async with locks.hold("a"):
            assert len(locks) == 1
        assert len(locks) == 0

    @pytest.mark.asyncio
    async def test_entry_is_removed_when_body_raises(self):
        locks = KeyedLock()
        with pytest.raises(RuntimeError):
            async with locks.hold("a"):
                raise RuntimeError("boom")
        assert len(locks) == 0
