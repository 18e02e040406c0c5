"""Protocolo de entrega de respostas ao canal."""

from __future__ import annotations

from abc import ABC, abstractmethod

from domipets_bot.domain.responses import ResponseDescriptor


class Composer(ABC):
    """Renderiza um ResponseDescriptor e entrega ao cliente.

    Implementações nunca levantam exceção: falhas degradam para texto
    simples e são registradas em log.
    """

    @abstractmethod
    async def dispatch(self, identifier: str, descriptor: ResponseDescriptor) -> None: ...

    async def close(self) -> None:  # noqa: B027
        """Libera recursos do canal."""
