"""Re-exports dos Protocolos de domínio para uso por Application."""

from __future__ import annotations

from domipets_bot.domain.protocols.composer import Composer

__all__ = ["Composer"]
