"""Dependências injetadas nas rotas."""

from __future__ import annotations

from fastapi import Request

from domipets_bot.application.engine import ConversationEngine
from domipets_bot.application.session_manager import SessionManager
from domipets_bot.config.settings import Settings
from domipets_bot.infra.dedupe import DedupeStore


def get_settings(request: Request) -> Settings:
    """Retorna settings da aplicação."""

    return request.app.state.settings


def get_dedupe_store(request: Request) -> DedupeStore:
    """Retorna o store de dedupe ativo."""

    return request.app.state.dedupe_store


def get_engine(request: Request) -> ConversationEngine:
    """Retorna o motor de conversa."""
    return request.app.state.engine


def get_session_manager(request: Request) -> SessionManager:
    """Retorna o gerenciador de sessões."""
    return request.app.state.session_manager
