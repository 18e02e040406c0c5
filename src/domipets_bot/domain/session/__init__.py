"""Sessão de conversa: estados, transições, registro e migrações.

Exporta:
- ConversationState: estados canônicos
- ConversationSession: registro versionado persistido pelos stores
- validate_transition: validador puro
- session_from_payload: leitura com upgrade de schema
"""

from domipets_bot.domain.session.migrations import SessionSchemaError, session_from_payload
from domipets_bot.domain.session.models import (
    CURRENT_SCHEMA_VERSION,
    CatalogCursor,
    ConversationSession,
    SessionSummary,
)
from domipets_bot.domain.session.states import (
    BROWSE_STATES,
    INITIAL_STATE,
    RESET_STATES,
    ConversationState,
)
from domipets_bot.domain.session.transitions import InvalidTransitionError, validate_transition

__all__ = [
    "BROWSE_STATES",
    "CURRENT_SCHEMA_VERSION",
    "CatalogCursor",
    "ConversationSession",
    "ConversationState",
    "INITIAL_STATE",
    "InvalidTransitionError",
    "RESET_STATES",
    "SessionSchemaError",
    "SessionSummary",
    "session_from_payload",
    "validate_transition",
]
