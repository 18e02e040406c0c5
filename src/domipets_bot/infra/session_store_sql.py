"""Implementação de SessionStore em banco relacional (tabela user_sessions)."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from domipets_bot.domain.session import ConversationSession, SessionSummary, session_from_payload
from domipets_bot.infra.db import UserSessionRow, as_utc
from domipets_bot.infra.session_contract import (
    SessionStore,
    SessionStoreError,
    cutoff_for,
    summarize,
)
from domipets_bot.observability.logging import get_logger
from domipets_bot.utils.ids import mask_identifier

logger: logging.Logger = get_logger(__name__)


class SqlSessionStore(SessionStore):
    """Sessões em SQL: JSON do registro + colunas de estado e atividade."""

    def __init__(self, session_factory: sessionmaker) -> None:
        self._session_factory = session_factory

    def save(self, session: ConversationSession) -> None:
        row = UserSessionRow(
            phone=session.identifier,
            session_data=session.model_dump(mode="json"),
            state=session.state.value,
            last_activity=session.last_activity_at,
        )
        try:
            with self._session_factory.begin() as db:
                db.merge(row)
        except SQLAlchemyError as e:
            logger.error(
                "Failed to save session to SQL",
                extra={"identifier": mask_identifier(session.identifier), "error": str(e)},
            )
            raise SessionStoreError(f"SQL save failed: {e}") from e

    def load(self, identifier: str) -> ConversationSession | None:
        try:
            with self._session_factory() as db:
                row = db.get(UserSessionRow, identifier)
                data = dict(row.session_data) if row is not None else None
                last_activity = as_utc(row.last_activity) if row is not None else None
        except SQLAlchemyError as e:
            logger.error(
                "Failed to load session from SQL",
                extra={"identifier": mask_identifier(identifier), "error": str(e)},
            )
            raise SessionStoreError(f"SQL load failed: {e}") from e

        if data is None:
            return None
        if "schema_version" not in data and "lastActivity" not in data:
            data["lastActivity"] = last_activity.isoformat()
        return session_from_payload(data, identifier)

    def delete(self, identifier: str) -> bool:
        try:
            with self._session_factory.begin() as db:
                result = db.execute(
                    delete(UserSessionRow).where(UserSessionRow.phone == identifier)
                )
        except SQLAlchemyError as e:
            raise SessionStoreError(f"SQL delete failed: {e}") from e
        return bool(result.rowcount)

    def sweep_inactive(self, max_age: timedelta, now: datetime | None = None) -> int:
        cutoff = cutoff_for(max_age, now)
        try:
            with self._session_factory.begin() as db:
                result = db.execute(
                    delete(UserSessionRow).where(UserSessionRow.last_activity < cutoff)
                )
        except SQLAlchemyError as e:
            logger.error("Failed to sweep sessions in SQL", extra={"error": str(e)})
            raise SessionStoreError(f"SQL sweep failed: {e}") from e
        return int(result.rowcount or 0)

    def list_all(self) -> list[SessionSummary]:
        try:
            with self._session_factory() as db:
                rows = db.scalars(
                    select(UserSessionRow).order_by(UserSessionRow.last_activity.desc())
                ).all()
                payloads = [(row.phone, dict(row.session_data)) for row in rows]
        except SQLAlchemyError as e:
            raise SessionStoreError(f"SQL list failed: {e}") from e
        return [summarize(session_from_payload(data, phone)) for phone, data in payloads]
