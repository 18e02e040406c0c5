"""Implementação de SessionStore usando Firestore (produção)."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta

from google.cloud.firestore_v1.base_query import FieldFilter

from domipets_bot.domain.session import ConversationSession, SessionSummary, session_from_payload
from domipets_bot.infra.session_contract import (
    SessionStore,
    SessionStoreError,
    cutoff_for,
    summarize,
)
from domipets_bot.observability.logging import get_logger
from domipets_bot.utils.ids import mask_identifier

logger: logging.Logger = get_logger(__name__)

ACTIVITY_FIELD = "_last_activity"
TTL_FIELD = "_ttl_expire_at"


class FirestoreSessionStore(SessionStore):
    """Armazenamento de sessão em Firestore.

    Coleção padrão: sessions/{identifier}
    - ``_last_activity``: timestamp nativo, consultado pela varredura
    - ``_ttl_expire_at``: respeitado pela política de TTL do Firestore
    """

    def __init__(
        self,
        firestore_client: object,
        collection: str = "sessions",
        ttl_seconds: int | None = None,
    ):
        self._client = firestore_client
        self._collection = collection
        self._ttl_seconds = ttl_seconds

    def _doc(self, identifier: str):
        return self._client.collection(self._collection).document(identifier)

    def save(self, session: ConversationSession) -> None:
        try:
            payload = session.model_dump(mode="json")
            payload[ACTIVITY_FIELD] = session.last_activity_at
            if self._ttl_seconds:
                payload[TTL_FIELD] = session.last_activity_at + timedelta(
                    seconds=self._ttl_seconds
                )
            self._doc(session.identifier).set(payload)
            logger.debug(
                "Session saved (Firestore)",
                extra={"identifier": mask_identifier(session.identifier)},
            )
        except Exception as e:  # pragma: no cover - log + wrap
            logger.error(
                "Failed to save session to Firestore",
                extra={"identifier": mask_identifier(session.identifier), "error": str(e)},
            )
            raise SessionStoreError(f"Firestore save failed: {e}") from e

    def load(self, identifier: str) -> ConversationSession | None:
        try:
            doc = self._doc(identifier).get()
        except Exception as e:  # pragma: no cover - log + wrap
            logger.error(
                "Failed to load session from Firestore",
                extra={"identifier": mask_identifier(identifier), "error": str(e)},
            )
            raise SessionStoreError(f"Firestore load failed: {e}") from e

        if not doc.exists:
            logger.debug(
                "Session not found (Firestore)", extra={"identifier": mask_identifier(identifier)}
            )
            return None

        data = doc.to_dict() or {}
        data.pop(ACTIVITY_FIELD, None)
        data.pop(TTL_FIELD, None)
        return session_from_payload(data, identifier)

    def delete(self, identifier: str) -> bool:
        try:
            self._doc(identifier).delete()
        except Exception as e:  # pragma: no cover - log + wrap
            logger.error(
                "Failed to delete session from Firestore",
                extra={"identifier": mask_identifier(identifier), "error": str(e)},
            )
            raise SessionStoreError(f"Firestore delete failed: {e}") from e
        logger.debug(
            "Session deleted (Firestore)", extra={"identifier": mask_identifier(identifier)}
        )
        return True

    def sweep_inactive(self, max_age: timedelta, now: datetime | None = None) -> int:
        cutoff = cutoff_for(max_age, now)
        try:
            query = self._client.collection(self._collection).where(
                filter=FieldFilter(ACTIVITY_FIELD, "<", cutoff)
            )
            removed = 0
            for snapshot in query.stream():
                snapshot.reference.delete()
                removed += 1
        except Exception as e:  # pragma: no cover - log + wrap
            logger.error("Failed to sweep sessions in Firestore", extra={"error": str(e)})
            raise SessionStoreError(f"Firestore sweep failed: {e}") from e
        return removed

    def list_all(self) -> list[SessionSummary]:
        try:
            snapshots = list(self._client.collection(self._collection).stream())
        except Exception as e:  # pragma: no cover - log + wrap
            raise SessionStoreError(f"Firestore list failed: {e}") from e

        summaries = []
        for snapshot in snapshots:
            data = snapshot.to_dict() or {}
            data.pop(ACTIVITY_FIELD, None)
            data.pop(TTL_FIELD, None)
            summaries.append(summarize(session_from_payload(data, snapshot.id)))
        return sorted(summaries, key=lambda s: s.last_activity_at, reverse=True)
