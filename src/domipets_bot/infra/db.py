"""Schema SQL (SQLAlchemy 2.x) para sessões, pedidos, tickets e FAQs.

Usado pelos backends ``sql`` de session store e ledger. Funciona em
PostgreSQL (JSONB) e SQLite (testes).
"""

from __future__ import annotations

from datetime import UTC, datetime
from decimal import Decimal
from typing import Any

from sqlalchemy import JSON, DateTime, Engine, Integer, MetaData, Numeric, String, Text
from sqlalchemy import create_engine as sa_create_engine
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, sessionmaker

JsonColumn = JSON().with_variant(JSONB(), "postgresql")

# Naming convention for constraints (helps with migrations)
convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


class Base(DeclarativeBase):
    """Base declarativa das tabelas do bot."""

    metadata = MetaData(naming_convention=convention)

    def to_dict(self) -> dict[str, Any]:
        return {column.name: getattr(self, column.name) for column in self.__table__.columns}


class UserSessionRow(Base):
    """Uma linha por cliente; ``session_data`` guarda o registro versionado."""

    __tablename__ = "user_sessions"

    phone: Mapped[str] = mapped_column(String(32), primary_key=True)
    session_data: Mapped[dict[str, Any]] = mapped_column(JsonColumn, nullable=False)
    state: Mapped[str] = mapped_column(String(32), nullable=False)
    last_activity: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, index=True
    )


class OrderRow(Base):
    __tablename__ = "orders"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    phone: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    items: Mapped[list[dict[str, Any]]] = mapped_column(JsonColumn, nullable=False)
    total: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    status: Mapped[str] = mapped_column(String(32), nullable=False, default="pending")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow
    )


class SupportRequestRow(Base):
    __tablename__ = "support_requests"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    phone: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[str] = mapped_column(String(32), nullable=False, default="open")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow
    )


class FaqRow(Base):
    __tablename__ = "faqs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    question: Mapped[str] = mapped_column(Text, nullable=False)
    answer: Mapped[str] = mapped_column(Text, nullable=False)


def create_db_engine(database_url: str) -> Engine:
    """Cria engine síncrona com pre_ping (conexões de pool podem cair)."""
    return sa_create_engine(database_url, pool_pre_ping=True, future=True)


def create_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(bind=engine, expire_on_commit=False)


def init_schema(engine: Engine) -> None:
    """Cria as tabelas ausentes (dev/testes; produção usa migrações)."""
    Base.metadata.create_all(engine)


def as_utc(value: datetime) -> datetime:
    """SQLite devolve datetimes ingênuos; normaliza para UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value
