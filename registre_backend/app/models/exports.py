# app/models/exports.py

from datetime import datetime
from sqlalchemy import String, Integer, DateTime, Index, func
from sqlalchemy.orm import Mapped, mapped_column
from .base import Base


class ExportConfiguration(Base):
    """Limits applied to one kind of export (e.g. ``registre``)."""

    __tablename__ = "export_configurations"

    type: Mapped[str] = mapped_column(String, primary_key=True)
    limite_fiches: Mapped[int] = mapped_column(Integer, nullable=False)
    delai_retry: Mapped[int] = mapped_column(Integer, nullable=False)
    limite_plage_horaire: Mapped[int] = mapped_column(Integer, nullable=False)


class ExportDemand(Base):
    """Throttling lease: one row per admitted export attempt.

    Rows are append-only; a requester may insert a new one only once every
    previous row is older than its own ``delai_retry``.
    """

    __tablename__ = "export_demands"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    sub: Mapped[str] = mapped_column(String, nullable=False)
    delai_retry: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    __table_args__ = (Index("ix_export_demands_sub_created", "sub", "created_at"),)
