# app/models/registre.py

from datetime import datetime
from typing import Optional
from sqlalchemy import String, Integer, Text, DateTime, ForeignKey, Index
from sqlalchemy.orm import relationship, Mapped, mapped_column
from .base import Base, TimestampMixin


class Activite(Base):
    """Reference list of activities an event can be filed under."""

    __tablename__ = "activites"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    code: Mapped[str] = mapped_column(String, unique=True, nullable=False)
    libelle: Mapped[str] = mapped_column(String, nullable=False)


class Evenement(Base, TimestampMixin):
    __tablename__ = "evenements"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    numero: Mapped[Optional[str]] = mapped_column(String)
    # Scoped by the external registry id of the service
    unite_rpsi_id: Mapped[str] = mapped_column(String, nullable=False)
    date_connaissance_faits: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )
    libelle: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    activite_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("activites.id", ondelete="SET NULL")
    )

    activite: Mapped[Optional["Activite"]] = relationship()

    __table_args__ = (
        Index("ix_evenements_unite_date", "unite_rpsi_id", "date_connaissance_faits"),
    )


class MentionDeService(Base, TimestampMixin):
    __tablename__ = "mentions_de_service"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    service_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("services.id", ondelete="CASCADE"), nullable=False
    )
    date_creation: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )
    auteur: Mapped[Optional[str]] = mapped_column(String)
    contenu: Mapped[str] = mapped_column(Text, nullable=False)

    __table_args__ = (
        Index("ix_mentions_service_date", "service_id", "date_creation"),
    )


class PriseDeService(Base, TimestampMixin):
    """A shift check-in; ``date_fin`` stays empty while the shift is open."""

    __tablename__ = "prises_de_service"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    service_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("services.id", ondelete="CASCADE"), nullable=False
    )
    agent: Mapped[str] = mapped_column(String, nullable=False)
    date_debut: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )
    date_fin: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    commentaire: Mapped[Optional[str]] = mapped_column(Text)

    __table_args__ = (
        Index("ix_prises_service_debut", "service_id", "date_debut"),
    )
