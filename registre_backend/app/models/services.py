# app/models/services.py

from typing import List, Optional
from sqlalchemy import String, Integer, ForeignKey, Index
from sqlalchemy.orm import relationship, Mapped, mapped_column
from .base import Base, TimestampMixin


class Service(Base, TimestampMixin):
    """A node of the organizational service hierarchy.

    ``service_rpsi_id`` is the identifier of the service in the external
    registry (events are filed against it); ``id`` is the internal key used by
    mentions and shift check-ins.
    """

    __tablename__ = "services"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    service_rpsi_id: Mapped[Optional[str]] = mapped_column(String, index=True)
    libelle: Mapped[str] = mapped_column(String, nullable=False)
    abreviation: Mapped[Optional[str]] = mapped_column(String)
    service_hierarchie: Mapped[Optional[str]] = mapped_column(String)

    parent_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("services.id", ondelete="CASCADE"), nullable=True
    )
    # Order of a node among its siblings
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    parent: Mapped[Optional["Service"]] = relationship(
        back_populates="sub_services", remote_side="Service.id"
    )
    sub_services: Mapped[List["Service"]] = relationship(
        back_populates="parent",
        order_by=lambda: [Service.position, Service.id],
    )

    __table_args__ = (Index("ix_services_parent_position", "parent_id", "position"),)
