"""Paket ORM — a parcel compartment of a Packstation."""

from sqlalchemy import String, Integer, Float, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base


class Paket(Base):
    """Paket entity — N:1 with Packstation."""
    __tablename__ = "paket"

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True,
    )
    nummer: Mapped[str] = mapped_column(String(32), nullable=False)
    max_gewicht_in_kg: Mapped[float] = mapped_column(Float, nullable=False)
    packstation_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("packstation.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )

    packstation: Mapped["Packstation"] = relationship(
        "Packstation", back_populates="pakete",
    )
