"""Adresse ORM — postal address of exactly one Packstation."""

from sqlalchemy import String, Integer, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base


class Adresse(Base):
    """Address entity — 1:1 with Packstation (unique packstation_id)."""
    __tablename__ = "adresse"

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True,
    )
    strasse: Mapped[str] = mapped_column(String(64), nullable=False)
    hausnummer: Mapped[str] = mapped_column(String(8), nullable=False)
    postleitzahl: Mapped[str] = mapped_column(
        String(5), nullable=False, index=True,
    )
    stadt: Mapped[str] = mapped_column(String(64), nullable=False)
    packstation_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("packstation.id", ondelete="CASCADE"),
        nullable=False, unique=True,
    )

    packstation: Mapped["Packstation"] = relationship(
        "Packstation", back_populates="adresse",
    )
