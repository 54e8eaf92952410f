"""Packstation ORM — aggregate root of a parcel locker station.

Invariants:
    - id is an integer primary key assigned by the database
    - nummer is unique across all Packstationen
    - version starts at 0 and is incremented by the ORM on every flushed update
    - adresse (1:1) and pakete (1:N) are owned: deleted together with the Packstation

Design Decisions:
    - version_id_col: UPDATE ... WHERE version = :old raises StaleDataError on concurrent change
    - JSON column for ausstattung: a short list of labels, never queried by element
"""

from datetime import date, datetime, timezone

from sqlalchemy import String, Integer, Date, DateTime, JSON
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base


def _next_version(version: int | None) -> int:
    return 0 if version is None else version + 1


class Packstation(Base):
    """Packstation aggregate root — owns its Adresse and Pakete."""
    __tablename__ = "packstation"

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True,
    )
    version: Mapped[int] = mapped_column(Integer, nullable=False)
    nummer: Mapped[str] = mapped_column(
        String(32), nullable=False, unique=True, index=True,
    )
    baudatum: Mapped[date | None] = mapped_column(Date, nullable=True)
    ausstattung: Mapped[list[str] | None] = mapped_column(JSON, nullable=True)
    erzeugt: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    aktualisiert: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    # Relationships
    adresse: Mapped["Adresse"] = relationship(
        "Adresse", back_populates="packstation", uselist=False,
        cascade="all, delete-orphan", lazy="selectin",
    )
    pakete: Mapped[list["Paket"]] = relationship(
        "Paket", back_populates="packstation",
        cascade="all, delete-orphan", lazy="selectin",
        order_by="Paket.id",
    )

    __mapper_args__ = {
        "version_id_col": version,
        "version_id_generator": _next_version,
    }

    def __repr__(self) -> str:
        return f"Packstation(id={self.id!r}, version={self.version!r}, nummer={self.nummer!r})"
