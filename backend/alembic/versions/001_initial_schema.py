"""Initial schema — packstation, adresse, paket.

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "packstation",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("version", sa.Integer, nullable=False, server_default="0"),
        sa.Column("nummer", sa.String(32), nullable=False),
        sa.Column("baudatum", sa.Date, nullable=True),
        sa.Column("ausstattung", sa.JSON, nullable=True),
        sa.Column(
            "erzeugt", sa.DateTime(timezone=True), nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column(
            "aktualisiert", sa.DateTime(timezone=True), nullable=False,
            server_default=sa.func.now(),
        ),
    )
    op.create_index(
        "ix_packstation_nummer", "packstation", ["nummer"], unique=True,
    )

    op.create_table(
        "adresse",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("strasse", sa.String(64), nullable=False),
        sa.Column("hausnummer", sa.String(8), nullable=False),
        sa.Column("postleitzahl", sa.String(5), nullable=False),
        sa.Column("stadt", sa.String(64), nullable=False),
        sa.Column(
            "packstation_id", sa.Integer,
            sa.ForeignKey("packstation.id", ondelete="CASCADE"),
            nullable=False, unique=True,
        ),
    )
    op.create_index("ix_adresse_postleitzahl", "adresse", ["postleitzahl"])

    op.create_table(
        "paket",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("nummer", sa.String(32), nullable=False),
        sa.Column("max_gewicht_in_kg", sa.Float, nullable=False),
        sa.Column(
            "packstation_id", sa.Integer,
            sa.ForeignKey("packstation.id", ondelete="CASCADE"),
            nullable=False,
        ),
    )
    op.create_index("ix_paket_packstation_id", "paket", ["packstation_id"])


def downgrade() -> None:
    op.drop_index("ix_paket_packstation_id", table_name="paket")
    op.drop_table("paket")
    op.drop_index("ix_adresse_postleitzahl", table_name="adresse")
    op.drop_table("adresse")
    op.drop_index("ix_packstation_nummer", table_name="packstation")
    op.drop_table("packstation")
