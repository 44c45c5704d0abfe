"""create places, incident_categories and incident_reports tables

Revision ID: 20261018_0001
Revises:
Create Date: 2026-10-18 09:00:00
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "20261018_0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "places",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("house_building_number", sa.String(length=120), nullable=True),
        sa.Column("street_name", sa.String(length=255), nullable=True),
        sa.Column("purok_block_lot", sa.String(length=120), nullable=True),
        sa.Column("barangay", sa.String(length=255), nullable=False),
        sa.Column("municipality_city", sa.String(length=255), nullable=False),
        sa.Column("province", sa.String(length=255), nullable=False),
        sa.Column("zip_code", sa.String(length=20), nullable=True),
        sa.Column("region", sa.String(length=255), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "barangay",
            "municipality_city",
            "province",
            "region",
            name="uq_places_locality",
        ),
    )
    op.create_index("ix_places_municipality_city", "places", ["municipality_city"], unique=False)
    op.create_index("ix_places_province", "places", ["province"], unique=False)

    op.create_table(
        "incident_categories",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("category_group", sa.String(length=255), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "uq_incident_categories_name_lower",
        "incident_categories",
        [sa.text("lower(name)")],
        unique=True,
    )

    op.create_table(
        "incident_reports",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("incident_id", sa.String(length=120), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("time", sa.String(length=32), nullable=False),
        sa.Column("day_of_week", sa.String(length=16), nullable=False),
        sa.Column("case_status", sa.String(length=16), nullable=True),
        sa.Column("event_proximity", sa.String(length=255), nullable=True),
        sa.Column("indoors_or_outdoors", sa.String(length=16), nullable=True),
        sa.Column("place_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("category_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.ForeignKeyConstraint(["place_id"], ["places.id"], ondelete="RESTRICT"),
        sa.ForeignKeyConstraint(["category_id"], ["incident_categories.id"], ondelete="RESTRICT"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("incident_id", name="uq_incident_reports_incident_id"),
    )
    op.create_index("ix_incident_reports_date", "incident_reports", ["date"], unique=False)
    op.create_index("ix_incident_reports_case_status", "incident_reports", ["case_status"], unique=False)
    op.create_index("ix_incident_reports_place_id", "incident_reports", ["place_id"], unique=False)
    op.create_index("ix_incident_reports_category_id", "incident_reports", ["category_id"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_incident_reports_category_id", table_name="incident_reports")
    op.drop_index("ix_incident_reports_place_id", table_name="incident_reports")
    op.drop_index("ix_incident_reports_case_status", table_name="incident_reports")
    op.drop_index("ix_incident_reports_date", table_name="incident_reports")
    op.drop_table("incident_reports")
    op.drop_index("uq_incident_categories_name_lower", table_name="incident_categories")
    op.drop_table("incident_categories")
    op.drop_index("ix_places_province", table_name="places")
    op.drop_index("ix_places_municipality_city", table_name="places")
    op.drop_table("places")
