"""Initial migration: create scrimseries, scrim, scrimgame, calendarevent tables

Revision ID: 001_initial_scrim_tables
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision = "001_initial_scrim_tables"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # Recurrence templates
    op.create_table(
        "scrimseries",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("owner_id", sa.String(), nullable=False),
        sa.Column("opponent", sa.String(), nullable=False),
        sa.Column("weekdays", sa.JSON(), nullable=False),
        sa.Column("series_start_date", sa.Date(), nullable=False),
        sa.Column("series_end_date", sa.Date(), nullable=False),
        sa.Column("start_time_template", sa.Time(), nullable=True),
        sa.Column("notes_template", sa.String(), nullable=True),
        sa.Column("patch_template", sa.String(), nullable=True),
        sa.Column("rrule_string", sa.String(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )

    # Scrim instances
    op.create_table(
        "scrim",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("owner_id", sa.String(), nullable=False),
        sa.Column("opponent", sa.String(), nullable=False),
        sa.Column("scrim_date", sa.Date(), nullable=False),
        sa.Column("start_time", sa.Time(), nullable=True),
        sa.Column("status", sa.String(), nullable=False),
        sa.Column("overall_result", sa.String(), nullable=True),
        sa.Column("cancellation_reason", sa.String(), nullable=True),
        sa.Column("patch", sa.String(), nullable=True),
        sa.Column("notes", sa.String(), nullable=True),
        sa.Column("series_id", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(
            ["series_id"],
            ["scrimseries.id"],
        ),
    )

    # Games within a scrim
    op.create_table(
        "scrimgame",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("scrim_id", sa.Integer(), nullable=False),
        sa.Column("owner_id", sa.String(), nullable=False),
        sa.Column("game_number", sa.Integer(), nullable=False),
        sa.Column("result", sa.String(), nullable=False),
        sa.Column("duration", sa.String(), nullable=True),
        sa.Column("notes", sa.String(), nullable=True),
        sa.Column("blue_side_pick", sa.String(), nullable=True),
        sa.Column("red_side_pick", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(
            ["scrim_id"],
            ["scrim.id"],
        ),
        sa.UniqueConstraint("scrim_id", "game_number", name="uq_scrim_game_number"),
    )

    # General calendar events
    op.create_table(
        "calendarevent",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("owner_id", sa.String(), nullable=False),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("event_date", sa.Date(), nullable=False),
        sa.Column("start_time", sa.Time(), nullable=True),
        sa.Column("end_time", sa.Time(), nullable=True),
        sa.Column("category", sa.String(), nullable=False),
        sa.Column("description", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )


def downgrade() -> None:
    op.drop_table("calendarevent")
    op.drop_table("scrimgame")
    op.drop_table("scrim")
    op.drop_table("scrimseries")
