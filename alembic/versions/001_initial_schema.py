"""initial schema

Revision ID: 001
Revises:
Create Date: 2026-10-18
"""
from alembic import op
import sqlalchemy as sa

revision = "001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    bind = op.get_bind()
    inspector = sa.inspect(bind)
    existing_tables = set(inspector.get_table_names())

    if "templates" in existing_tables:
        return

    op.create_table(
        "templates",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("description", sa.Text, nullable=False),
        sa.Column("content", sa.JSON, nullable=False),
        sa.Column("icon", sa.String(100), nullable=False),
        sa.Column("color", sa.String(50), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True)),
    )

    op.create_table(
        "proposals",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("title", sa.String(300), nullable=False),
        sa.Column("client_name", sa.String(200), nullable=False),
        sa.Column("status", sa.String(20), default="draft"),
        sa.Column("template_id", sa.Integer, nullable=False),
        sa.Column("content", sa.JSON, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True)),
        sa.Column("updated_at", sa.DateTime(timezone=True)),
    )

    op.create_table(
        "snapshots",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("kind", sa.String(20), nullable=False),
        sa.Column("size", sa.String(20), nullable=False),
        sa.Column("data", sa.Text, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True)),
    )
    op.create_index("ix_snapshots_created_at", "snapshots", ["created_at"])

    op.create_table(
        "app_settings",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("backup_time", sa.String(5), nullable=False, server_default="23:00"),
        sa.Column("backup_enabled", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("max_backups", sa.Integer, nullable=False, server_default="30"),
        sa.Column("company_name", sa.String(200), nullable=False, server_default="Your Company"),
        sa.Column("company_logo", sa.String(500), nullable=True),
        sa.Column("company_address", sa.String(500), nullable=True),
        sa.Column("company_email", sa.String(200), nullable=True),
        sa.Column("company_phone", sa.String(50), nullable=True),
    )

    op.create_table(
        "game_players",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("username", sa.String(100), nullable=False, unique=True),
        sa.Column("avatar", sa.String(200), nullable=False),
        sa.Column("total_points", sa.Integer, nullable=False, server_default="0"),
        sa.Column("tech_level", sa.String(30), nullable=False, server_default="beginner"),
        sa.Column("created_at", sa.DateTime(timezone=True)),
    )

    op.create_table(
        "game_sessions",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("player_id", sa.Integer, sa.ForeignKey("game_players.id"), nullable=False),
        sa.Column("tech_level", sa.String(30), nullable=False),
        sa.Column("scenarios_played", sa.JSON, nullable=False),
        sa.Column("total_score", sa.Integer, nullable=False, server_default="0"),
        sa.Column("start_time", sa.DateTime(timezone=True)),
        sa.Column("end_time", sa.DateTime(timezone=True), nullable=True),
        sa.Column("is_completed", sa.Boolean, nullable=False, server_default=sa.false()),
    )

    op.create_table(
        "game_leaderboard",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("player_id", sa.Integer, sa.ForeignKey("game_players.id"), nullable=False, unique=True),
        sa.Column("username", sa.String(100), nullable=False),
        sa.Column("avatar", sa.String(200), nullable=False),
        sa.Column("total_points", sa.Integer, nullable=False, server_default="0"),
        sa.Column("tech_level", sa.String(30), nullable=False),
        sa.Column("rank", sa.Integer, nullable=False),
        sa.Column("games_played", sa.Integer, nullable=False, server_default="0"),
        sa.Column("last_updated", sa.DateTime(timezone=True)),
    )


def downgrade() -> None:
    op.drop_table("game_leaderboard")
    op.drop_table("game_sessions")
    op.drop_table("game_players")
    op.drop_table("app_settings")
    op.drop_index("ix_snapshots_created_at", table_name="snapshots")
    op.drop_table("snapshots")
    op.drop_table("proposals")
    op.drop_table("templates")
