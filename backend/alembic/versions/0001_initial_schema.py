"""initial schema

Revision ID: 0001
Revises:
Create Date: 2025-08-02 10:00:00

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _ordered_song_table(name: str, parent_column: str, parent_table: str) -> None:
    op.create_table(
        name,
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column(parent_column, sa.Uuid(), sa.ForeignKey(f"{parent_table}.id"), nullable=False),
        sa.Column("song_id", sa.Uuid(), sa.ForeignKey("songs.id"), nullable=False),
        sa.Column("song_order", sa.Integer(), nullable=False),
    )
    op.create_index(f"ix_{name}_{parent_column}", name, [parent_column])
    op.create_index(f"ix_{name}_song_id", name, ["song_id"])


def _owned_list_table(name: str) -> None:
    op.create_table(
        name,
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("is_public", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("user_id", sa.Uuid(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    op.create_index(f"ix_{name}_user_id", name, ["user_id"])


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("role", sa.String(), nullable=True),
        sa.Column("user_level", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "songs",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("original_artist", sa.String(), nullable=False),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("key_signature", sa.String(), nullable=True),
        sa.Column("lyrics", sa.String(), nullable=True),
        sa.Column("performance_note", sa.String(), nullable=True),
        sa.Column("tempo", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_songs_original_artist", "songs", ["original_artist"])
    op.create_index("ix_songs_title", "songs", ["title"])

    _owned_list_table("setlists")

    op.create_table(
        "sets",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("setlist_id", sa.Uuid(), sa.ForeignKey("setlists.id"), nullable=False),
        sa.Column("set_order", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_sets_setlist_id", "sets", ["setlist_id"])
    _ordered_song_table("set_songs", "set_id", "sets")

    _owned_list_table("set_templates")
    _ordered_song_table("set_template_songs", "set_template_id", "set_templates")

    _owned_list_table("song_collections")
    _ordered_song_table("song_collection_songs", "song_collection_id", "song_collections")

    op.create_table(
        "performance_sessions",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("setlist_id", sa.Uuid(), sa.ForeignKey("setlists.id"), nullable=False),
        sa.Column("leader_id", sa.Uuid(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("current_set_id", sa.Uuid(), sa.ForeignKey("sets.id"), nullable=True),
        sa.Column("current_song_id", sa.Uuid(), sa.ForeignKey("songs.id"), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_performance_sessions_setlist_id", "performance_sessions", ["setlist_id"])
    op.create_index("ix_performance_sessions_is_active", "performance_sessions", ["is_active"])

    op.create_table(
        "session_participants",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("session_id", sa.Uuid(), sa.ForeignKey("performance_sessions.id"), nullable=False),
        sa.Column("user_id", sa.Uuid(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("joined_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_session_participants_session_id", "session_participants", ["session_id"])
    op.create_index("ix_session_participants_user_id", "session_participants", ["user_id"])

    op.create_table(
        "leadership_requests",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("session_id", sa.Uuid(), sa.ForeignKey("performance_sessions.id"), nullable=False),
        sa.Column("requesting_user_id", sa.Uuid(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("requesting_user_name", sa.String(), nullable=True),
        sa.Column("status", sa.String(), nullable=False),
        sa.Column("expires_at", sa.DateTime(), nullable=False),
        sa.Column("responded_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_leadership_requests_session_id", "leadership_requests", ["session_id"])
    op.create_index("ix_leadership_requests_status", "leadership_requests", ["status"])


def downgrade() -> None:
    for table in (
        "leadership_requests",
        "session_participants",
        "performance_sessions",
        "song_collection_songs",
        "song_collections",
        "set_template_songs",
        "set_templates",
        "set_songs",
        "sets",
        "setlists",
        "songs",
        "users",
    ):
        op.drop_table(table)
