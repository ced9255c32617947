"""add_audits

Revision ID: a1b2c3d4e5f6
Revises:
Create Date: 2026-10-18 00:01:00.000000

This migration adds:
- audits table holding one header per audited operation
- audit_deltas table holding one row per changed field
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op


# revision identifiers, used by Alembic.
revision: str = "a1b2c3d4e5f6"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create audits and audit_deltas tables."""
    op.create_table(
        "audits",
        # Primary key
        sa.Column("id", sa.Uuid(), nullable=False),
        # What happened
        sa.Column("event", sa.String(length=16), nullable=False),
        sa.Column("model", sa.String(length=100), nullable=False),
        sa.Column("entity_id", sa.String(length=255), nullable=False),
        sa.Column("request_id", sa.String(length=64), nullable=False),
        sa.Column("json_object", sa.Text(), nullable=False),
        # Acting source
        sa.Column("source_id", sa.String(length=255), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        # Timestamp
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        # Constraints
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_index("ix_audits_id", "audits", ["id"])
    op.create_index("ix_audits_event", "audits", ["event"])
    op.create_index("ix_audits_model", "audits", ["model"])
    op.create_index("ix_audits_entity_id", "audits", ["entity_id"])
    op.create_index("ix_audits_request_id", "audits", ["request_id"])
    op.create_index("ix_audits_source_id", "audits", ["source_id"])
    op.create_index("ix_audits_created_at", "audits", ["created_at"])

    op.create_table(
        "audit_deltas",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("audit_id", sa.Uuid(), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("property_name", sa.String(length=255), nullable=False),
        sa.Column("old_value", sa.Text(), nullable=True),
        sa.Column("new_value", sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["audit_id"], ["audits.id"]),
    )

    op.create_index("ix_audit_deltas_id", "audit_deltas", ["id"])
    op.create_index("ix_audit_deltas_audit_id", "audit_deltas", ["audit_id"])


def downgrade() -> None:
    """Drop audits and audit_deltas tables."""
    op.drop_index("ix_audit_deltas_audit_id", table_name="audit_deltas")
    op.drop_index("ix_audit_deltas_id", table_name="audit_deltas")
    op.drop_table("audit_deltas")

    op.drop_index("ix_audits_created_at", table_name="audits")
    op.drop_index("ix_audits_source_id", table_name="audits")
    op.drop_index("ix_audits_request_id", table_name="audits")
    op.drop_index("ix_audits_entity_id", table_name="audits")
    op.drop_index("ix_audits_model", table_name="audits")
    op.drop_index("ix_audits_event", table_name="audits")
    op.drop_index("ix_audits_id", table_name="audits")
    op.drop_table("audits")
