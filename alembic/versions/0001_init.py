"""import attempts, extraction patterns and discovered sites

Revision ID: 0001
Revises:
Create Date: 2026-10-17
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op


revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "recipe_import_attempts",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("url", sa.Text(), nullable=False),
        sa.Column("site_type", sa.String(50), nullable=False),
        sa.Column("parser_version", sa.String(20), nullable=False),
        sa.Column("strategy_used", sa.String(50), nullable=False),
        sa.Column("success", sa.Boolean(), nullable=False),
        sa.Column("html_pattern", sa.String(255), nullable=True),
        sa.Column("confidence_score", sa.String(10), nullable=True),
        sa.Column("ingredients_count", sa.Integer(), nullable=True),
        sa.Column("steps_count", sa.Integer(), nullable=True),
        sa.Column("error_message", sa.Text(), nullable=True),
        sa.Column("raw_html_sample", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("idx_import_attempts_site_type", "recipe_import_attempts", ["site_type"])
    op.create_index("idx_import_attempts_strategy", "recipe_import_attempts", ["strategy_used"])
    op.create_index("idx_import_attempts_created_at", "recipe_import_attempts", ["created_at"])

    op.create_table(
        "recipe_extraction_patterns",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("site_type", sa.String(50), nullable=False),
        sa.Column("html_pattern", sa.String(255), nullable=False),
        sa.Column("extraction_method", sa.String(50), nullable=False),
        sa.Column("parser_version", sa.String(20), nullable=False),
        sa.Column("success_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("failure_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("sample_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("success_rate", sa.Float(), nullable=False, server_default="0"),
        sa.Column("first_seen_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("last_seen_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint(
            "site_type",
            "html_pattern",
            "extraction_method",
            "parser_version",
            name="uq_extraction_pattern_key",
        ),
    )
    op.create_index(
        "idx_extraction_patterns_lookup",
        "recipe_extraction_patterns",
        ["site_type", "html_pattern"],
    )

    op.create_table(
        "discovered_recipe_sites",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("hostname", sa.String(255), nullable=False, unique=True),
        sa.Column("detection_method", sa.String(20), nullable=False),
        sa.Column("discovery_count", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("first_discovered_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("last_seen_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )


def downgrade() -> None:
    op.drop_table("discovered_recipe_sites")
    op.drop_index("idx_extraction_patterns_lookup", table_name="recipe_extraction_patterns")
    op.drop_table("recipe_extraction_patterns")
    op.drop_index("idx_import_attempts_created_at", table_name="recipe_import_attempts")
    op.drop_index("idx_import_attempts_strategy", table_name="recipe_import_attempts")
    op.drop_index("idx_import_attempts_site_type", table_name="recipe_import_attempts")
    op.drop_table("recipe_import_attempts")
