"""Create the catalog and usage tables.

Revision ID: 0001_catalog_schema
Revises:
Create Date: 2026-10-18
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

from cryptousage.adapters.sqlalchemy.mappings import UTCDateTime

revision = "0001_catalog_schema"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "mines",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(), nullable=True),
        sa.Column("purl_type", sa.String(), nullable=False),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_mines")),
    )
    op.create_table(
        "versions",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("version_name", sa.String(), nullable=False),
        sa.Column("semver", sa.String(), nullable=True),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_versions")),
    )
    op.create_table(
        "all_urls",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("package_hash", sa.String(), nullable=False),
        sa.Column("component", sa.String(), nullable=False),
        sa.Column("purl_name", sa.String(), nullable=False),
        sa.Column("version_id", sa.Integer(), nullable=True),
        sa.Column("mine_id", sa.Integer(), nullable=True),
        sa.Column("date", UTCDateTime(), nullable=True),
        sa.Column("is_mined", sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.ForeignKeyConstraint(
            ["version_id"], ["versions.id"], name=op.f("fk_all_urls_version_id_versions")
        ),
        sa.ForeignKeyConstraint(["mine_id"], ["mines.id"], name=op.f("fk_all_urls_mine_id_mines")),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_all_urls")),
    )
    op.create_index("ix_all_urls_purl_name", "all_urls", ["purl_name"])
    op.create_index("ix_all_urls_package_hash", "all_urls", ["package_hash"])
    op.create_table(
        "component_crypto",
        sa.Column("url_hash", sa.String(), nullable=False),
        sa.Column("algorithm_name", sa.String(), nullable=False),
        sa.Column("strength", sa.String(), nullable=False),
        sa.PrimaryKeyConstraint(
            "url_hash", "algorithm_name", "strength", name=op.f("pk_component_crypto")
        ),
    )
    op.create_table(
        "crypto_libraries",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("description", sa.String(), nullable=False),
        sa.Column("url", sa.String(), nullable=False),
        sa.Column("category", sa.String(), nullable=False),
        sa.Column("purl", sa.String(), nullable=False),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_crypto_libraries")),
    )
    op.create_table(
        "component_crypto_library",
        sa.Column("url_hash", sa.String(), nullable=False),
        sa.Column("det_id", sa.String(), nullable=False),
        sa.ForeignKeyConstraint(
            ["det_id"],
            ["crypto_libraries.id"],
            name=op.f("fk_component_crypto_library_det_id_crypto_libraries"),
        ),
        sa.PrimaryKeyConstraint("url_hash", "det_id", name=op.f("pk_component_crypto_library")),
    )


def downgrade() -> None:
    op.drop_table("component_crypto_library")
    op.drop_table("crypto_libraries")
    op.drop_table("component_crypto")
    op.drop_index("ix_all_urls_package_hash", table_name="all_urls")
    op.drop_index("ix_all_urls_purl_name", table_name="all_urls")
    op.drop_table("all_urls")
    op.drop_table("versions")
    op.drop_table("mines")
