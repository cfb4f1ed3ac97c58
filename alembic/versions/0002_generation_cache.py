"""generation result cache

Revision ID: 0002_generation_cache
Revises: 0001_dictionary_words
Create Date: 2026-10-18 00:00:00
"""

from alembic import op

# revision identifiers, used by Alembic.
revision = "0002_generation_cache"
down_revision = "0001_dictionary_words"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.execute(
        """
        CREATE TABLE IF NOT EXISTS generation_cache (
          fingerprint TEXT PRIMARY KEY,
          payload JSONB NOT NULL,
          created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
          expires_at TIMESTAMPTZ NOT NULL
        );

        CREATE INDEX IF NOT EXISTS idx_generation_cache_expires_at ON generation_cache(expires_at);
        """
    )


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS generation_cache")
