"""dictionary words table

Revision ID: 0001_dictionary_words
Revises:
Create Date: 2026-10-18 00:00:00
"""

from alembic import op

# revision identifiers, used by Alembic.
revision = "0001_dictionary_words"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.execute(
        """
        CREATE TABLE IF NOT EXISTS dictionary_words (
          id BIGSERIAL PRIMARY KEY,
          word TEXT NOT NULL,
          language TEXT NOT NULL DEFAULT 'en',
          definition TEXT,
          created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
          CONSTRAINT uq_dictionary_words_word_language UNIQUE (word, language),
          CONSTRAINT ck_dictionary_words_upper CHECK (word = upper(word))
        );

        CREATE INDEX IF NOT EXISTS idx_dictionary_words_language_length
          ON dictionary_words(language, length(word));
        """
    )


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS dictionary_words")
