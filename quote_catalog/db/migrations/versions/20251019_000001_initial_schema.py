"""Initial schema for Quote Catalog.

Revision ID: 0001
Revises:
Create Date: 2025-10-19

"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "authors",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("permalink", sa.String(255), default=""),
    )
    op.create_index("ix_authors_permalink", "authors", ["permalink"])

    op.create_table(
        "categories",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(255), nullable=False),
    )
    op.create_index("ix_categories_name", "categories", ["name"])

    op.create_table(
        "quotes",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("quote", sa.Text(), nullable=False),
        sa.Column("permalink", sa.String(255), default=""),
        sa.Column("author_id", sa.Integer(), sa.ForeignKey("authors.id"), nullable=False),
    )
    op.create_index("ix_quotes_permalink", "quotes", ["permalink"])
    op.create_index("ix_quotes_author_id", "quotes", ["author_id"])

    # Ordered links; the same category may appear twice on one quote
    op.create_table(
        "quote_categories",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("quote_id", sa.Integer(), sa.ForeignKey("quotes.id"), nullable=False),
        sa.Column("category_id", sa.Integer(), sa.ForeignKey("categories.id"), nullable=False),
        sa.Column("position", sa.Integer(), default=0),
    )
    op.create_index("ix_quote_categories_quote_id", "quote_categories", ["quote_id"])
    op.create_index("ix_quote_categories_category_id", "quote_categories", ["category_id"])


def downgrade() -> None:
    op.drop_index("ix_quote_categories_category_id", table_name="quote_categories")
    op.drop_index("ix_quote_categories_quote_id", table_name="quote_categories")
    op.drop_table("quote_categories")

    op.drop_index("ix_quotes_author_id", table_name="quotes")
    op.drop_index("ix_quotes_permalink", table_name="quotes")
    op.drop_table("quotes")

    op.drop_index("ix_categories_name", table_name="categories")
    op.drop_table("categories")

    op.drop_index("ix_authors_permalink", table_name="authors")
    op.drop_table("authors")
