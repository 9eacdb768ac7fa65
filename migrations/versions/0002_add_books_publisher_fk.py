"""Add books.publisher_id foreign key

Revision ID: 0002
Revises: 0001
Create Date: 2026-10-18

Added after every table exists so table creation order does not depend on
the constraint. Batch mode is required because SQLite cannot ALTER a table
to add a constraint; the table is recreated instead.
"""

from alembic import op

revision = "0002"
down_revision = "0001"
branch_labels = None
depends_on = None


def upgrade():
    with op.batch_alter_table("books", schema=None) as batch_op:
        batch_op.create_foreign_key(
            "fk_books_publisher_id", "publishers", ["publisher_id"], ["publisher_id"]
        )


def downgrade():
    with op.batch_alter_table("books", schema=None) as batch_op:
        batch_op.drop_constraint("fk_books_publisher_id", type_="foreignkey")
