"""Initial schema

Revision ID: 0001
Revises:
Create Date: 2026-10-18

Creates every library table. ``books.publisher_id`` is created without its
foreign key; revision 0002 adds it once all tables exist.
"""

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    # Books
    op.create_table(
        "books",
        sa.Column("book_id", sa.Integer(), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("isbn", sa.String(length=20), nullable=False),
        sa.Column("published_date", sa.Date(), nullable=True),
        sa.Column("publisher_id", sa.Integer(), nullable=True),
        sa.PrimaryKeyConstraint("book_id"),
        sa.UniqueConstraint("isbn"),
    )
    with op.batch_alter_table("books", schema=None) as batch_op:
        batch_op.create_index(batch_op.f("ix_books_publisher_id"), ["publisher_id"], unique=False)

    # Authors
    op.create_table(
        "authors",
        sa.Column("author_id", sa.Integer(), nullable=False),
        sa.Column("first_name", sa.String(length=100), nullable=False),
        sa.Column("last_name", sa.String(length=100), nullable=False),
        sa.PrimaryKeyConstraint("author_id"),
    )

    # Book-Authors association
    op.create_table(
        "book_authors",
        sa.Column("book_id", sa.Integer(), nullable=False),
        sa.Column("author_id", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["book_id"], ["books.book_id"]),
        sa.ForeignKeyConstraint(["author_id"], ["authors.author_id"]),
        sa.PrimaryKeyConstraint("book_id", "author_id"),
    )
    with op.batch_alter_table("book_authors", schema=None) as batch_op:
        batch_op.create_index(batch_op.f("ix_book_authors_book_id"), ["book_id"], unique=False)
        batch_op.create_index(batch_op.f("ix_book_authors_author_id"), ["author_id"], unique=False)

    # Publishers
    op.create_table(
        "publishers",
        sa.Column("publisher_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("address", sa.String(length=255), nullable=True),
        sa.PrimaryKeyConstraint("publisher_id"),
    )

    # Members
    op.create_table(
        "members",
        sa.Column("member_id", sa.Integer(), nullable=False),
        sa.Column("first_name", sa.String(length=100), nullable=False),
        sa.Column("last_name", sa.String(length=100), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("phone_number", sa.String(length=20), nullable=True),
        sa.Column("address", sa.String(length=255), nullable=True),
        sa.Column("membership_start_date", sa.Date(), nullable=False),
        sa.PrimaryKeyConstraint("member_id"),
        sa.UniqueConstraint("email"),
    )

    # Loans
    op.create_table(
        "loans",
        sa.Column("loan_id", sa.Integer(), nullable=False),
        sa.Column("book_id", sa.Integer(), nullable=True),
        sa.Column("member_id", sa.Integer(), nullable=True),
        sa.Column("loan_date", sa.Date(), nullable=False),
        sa.Column("return_date", sa.Date(), nullable=True),
        sa.Column("due_date", sa.Date(), nullable=False),
        sa.ForeignKeyConstraint(["book_id"], ["books.book_id"]),
        sa.ForeignKeyConstraint(["member_id"], ["members.member_id"]),
        sa.PrimaryKeyConstraint("loan_id"),
    )
    with op.batch_alter_table("loans", schema=None) as batch_op:
        batch_op.create_index(batch_op.f("ix_loans_book_id"), ["book_id"], unique=False)
        batch_op.create_index(batch_op.f("ix_loans_member_id"), ["member_id"], unique=False)

    # Fines
    op.create_table(
        "fines",
        sa.Column("fine_id", sa.Integer(), nullable=False),
        sa.Column("loan_id", sa.Integer(), nullable=True),
        sa.Column("amount", sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column("payment_date", sa.Date(), nullable=True),
        sa.ForeignKeyConstraint(["loan_id"], ["loans.loan_id"]),
        sa.PrimaryKeyConstraint("fine_id"),
    )
    with op.batch_alter_table("fines", schema=None) as batch_op:
        batch_op.create_index(batch_op.f("ix_fines_loan_id"), ["loan_id"], unique=False)

    # Book Reservations
    op.create_table(
        "book_reservations",
        sa.Column("reservation_id", sa.Integer(), nullable=False),
        sa.Column("book_id", sa.Integer(), nullable=True),
        sa.Column("member_id", sa.Integer(), nullable=True),
        sa.Column("reservation_date", sa.Date(), nullable=False),
        sa.Column(
            "status",
            sa.Enum(
                "Pending",
                "Active",
                "Cancelled",
                "Completed",
                name="reservation_status",
                native_enum=False,
                create_constraint=True,
            ),
            nullable=False,
            server_default="Pending",
        ),
        sa.ForeignKeyConstraint(["book_id"], ["books.book_id"]),
        sa.ForeignKeyConstraint(["member_id"], ["members.member_id"]),
        sa.PrimaryKeyConstraint("reservation_id"),
    )
    with op.batch_alter_table("book_reservations", schema=None) as batch_op:
        batch_op.create_index(batch_op.f("ix_book_reservations_book_id"), ["book_id"], unique=False)
        batch_op.create_index(batch_op.f("ix_book_reservations_member_id"), ["member_id"], unique=False)

    # Categories
    op.create_table(
        "categories",
        sa.Column("category_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.PrimaryKeyConstraint("category_id"),
        sa.UniqueConstraint("name"),
    )

    # Book-Categories association
    op.create_table(
        "book_categories",
        sa.Column("book_id", sa.Integer(), nullable=False),
        sa.Column("category_id", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["book_id"], ["books.book_id"]),
        sa.ForeignKeyConstraint(["category_id"], ["categories.category_id"]),
        sa.PrimaryKeyConstraint("book_id", "category_id"),
    )
    with op.batch_alter_table("book_categories", schema=None) as batch_op:
        batch_op.create_index(batch_op.f("ix_book_categories_book_id"), ["book_id"], unique=False)
        batch_op.create_index(batch_op.f("ix_book_categories_category_id"), ["category_id"], unique=False)

    # Reviews
    op.create_table(
        "reviews",
        sa.Column("review_id", sa.Integer(), nullable=False),
        sa.Column("book_id", sa.Integer(), nullable=True),
        sa.Column("member_id", sa.Integer(), nullable=True),
        sa.Column("rating", sa.Integer(), nullable=False),
        sa.Column("comment", sa.Text(), nullable=True),
        sa.Column("review_date", sa.DateTime(), nullable=True, server_default=sa.func.current_timestamp()),
        sa.CheckConstraint("rating >= 1 AND rating <= 5", name="ck_reviews_rating_range"),
        sa.ForeignKeyConstraint(["book_id"], ["books.book_id"]),
        sa.ForeignKeyConstraint(["member_id"], ["members.member_id"]),
        sa.PrimaryKeyConstraint("review_id"),
    )
    with op.batch_alter_table("reviews", schema=None) as batch_op:
        batch_op.create_index(batch_op.f("ix_reviews_book_id"), ["book_id"], unique=False)
        batch_op.create_index(batch_op.f("ix_reviews_member_id"), ["member_id"], unique=False)

    # Library Staff
    op.create_table(
        "library_staff",
        sa.Column("staff_id", sa.Integer(), nullable=False),
        sa.Column("first_name", sa.String(length=100), nullable=False),
        sa.Column("last_name", sa.String(length=100), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("phone_number", sa.String(length=20), nullable=True),
        sa.Column("job_title", sa.String(length=100), nullable=True),
        sa.Column("hire_date", sa.Date(), nullable=False),
        sa.PrimaryKeyConstraint("staff_id"),
        sa.UniqueConstraint("email"),
    )

    # Staff Roles
    op.create_table(
        "staff_roles",
        sa.Column("role_id", sa.Integer(), nullable=False),
        sa.Column("role_name", sa.String(length=255), nullable=False),
        sa.PrimaryKeyConstraint("role_id"),
        sa.UniqueConstraint("role_name"),
    )

    # Staff-Roles association
    op.create_table(
        "library_staff_roles",
        sa.Column("staff_id", sa.Integer(), nullable=False),
        sa.Column("role_id", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["staff_id"], ["library_staff.staff_id"]),
        sa.ForeignKeyConstraint(["role_id"], ["staff_roles.role_id"]),
        sa.PrimaryKeyConstraint("staff_id", "role_id"),
    )
    with op.batch_alter_table("library_staff_roles", schema=None) as batch_op:
        batch_op.create_index(batch_op.f("ix_library_staff_roles_staff_id"), ["staff_id"], unique=False)
        batch_op.create_index(batch_op.f("ix_library_staff_roles_role_id"), ["role_id"], unique=False)

    # System Settings
    op.create_table(
        "system_settings",
        sa.Column("setting_id", sa.Integer(), nullable=False),
        sa.Column("setting_name", sa.String(length=255), nullable=False),
        sa.Column("setting_value", sa.String(length=255), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint("setting_id"),
        sa.UniqueConstraint("setting_name"),
    )

    # Notifications (recipient_id is polymorphic, no foreign key)
    op.create_table(
        "notifications",
        sa.Column("notification_id", sa.Integer(), nullable=False),
        sa.Column("recipient_id", sa.Integer(), nullable=True),
        sa.Column(
            "recipient_type",
            sa.Enum("Member", "Staff", name="recipient_type", native_enum=False, create_constraint=True),
            nullable=False,
        ),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("notification_date", sa.DateTime(), nullable=True, server_default=sa.func.current_timestamp()),
        sa.Column(
            "status",
            sa.Enum(
                "Sent",
                "Read",
                "Archived",
                name="notification_status",
                native_enum=False,
                create_constraint=True,
            ),
            nullable=False,
            server_default="Sent",
        ),
        sa.PrimaryKeyConstraint("notification_id"),
    )
    with op.batch_alter_table("notifications", schema=None) as batch_op:
        batch_op.create_index(batch_op.f("ix_notifications_recipient_id"), ["recipient_id"], unique=False)
        batch_op.create_index(batch_op.f("ix_notifications_recipient_type"), ["recipient_type"], unique=False)


def downgrade():
    op.drop_table("notifications")
    op.drop_table("system_settings")
    op.drop_table("library_staff_roles")
    op.drop_table("staff_roles")
    op.drop_table("library_staff")
    op.drop_table("reviews")
    op.drop_table("book_categories")
    op.drop_table("categories")
    op.drop_table("book_reservations")
    op.drop_table("fines")
    op.drop_table("loans")
    op.drop_table("members")
    op.drop_table("publishers")
    op.drop_table("book_authors")
    op.drop_table("authors")
    op.drop_table("books")
