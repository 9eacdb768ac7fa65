import sqlite3

from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import event
from sqlalchemy.engine import Engine

db = SQLAlchemy()


def _iso(value):
    return value.isoformat() if value is not None else None


@event.listens_for(Engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    """SQLite ignores FOREIGN KEY clauses unless enabled per connection."""
    if isinstance(dbapi_connection, sqlite3.Connection):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys = ON")
        cursor.close()


RESERVATION_STATUSES = ("Pending", "Active", "Cancelled", "Completed")
RECIPIENT_TYPES = ("Member", "Staff")
NOTIFICATION_STATUSES = ("Sent", "Read", "Archived")


# ── Association tables ──────────────────────────────────────────────

book_authors = db.Table(
    "book_authors",
    db.Column("book_id", db.Integer, db.ForeignKey("books.book_id"), primary_key=True, index=True),
    db.Column("author_id", db.Integer, db.ForeignKey("authors.author_id"), primary_key=True, index=True),
)

book_categories = db.Table(
    "book_categories",
    db.Column("book_id", db.Integer, db.ForeignKey("books.book_id"), primary_key=True, index=True),
    db.Column("category_id", db.Integer, db.ForeignKey("categories.category_id"), primary_key=True, index=True),
)

library_staff_roles = db.Table(
    "library_staff_roles",
    db.Column("staff_id", db.Integer, db.ForeignKey("library_staff.staff_id"), primary_key=True, index=True),
    db.Column("role_id", db.Integer, db.ForeignKey("staff_roles.role_id"), primary_key=True, index=True),
)


# ── Publisher ───────────────────────────────────────────────────────


class Publisher(db.Model):
    __tablename__ = "publishers"

    id = db.Column("publisher_id", db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    address = db.Column(db.String(255), nullable=True)

    # Deletes are left to the database so a referenced publisher is refused
    books = db.relationship("Book", backref="publisher", lazy="dynamic", passive_deletes="all")

    def to_dict(self):
        return {"id": self.id, "name": self.name, "address": self.address}

    def __repr__(self):
        return f"<Publisher {self.name[:40]}>"


# ── Author ──────────────────────────────────────────────────────────


class Author(db.Model):
    __tablename__ = "authors"

    id = db.Column("author_id", db.Integer, primary_key=True)
    first_name = db.Column(db.String(100), nullable=False)
    last_name = db.Column(db.String(100), nullable=False)

    @property
    def full_name(self):
        return f"{self.first_name} {self.last_name}"

    def to_dict(self):
        return {"id": self.id, "first_name": self.first_name, "last_name": self.last_name}

    def __repr__(self):
        return f"<Author {self.full_name}>"


# ── Category ────────────────────────────────────────────────────────


class Category(db.Model):
    __tablename__ = "categories"

    id = db.Column("category_id", db.Integer, primary_key=True)
    name = db.Column(db.String(100), unique=True, nullable=False)

    def to_dict(self):
        return {"id": self.id, "name": self.name}

    def __repr__(self):
        return f"<Category {self.name}>"


# ── Book ────────────────────────────────────────────────────────────


class Book(db.Model):
    __tablename__ = "books"

    id = db.Column("book_id", db.Integer, primary_key=True)
    title = db.Column(db.String(255), nullable=False)
    isbn = db.Column(db.String(20), unique=True, nullable=False)
    published_date = db.Column(db.Date, nullable=True)
    # Migration 0002 adds this constraint after every table exists
    publisher_id = db.Column(
        db.Integer,
        db.ForeignKey("publishers.publisher_id", name="fk_books_publisher_id"),
        nullable=True,
        index=True,
    )

    # Junction rows are never removed implicitly; deleting a linked row is refused
    authors = db.relationship(
        "Author",
        secondary=book_authors,
        backref=db.backref("books", lazy="dynamic", passive_deletes="all"),
        lazy="dynamic",
        passive_deletes="all",
    )
    categories = db.relationship(
        "Category",
        secondary=book_categories,
        backref=db.backref("books", lazy="dynamic", passive_deletes="all"),
        lazy="dynamic",
        passive_deletes="all",
    )
    loans = db.relationship("Loan", backref="book", lazy="dynamic", passive_deletes="all")
    reservations = db.relationship("BookReservation", backref="book", lazy="dynamic", passive_deletes="all")
    reviews = db.relationship("Review", backref="book", lazy="dynamic", passive_deletes="all")

    @property
    def average_rating(self):
        # Fires a query per access; fine for single-record views.
        value = db.session.query(db.func.avg(Review.rating)).filter(Review.book_id == self.id).scalar()
        return round(float(value), 2) if value is not None else None

    def to_dict(self, detail=False):
        data = {
            "id": self.id,
            "title": self.title,
            "isbn": self.isbn,
            "published_date": _iso(self.published_date),
            "publisher_id": self.publisher_id,
            "author_ids": sorted(a.id for a in self.authors),
            "category_ids": sorted(c.id for c in self.categories),
        }
        if detail:
            data["authors"] = [a.to_dict() for a in self.authors]
            data["categories"] = [c.to_dict() for c in self.categories]
            data["average_rating"] = self.average_rating
        return data

    def __repr__(self):
        return f"<Book {self.title[:40]}>"


# ── Member ──────────────────────────────────────────────────────────


class Member(db.Model):
    __tablename__ = "members"

    id = db.Column("member_id", db.Integer, primary_key=True)
    first_name = db.Column(db.String(100), nullable=False)
    last_name = db.Column(db.String(100), nullable=False)
    email = db.Column(db.String(255), unique=True, nullable=False)
    phone_number = db.Column(db.String(20), nullable=True)
    address = db.Column(db.String(255), nullable=True)
    membership_start_date = db.Column(db.Date, nullable=False)

    loans = db.relationship("Loan", backref="member", lazy="dynamic", passive_deletes="all")
    reservations = db.relationship("BookReservation", backref="member", lazy="dynamic", passive_deletes="all")
    reviews = db.relationship("Review", backref="member", lazy="dynamic", passive_deletes="all")

    @property
    def full_name(self):
        return f"{self.first_name} {self.last_name}"

    @property
    def notifications(self):
        return Notification.query.filter_by(recipient_type="Member", recipient_id=self.id)

    def to_dict(self):
        return {
            "id": self.id,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "email": self.email,
            "phone_number": self.phone_number,
            "address": self.address,
            "membership_start_date": _iso(self.membership_start_date),
        }

    def __repr__(self):
        return f"<Member {self.email}>"


# ── Loan ────────────────────────────────────────────────────────────


class Loan(db.Model):
    __tablename__ = "loans"

    id = db.Column("loan_id", db.Integer, primary_key=True)
    book_id = db.Column(db.Integer, db.ForeignKey("books.book_id"), nullable=True, index=True)
    member_id = db.Column(db.Integer, db.ForeignKey("members.member_id"), nullable=True, index=True)
    loan_date = db.Column(db.Date, nullable=False)
    return_date = db.Column(db.Date, nullable=True)  # NULL while the book is out
    due_date = db.Column(db.Date, nullable=False)

    fines = db.relationship("Fine", backref="loan", lazy="dynamic", passive_deletes="all")

    @property
    def is_outstanding(self):
        return self.return_date is None

    def __repr__(self):
        return f"<Loan {self.id} book={self.book_id} member={self.member_id}>"


# ── Fine ────────────────────────────────────────────────────────────


class Fine(db.Model):
    __tablename__ = "fines"

    id = db.Column("fine_id", db.Integer, primary_key=True)
    loan_id = db.Column(db.Integer, db.ForeignKey("loans.loan_id"), nullable=True, index=True)
    amount = db.Column(db.Numeric(10, 2), nullable=False)
    payment_date = db.Column(db.Date, nullable=True)  # NULL until paid

    @property
    def is_paid(self):
        return self.payment_date is not None

    def __repr__(self):
        return f"<Fine {self.id} loan={self.loan_id} amount={self.amount}>"


# ── Reservation ─────────────────────────────────────────────────────


class BookReservation(db.Model):
    __tablename__ = "book_reservations"

    id = db.Column("reservation_id", db.Integer, primary_key=True)
    book_id = db.Column(db.Integer, db.ForeignKey("books.book_id"), nullable=True, index=True)
    member_id = db.Column(db.Integer, db.ForeignKey("members.member_id"), nullable=True, index=True)
    reservation_date = db.Column(db.Date, nullable=False)
    status = db.Column(
        db.Enum(*RESERVATION_STATUSES, name="reservation_status", native_enum=False, create_constraint=True),
        nullable=False,
        default="Pending",
        server_default="Pending",
    )

    def __repr__(self):
        return f"<BookReservation {self.id} ({self.status})>"


# ── Review ──────────────────────────────────────────────────────────


class Review(db.Model):
    __tablename__ = "reviews"

    id = db.Column("review_id", db.Integer, primary_key=True)
    book_id = db.Column(db.Integer, db.ForeignKey("books.book_id"), nullable=True, index=True)
    member_id = db.Column(db.Integer, db.ForeignKey("members.member_id"), nullable=True, index=True)
    rating = db.Column(db.Integer, nullable=False)
    comment = db.Column(db.Text, nullable=True)
    review_date = db.Column(db.DateTime, nullable=True, server_default=db.func.current_timestamp())

    __table_args__ = (
        db.CheckConstraint("rating >= 1 AND rating <= 5", name="ck_reviews_rating_range"),
    )

    def to_dict(self):
        return {
            "id": self.id,
            "book_id": self.book_id,
            "member_id": self.member_id,
            "rating": self.rating,
            "comment": self.comment,
            "review_date": _iso(self.review_date),
        }

    def __repr__(self):
        return f"<Review {self.id} book={self.book_id} rating={self.rating}>"


# ── Staff ───────────────────────────────────────────────────────────


class StaffRole(db.Model):
    __tablename__ = "staff_roles"

    id = db.Column("role_id", db.Integer, primary_key=True)
    role_name = db.Column(db.String(255), unique=True, nullable=False)

    def __repr__(self):
        return f"<StaffRole {self.role_name}>"


class LibraryStaff(db.Model):
    __tablename__ = "library_staff"

    id = db.Column("staff_id", db.Integer, primary_key=True)
    first_name = db.Column(db.String(100), nullable=False)
    last_name = db.Column(db.String(100), nullable=False)
    email = db.Column(db.String(255), unique=True, nullable=False)
    phone_number = db.Column(db.String(20), nullable=True)
    job_title = db.Column(db.String(100), nullable=True)
    hire_date = db.Column(db.Date, nullable=False)

    roles = db.relationship(
        "StaffRole",
        secondary=library_staff_roles,
        backref=db.backref("staff", lazy="dynamic", passive_deletes="all"),
        lazy="dynamic",
        passive_deletes="all",
    )

    @property
    def full_name(self):
        return f"{self.first_name} {self.last_name}"

    @property
    def notifications(self):
        return Notification.query.filter_by(recipient_type="Staff", recipient_id=self.id)

    def has_role(self, role_name):
        return self.roles.filter(StaffRole.role_name == role_name).first() is not None

    def __repr__(self):
        return f"<LibraryStaff {self.email} ({self.job_title})>"


# ── System Settings ─────────────────────────────────────────────────


class SystemSetting(db.Model):
    __tablename__ = "system_settings"

    id = db.Column("setting_id", db.Integer, primary_key=True)
    setting_name = db.Column(db.String(255), unique=True, nullable=False)
    setting_value = db.Column(db.String(255), nullable=True)
    description = db.Column(db.Text, nullable=True)

    def __repr__(self):
        return f"<SystemSetting {self.setting_name}={self.setting_value!r}>"


# ── Notification ────────────────────────────────────────────────────


class Notification(db.Model):
    """A message addressed to a member or a staff member.

    ``recipient_id`` points at ``members`` or ``library_staff`` depending on
    ``recipient_type``. It is deliberately not a foreign key, so the database
    does not guarantee the recipient exists.
    """

    __tablename__ = "notifications"

    id = db.Column("notification_id", db.Integer, primary_key=True)
    recipient_id = db.Column(db.Integer, nullable=True, index=True)
    recipient_type = db.Column(
        db.Enum(*RECIPIENT_TYPES, name="recipient_type", native_enum=False, create_constraint=True),
        nullable=False,
        index=True,
    )
    message = db.Column(db.Text, nullable=False)
    notification_date = db.Column(db.DateTime, nullable=True, server_default=db.func.current_timestamp())
    status = db.Column(
        db.Enum(*NOTIFICATION_STATUSES, name="notification_status", native_enum=False, create_constraint=True),
        nullable=False,
        default="Sent",
        server_default="Sent",
    )

    @property
    def recipient(self):
        """The addressed Member or LibraryStaff row, or None if it does not exist."""
        if self.recipient_id is None:
            return None
        model = Member if self.recipient_type == "Member" else LibraryStaff
        return db.session.get(model, self.recipient_id)

    def __repr__(self):
        return f"<Notification {self.id} to {self.recipient_type}:{self.recipient_id} ({self.status})>"
