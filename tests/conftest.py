from datetime import date

import pytest

from lms.models import Author, Book, LibraryStaff, Member, Publisher
from lms.models import db as _db


@pytest.fixture(scope="session")
def app():
    """Create a Flask application configured for testing (session-scoped)."""
    from lms import create_app

    _app = create_app("testing")
    yield _app


@pytest.fixture(autouse=True)
def db(app):
    """Create all tables before each test, drop them after."""
    with app.app_context():
        _db.create_all()
        app.extensions["settings_store"].invalidate()
        yield _db
        _db.session.remove()
        _db.drop_all()


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def settings_store(app):
    return app.extensions["settings_store"]


def _make_publisher(name="Acme", address=None):
    """Create and persist a Publisher. Callable multiple times per test."""
    publisher = Publisher(name=name, address=address)
    _db.session.add(publisher)
    _db.session.commit()
    return publisher


def _make_author(first_name="Ursula", last_name="Le Guin"):
    author = Author(first_name=first_name, last_name=last_name)
    _db.session.add(author)
    _db.session.commit()
    return author


def _make_book(title="Test Book", isbn="9780000000001", publisher=None, published_date=None):
    """Create and persist a Book. Callable multiple times per test."""
    book = Book(
        title=title,
        isbn=isbn,
        published_date=published_date,
        publisher_id=publisher.id if publisher else None,
    )
    _db.session.add(book)
    _db.session.commit()
    return book


def _make_member(email="reader@lovelace.org", first_name="Ada", last_name="Reader"):
    member = Member(
        first_name=first_name,
        last_name=last_name,
        email=email,
        membership_start_date=date(2024, 1, 15),
    )
    _db.session.add(member)
    _db.session.commit()
    return member


def _make_staff(email="librarian@lovelace.org", job_title="Librarian"):
    staff = LibraryStaff(
        first_name="Sam",
        last_name="Stacks",
        email=email,
        job_title=job_title,
        hire_date=date(2020, 9, 1),
    )
    _db.session.add(staff)
    _db.session.commit()
    return staff


@pytest.fixture()
def publisher(db):
    return _make_publisher()


@pytest.fixture()
def book(db, publisher):
    return _make_book(publisher=publisher)


@pytest.fixture()
def member(db):
    return _make_member()
