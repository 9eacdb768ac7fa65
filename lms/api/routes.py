from flask import Blueprint, abort, current_app, jsonify, request
from werkzeug.datastructures import ImmutableMultiDict

from ..errors import error_response
from ..models import Author, Book, Category, Member, Publisher, Review, book_authors, book_categories, db
from ..settings_store import get_settings_store
from .forms import (
    AuthorForm,
    BookAuthorForm,
    BookForm,
    CategoryForm,
    MemberForm,
    PublisherForm,
    ReviewForm,
    SettingForm,
)

api_bp = Blueprint("api", __name__)


def _json_formdata(**extra):
    """Request JSON as string form data; null values count as absent.

    Keyword arguments (URL parts) override keys of the same name in the body.
    """
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        abort(400)
    formdata = {}
    for key, value in payload.items():
        if value is None:
            continue
        if isinstance(value, list):
            formdata[key] = [str(item) for item in value]
        else:
            formdata[key] = str(value)
    formdata.update({key: str(value) for key, value in extra.items()})
    return ImmutableMultiDict(formdata)


def _validated(form_cls, **extra):
    form = form_cls(formdata=_json_formdata(**extra))
    if not form.validate():
        return form, error_response(400, "validation_error", fields=form.field_errors())
    return form, None


def _get_or_404(model, ident):
    obj = db.session.get(model, ident)
    if obj is None:
        abort(404)
    return obj


# ── Publishers ─────────────────────────────────────────────────────


@api_bp.route("/publishers", methods=["GET"])
def list_publishers():
    publishers = Publisher.query.order_by(Publisher.id).all()
    return jsonify([p.to_dict() for p in publishers])


@api_bp.route("/publishers", methods=["POST"])
def create_publisher():
    form, errors = _validated(PublisherForm)
    if errors:
        return errors
    publisher = Publisher(name=form.name.data, address=form.address.data or None)
    db.session.add(publisher)
    db.session.commit()
    return jsonify(publisher.to_dict()), 201


@api_bp.route("/publishers/<int:publisher_id>", methods=["DELETE"])
def delete_publisher(publisher_id):
    publisher = _get_or_404(Publisher, publisher_id)
    db.session.delete(publisher)
    db.session.commit()
    current_app.logger.info("Publisher %s deleted", publisher_id)
    return "", 204


# ── Authors ────────────────────────────────────────────────────────


@api_bp.route("/authors", methods=["GET"])
def list_authors():
    authors = Author.query.order_by(Author.last_name, Author.first_name).all()
    return jsonify([a.to_dict() for a in authors])


@api_bp.route("/authors", methods=["POST"])
def create_author():
    form, errors = _validated(AuthorForm)
    if errors:
        return errors
    author = Author(first_name=form.first_name.data, last_name=form.last_name.data)
    db.session.add(author)
    db.session.commit()
    return jsonify(author.to_dict()), 201


# ── Categories ─────────────────────────────────────────────────────


@api_bp.route("/categories", methods=["GET"])
def list_categories():
    categories = Category.query.order_by(Category.name).all()
    return jsonify([c.to_dict() for c in categories])


@api_bp.route("/categories", methods=["POST"])
def create_category():
    form, errors = _validated(CategoryForm)
    if errors:
        return errors
    category = Category(name=form.name.data)
    db.session.add(category)
    db.session.commit()
    return jsonify(category.to_dict()), 201


# ── Books ──────────────────────────────────────────────────────────


@api_bp.route("/books", methods=["GET"])
def list_books():
    query = Book.query
    category_id = request.args.get("category_id", type=int)
    if category_id is not None:
        query = query.filter(Book.categories.any(Category.id == category_id))
    author_id = request.args.get("author_id", type=int)
    if author_id is not None:
        query = query.filter(Book.authors.any(Author.id == author_id))
    books = query.order_by(Book.title).all()
    return jsonify([b.to_dict() for b in books])


@api_bp.route("/books", methods=["POST"])
def create_book():
    form, errors = _validated(BookForm)
    if errors:
        return errors

    book = Book(
        title=form.title.data,
        isbn=form.isbn.data,
        published_date=form.published_date.data,
        publisher_id=form.publisher_id.data,
    )
    db.session.add(book)
    db.session.flush()

    # Raw inserts keep unknown ids visible to the database's FK check
    author_ids = list(dict.fromkeys(form.author_ids.data or []))
    if author_ids:
        db.session.execute(book_authors.insert(), [{"book_id": book.id, "author_id": a} for a in author_ids])
    category_ids = list(dict.fromkeys(form.category_ids.data or []))
    if category_ids:
        db.session.execute(book_categories.insert(), [{"book_id": book.id, "category_id": c} for c in category_ids])
    db.session.commit()
    db.session.refresh(book)
    return jsonify(book.to_dict(detail=True)), 201


@api_bp.route("/books/<int:book_id>", methods=["GET"])
def get_book(book_id):
    book = _get_or_404(Book, book_id)
    return jsonify(book.to_dict(detail=True))


@api_bp.route("/books/<int:book_id>/authors", methods=["POST"])
def add_book_author(book_id):
    book = _get_or_404(Book, book_id)
    form, errors = _validated(BookAuthorForm)
    if errors:
        return errors
    db.session.execute(book_authors.insert().values(book_id=book.id, author_id=form.author_id.data))
    db.session.commit()
    db.session.refresh(book)
    return jsonify(book.to_dict(detail=True)), 201


# ── Members ────────────────────────────────────────────────────────


@api_bp.route("/members", methods=["GET"])
def list_members():
    members = Member.query.order_by(Member.last_name, Member.first_name).all()
    return jsonify([m.to_dict() for m in members])


@api_bp.route("/members", methods=["POST"])
def create_member():
    form, errors = _validated(MemberForm)
    if errors:
        return errors
    member = Member(
        first_name=form.first_name.data,
        last_name=form.last_name.data,
        email=form.email.data.strip().lower(),
        phone_number=form.phone_number.data or None,
        address=form.address.data or None,
        membership_start_date=form.membership_start_date.data,
    )
    db.session.add(member)
    db.session.commit()
    return jsonify(member.to_dict()), 201


# ── Reviews ────────────────────────────────────────────────────────


@api_bp.route("/reviews", methods=["POST"])
def create_review():
    form, errors = _validated(ReviewForm)
    if errors:
        return errors
    review = Review(
        book_id=form.book_id.data,
        member_id=form.member_id.data,
        rating=form.rating.data,
        comment=form.comment.data or None,
    )
    db.session.add(review)
    db.session.commit()
    return jsonify(review.to_dict()), 201


# ── Settings ───────────────────────────────────────────────────────


@api_bp.route("/settings", methods=["GET"])
def list_settings():
    return jsonify(get_settings_store().all())


@api_bp.route("/settings/<name>", methods=["PUT"])
def update_setting(name):
    form, errors = _validated(SettingForm, setting_name=name)
    if errors:
        return errors
    entry = get_settings_store().set(form.setting_name.data, form.value.data, description=form.description.data)
    return jsonify(
        {
            "setting_name": entry.setting_name,
            "setting_value": entry.setting_value,
            "description": entry.description,
        }
    )
