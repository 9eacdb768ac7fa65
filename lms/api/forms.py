from flask_wtf import FlaskForm
from wtforms import DateField, IntegerField, SelectMultipleField, StringField, TextAreaField
from wtforms.validators import DataRequired, Email, InputRequired, Length, NumberRange, Optional


class JsonForm(FlaskForm):
    class Meta:
        csrf = False  # JSON API, no browser session

    def field_errors(self):
        return {name: messages for name, messages in self.errors.items()}


class PublisherForm(JsonForm):
    name = StringField("Name", validators=[DataRequired(), Length(max=255)])
    address = StringField("Address", validators=[Optional(), Length(max=255)])


class AuthorForm(JsonForm):
    first_name = StringField("First name", validators=[DataRequired(), Length(max=100)])
    last_name = StringField("Last name", validators=[DataRequired(), Length(max=100)])


class CategoryForm(JsonForm):
    name = StringField("Name", validators=[DataRequired(), Length(max=100)])


class BookForm(JsonForm):
    title = StringField("Title", validators=[DataRequired(), Length(max=255)])
    isbn = StringField("ISBN", validators=[DataRequired(), Length(max=20)])
    published_date = DateField("Published", validators=[Optional()])
    publisher_id = IntegerField("Publisher", validators=[Optional()])
    author_ids = SelectMultipleField("Authors", coerce=int, validate_choice=False)
    category_ids = SelectMultipleField("Categories", coerce=int, validate_choice=False)


class BookAuthorForm(JsonForm):
    author_id = IntegerField("Author", validators=[InputRequired()])


class MemberForm(JsonForm):
    first_name = StringField("First name", validators=[DataRequired(), Length(max=100)])
    last_name = StringField("Last name", validators=[DataRequired(), Length(max=100)])
    email = StringField("Email", validators=[DataRequired(), Email(), Length(max=255)])
    phone_number = StringField("Phone", validators=[Optional(), Length(max=20)])
    address = StringField("Address", validators=[Optional(), Length(max=255)])
    membership_start_date = DateField("Member since", validators=[InputRequired()])


class ReviewForm(JsonForm):
    book_id = IntegerField("Book", validators=[InputRequired()])
    member_id = IntegerField("Member", validators=[InputRequired()])
    rating = IntegerField("Rating", validators=[InputRequired(), NumberRange(min=1, max=5)])
    comment = TextAreaField("Comment", validators=[Optional(), Length(max=10000)])


class SettingForm(JsonForm):
    # Taken from the URL, validated like any other input
    setting_name = StringField("Name", validators=[DataRequired(), Length(max=255)])
    value = StringField("Value", validators=[Optional(), Length(max=255)])
    description = TextAreaField("Description", validators=[Optional()])
