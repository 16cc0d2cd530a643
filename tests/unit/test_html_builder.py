"""
Unit Tests for the HTML Form Builder
"""

from types import SimpleNamespace

import pytest

from forms.html_builder import HTMLFormBuilder, humanize, sanitize_id, tag
from widgets.context import RenderContext


@pytest.fixture
def builder():
    return HTMLFormBuilder("user", {"name": "Ada", "admin": True, "bio": "<b>hi</b>", "address": {"city": "Paris"}})


class TestHelpers:
    """Test tag and naming helpers."""

    def test_sanitize_id(self):
        assert sanitize_id("user[address][city]") == "user_address_city"
        assert sanitize_id("something") == "something"

    def test_humanize(self):
        assert humanize("my_input") == "My input"

    def test_tag_sorts_and_escapes_attributes(self):
        assert tag("input", {"type": "text", "value": 'say "hi"', "id": "x"}) == (
            '<input id="x" type="text" value="say &quot;hi&quot;" />'
        )

    def test_tag_boolean_and_none_attributes(self):
        assert tag("input", {"checked": True, "disabled": False, "value": None}) == '<input checked="checked" />'

    def test_tag_with_content(self):
        assert tag("label", {"for": "x"}, "X") == '<label for="x">X</label>'


class TestFields:
    """Test field markup."""

    def test_label(self):
        assert HTMLFormBuilder("something").label("my_input") == (
            '<label for="something_my_input">My input</label>'
        )

    def test_label_with_text_and_attributes(self, builder):
        assert builder.label("name", "Full <name>", class_="req") == (
            '<label class_="req" for="user_name">Full &lt;name&gt;</label>'
        )

    def test_text_field_without_object(self):
        assert HTMLFormBuilder("something").text_field("my_input") == (
            '<input id="something_my_input" name="something[my_input]" type="text" />'
        )

    def test_text_field_takes_value_from_mapping(self, builder):
        assert builder.text_field("name") == '<input id="user_name" name="user[name]" type="text" value="Ada" />'

    def test_text_field_takes_value_from_attribute(self):
        builder = HTMLFormBuilder("post", SimpleNamespace(title="Hello"))

        assert builder.text_field("title", size=40) == (
            '<input id="post_title" name="post[title]" size="40" type="text" value="Hello" />'
        )

    def test_password_field_never_shows_value(self):
        builder = HTMLFormBuilder("user", {"password": "secret"})

        assert builder.password_field("password") == (
            '<input id="user_password" name="user[password]" type="password" />'
        )

    def test_hidden_field(self, builder):
        assert builder.hidden_field("name") == '<input id="user_name" name="user[name]" type="hidden" value="Ada" />'

    def test_text_area_escapes_value(self, builder):
        assert builder.text_area("bio") == '<textarea id="user_bio" name="user[bio]">&lt;b&gt;hi&lt;/b&gt;</textarea>'

    def test_check_box(self, builder):
        assert builder.check_box("admin") == (
            '<input name="user[admin]" type="hidden" value="0" />'
            '<input checked="checked" id="user_admin" name="user[admin]" type="checkbox" value="1" />'
        )

    def test_unchecked_check_box(self):
        assert HTMLFormBuilder("user").check_box("admin") == (
            '<input name="user[admin]" type="hidden" value="0" />'
            '<input id="user_admin" name="user[admin]" type="checkbox" value="1" />'
        )

    def test_submit(self):
        assert HTMLFormBuilder("user_profile").submit() == (
            '<input name="commit" type="submit" value="Save User profile" />'
        )
        assert HTMLFormBuilder("user").submit("Go") == '<input name="commit" type="submit" value="Go" />'


class TestFieldsFor:
    """Test nested builders."""

    def test_nested_builder_scopes_names_and_values(self, builder):
        nested = builder.fields_for("address")

        assert isinstance(nested, HTMLFormBuilder)
        assert nested.object_name == "user[address]"
        assert nested.text_field("city") == (
            '<input id="user_address_city" name="user[address][city]" type="text" value="Paris" />'
        )

    def test_explicit_record_object(self, builder):
        nested = builder.fields_for("address", {"city": "Rome"})

        assert nested.value("city") == "Rome"

    def test_nested_builder_class_from_options(self):
        class Custom(HTMLFormBuilder):
            pass

        nested = HTMLFormBuilder("user", options={"builder": Custom}).fields_for("address")

        assert type(nested) is Custom
        assert nested.options["builder"] is Custom

    def test_block_output_is_captured(self):
        context = RenderContext()
        builder = HTMLFormBuilder("user", {"address": {"city": "Paris"}}, context)

        markup = builder.fields_for("address", block=lambda fields: fields.text_field("city"))

        assert markup == '<input id="user_address_city" name="user[address][city]" type="text" value="Paris" />'
        assert str(context.output) == ""
