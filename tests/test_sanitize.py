import pytest

from sanitize import (
    sanitize_email, sanitize_form_data, sanitize_html, sanitize_location,
    sanitize_phone, sanitize_rich_content, sanitize_text, sanitize_url, sanitize_user_content,
)


def test_text_strips_all_tags():
    assert sanitize_text("<b>Hello</b> <a href='x'>world</a>") == "Hello world"
    assert sanitize_text("") == ""
    assert sanitize_text(None) == ""


def test_user_content_keeps_basic_formatting_only():
    assert sanitize_user_content('<p class="note" onclick="evil()">Hi</p>') == '<p class="note">Hi</p>'
    assert sanitize_user_content("<h1>Big</h1>") == "Big"


def test_rich_content_allows_headings_and_lists():
    assert sanitize_rich_content('<h2 id="t">Title</h2><ul><li>one</li></ul>') == (
        '<h2 id="t">Title</h2><ul><li>one</li></ul>'
    )


def test_strict_level():
    assert sanitize_html('<strong>x</strong><span class="c">y</span>', "strict") == "<strong>x</strong>y"


def test_unknown_level():
    with pytest.raises(ValueError):
        sanitize_html("text", "loose")


def test_email():
    assert sanitize_email("  Jane.Doe@Example.COM ") == "jane.doe@example.com"
    assert sanitize_email("jane@localhost") == ""
    assert sanitize_email("not an email@x.io") == ""


def test_location():
    assert sanitize_location("Main St. #5 (north) <b>lane</b>!") == "Main St. #5 (north) lane"


def test_phone():
    assert sanitize_phone("+1 (555) 123-4567 ext") == "+1 (555) 123-4567"


def test_url():
    assert sanitize_url("javascript:alert(1)") == ""
    assert sanitize_url("ftp://files.example.com") == ""
    assert sanitize_url("example.com/road") == "https://example.com/road"
    assert sanitize_url("https://example.com/a") == "https://example.com/a"
    assert sanitize_url("mailto:ops@example.com") == "mailto:ops@example.com"
    assert sanitize_url("gopher://old.example.com") == ""


def test_form_data_routes_by_field_name():
    cleaned = sanitize_form_data({
        "title": "<i>Crash</i>",
        "description": "<em>Two</em> cars",
        "location": "<b>Elm St</b>",
        "reporter_email": "BAD",
        "contact_phone": "555-0100 call me",
        "website": "roads.example.org",
        "latitude": 40.7,
        "reporter_name": None,
    })
    assert cleaned == {
        "title": "Crash",
        "description": "<em>Two</em> cars",
        "location": "Elm St",
        "reporter_email": "",
        "contact_phone": "555-0100",
        "website": "https://roads.example.org",
        "latitude": 40.7,
        "reporter_name": None,
    }
