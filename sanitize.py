"""Input sanitizers applied to everything users submit.

HTML is cleaned with bleach using one of four allow-lists; the remaining
helpers narrow specific fields (emails, locations, phone numbers, URLs)
down to the characters they are expected to contain.
"""
import re
from typing import Any, Dict

import bleach

SANITIZE_CONFIGS = {
    # Only basic text formatting
    "strict": {
        "tags": {"b", "i", "em", "strong", "br"},
        "attributes": {},
    },
    "basic": {
        "tags": {"b", "i", "em", "strong", "br", "p", "span", "div"},
        "attributes": {"*": ["class"]},
    },
    "rich": {
        "tags": {
            "b", "i", "em", "strong", "br", "p", "span", "div",
            "h1", "h2", "h3", "h4", "h5", "h6",
            "ul", "ol", "li", "blockquote",
        },
        "attributes": {"*": ["class", "id"]},
    },
    # Strip all HTML
    "text_only": {
        "tags": set(),
        "attributes": {},
    },
}

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
LOCATION_DISALLOWED_RE = re.compile(r"[^a-zA-Z0-9\s,.\-#()]")
PHONE_DISALLOWED_RE = re.compile(r"[^0-9\s\-()+]")
ALLOWED_PROTOCOLS_RE = re.compile(r"^(https?://|mailto:)", re.IGNORECASE)
DANGEROUS_PROTOCOLS_RE = re.compile(r"^(javascript:|data:|vbscript:|file:|ftp:)", re.IGNORECASE)


def sanitize_html(dirty: str, level: str = "basic") -> str:
    if not dirty or not isinstance(dirty, str):
        return ""
    try:
        config = SANITIZE_CONFIGS[level]
    except KeyError:
        raise ValueError(f"Unknown sanitize level: {level}")
    return bleach.clean(
        dirty,
        tags=config["tags"],
        attributes=config["attributes"],
        strip=True,
        strip_comments=True,
    )


def sanitize_text(value: str) -> str:
    return sanitize_html(value, "text_only")


def sanitize_user_content(value: str) -> str:
    return sanitize_html(value, "basic")


def sanitize_rich_content(value: str) -> str:
    return sanitize_html(value, "rich")


def sanitize_email(email: str) -> str:
    """Lower-case and validate an email address, returning "" when it is not one."""
    if not email or not isinstance(email, str):
        return ""
    cleaned = sanitize_text(email.strip().lower())
    return cleaned if EMAIL_RE.match(cleaned) else ""


def sanitize_location(location: str) -> str:
    if not location or not isinstance(location, str):
        return ""
    return LOCATION_DISALLOWED_RE.sub("", sanitize_text(location)).strip()


def sanitize_phone(phone: str) -> str:
    if not phone or not isinstance(phone, str):
        return ""
    return PHONE_DISALLOWED_RE.sub("", sanitize_text(phone)).strip()


def sanitize_url(url: str) -> str:
    """Reject script-capable protocols; bare hosts are assumed to be https."""
    if not url or not isinstance(url, str):
        return ""
    cleaned = sanitize_text(url.strip())

    if DANGEROUS_PROTOCOLS_RE.match(cleaned):
        return ""

    if "://" not in cleaned and not cleaned.startswith("mailto:"):
        return f"https://{cleaned}"

    return cleaned if ALLOWED_PROTOCOLS_RE.match(cleaned) else ""


def sanitize_form_data(data: Dict[str, Any]) -> Dict[str, Any]:
    """Sanitize every string value, choosing the sanitizer from the key name."""
    sanitized = {}
    for key, value in data.items():
        if not isinstance(value, str):
            sanitized[key] = value
            continue

        name = key.lower()
        if "email" in name:
            sanitized[key] = sanitize_email(value)
        elif "phone" in name:
            sanitized[key] = sanitize_phone(value)
        elif "url" in name or "website" in name:
            sanitized[key] = sanitize_url(value)
        elif "location" in name or "address" in name:
            sanitized[key] = sanitize_location(value)
        elif "description" in name or "content" in name:
            sanitized[key] = sanitize_user_content(value)
        else:
            sanitized[key] = sanitize_text(value)
    return sanitized
