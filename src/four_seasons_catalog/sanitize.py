import re
from typing import Any, Mapping


_TAG_RE = re.compile(r"<[^>]*>")
_ENTITY_REPLACEMENTS = (
    ("&nbsp;", " "),
    ("&amp;", "&"),
    ("&lt;", "<"),
    ("&gt;", ">"),
    ("&quot;", '"'),
)


def strip_tags(value: Any) -> str:
    if not value:
        return ""
    return _TAG_RE.sub("", str(value))


def clean_html_content(content: Any) -> str:
    """Plain text from a rich-text CMS field: tags dropped, common entities decoded."""
    if not content:
        return ""
    text = strip_tags(content)
    # &amp; goes after &nbsp; so "&amp;nbsp;" stays literal text.
    for entity, replacement in _ENTITY_REPLACEMENTS:
        text = text.replace(entity, replacement)
    return text.strip()


def safe_string(value: Any, fallback: str = "") -> str:
    """Accepts a str, a WordPress ``{"rendered": ...}`` field or a named object."""
    if isinstance(value, str):
        return value
    if isinstance(value, Mapping):
        if value.get("rendered"):
            return str(value["rendered"])
        if value.get("name"):
            return str(value["name"])
    return fallback


def safe_number(value: Any, fallback: float = 0) -> float:
    if isinstance(value, bool):
        return float(value)
    try:
        number = float(value)
    except (TypeError, ValueError):
        return fallback
    if number != number:
        return fallback
    return number
