from __future__ import annotations

from typing import Any, Mapping, Optional
from urllib.parse import quote


WHATSAPP_BASE = "https://wa.me/"

# (form field, label, suffix) in the order the message lists them.
SELL_MESSAGE_FIELDS = (
    ("property_type", "Property Type", ""),
    ("area", "Area", " sqm"),
    ("number_of_rooms", "Rooms", ""),
    ("number_of_bathrooms", "Bathrooms", ""),
    ("finishing_level", "Finishing", ""),
    ("selling_type", "Selling Type", ""),
    ("delivery_date", "Delivery", ""),
    ("special_features", "Features", ""),
    ("payment_plan", "Payment Plan", ""),
    ("location_description", "Location", ""),
    ("amenities", "Amenities", ""),
    ("description", "Description", ""),
    ("summary", "Summary", ""),
)


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def build_sell_property_message(details: Mapping[str, Any]) -> str:
    lines = ["I'd like to sell my property. Here are the details:"]
    for key, label, suffix in SELL_MESSAGE_FIELDS:
        lines.append(f"- {label}: {_text(details.get(key))}{suffix}")
    return "\n".join(lines)


def build_whatsapp_url(message: str, phone: Optional[str] = None) -> str:
    digits = "".join(ch for ch in (phone or "") if ch.isdigit())
    return f"{WHATSAPP_BASE}{digits}?text={quote(message, safe='')}"


def build_compound_inquiry_url(compound_name: str, phone: str) -> str:
    return build_whatsapp_url(f"I'm interested in {compound_name}", phone)
