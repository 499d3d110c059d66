# src/filters/product_form.py

"""Add/edit form validation: raw text fields to a wire payload."""

import logging
import math
from typing import Any

from src.config.settings import Settings
from src.models.product import (
    AVAILABILITY_STATUSES,
    FIELD_WIRE_NAMES,
    Product,
)

logger = logging.getLogger("catalog_admin.filters")

REQUIRED_TEXT_FIELDS: tuple[str, ...] = (
    "title",
    "description",
    "category",
    "sku",
)

OPTIONAL_TEXT_FIELDS: tuple[str, ...] = (
    "brand",
    "warrantyInformation",
    "shippingInformation",
    "returnPolicy",
)

# wire key -> (minimum, maximum or None)
FLOAT_FIELDS: dict[str, tuple[float, float | None]] = {
    "price": (0.0, None),
    "discountPercentage": (0.0, 100.0),
    "rating": (0.0, 5.0),
    "weight": (0.0, None),
}

INT_FIELDS: dict[str, tuple[int, int | None]] = {
    "stock": (0, None),
    "minimumOrderQuantity": (1, None),
}

# numeric fields that may not be left blank
REQUIRED_NUMBER_FIELDS: frozenset[str] = frozenset({"price", "stock"})

FORM_FIELDS: tuple[str, ...] = tuple(FIELD_WIRE_NAMES.values())


def form_defaults(product: Product | None = None) -> dict[str, str]:
    """Initial text for every form field.

    A blank form starts "In Stock" with a minimum order of 1.
    """
    if product is None:
        defaults = {name: "" for name in FORM_FIELDS}
        defaults.update(
            {
                "price": "0",
                "discountPercentage": "0",
                "rating": "0",
                "stock": "0",
                "weight": "0",
                "availabilityStatus": AVAILABILITY_STATUSES[0],
                "minimumOrderQuantity": "1",
            }
        )
        return defaults

    return {
        wire: _format_value(getattr(product, attr))
        for attr, wire in FIELD_WIRE_NAMES.items()
    }


def _format_value(value: Any) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


class ProductFormValidator:
    """Validate raw form input before it is sent to the server."""

    @staticmethod
    def validate(
        fields: dict[str, str],
        current_category: str | None = None,
    ) -> tuple[dict[str, Any], dict[str, str]]:
        """Convert text inputs to a payload.

        Returns the payload (only fields that parsed) and a mapping of
        field name to error message.  The payload must not be sent
        when the error mapping is non-empty.

        ``current_category`` is the category of the product being
        edited; it is accepted even when it is not a known category.
        """
        payload: dict[str, Any] = {}
        errors: dict[str, str] = {}

        for name in REQUIRED_TEXT_FIELDS:
            value = fields.get(name, "").strip()
            if not value:
                errors[name] = f"{_label(name)} is required"
            else:
                payload[name] = value

        for name in OPTIONAL_TEXT_FIELDS:
            payload[name] = fields.get(name, "").strip()

        for name, (low, high) in FLOAT_FIELDS.items():
            raw = fields.get(name, "").strip()
            if not raw:
                if name in REQUIRED_NUMBER_FIELDS:
                    errors[name] = f"{_label(name)} is required"
                    continue
                raw = "0"
            try:
                number = float(raw)
            except ValueError:
                errors[name] = f"{_label(name)} must be a number"
                continue
            if not math.isfinite(number):
                errors[name] = f"{_label(name)} must be a finite number"
                continue
            message = _range_error(name, number, low, high)
            if message:
                errors[name] = message
            else:
                payload[name] = number

        for name, (low_int, high_int) in INT_FIELDS.items():
            raw = fields.get(name, "").strip()
            if not raw:
                if name in REQUIRED_NUMBER_FIELDS:
                    errors[name] = f"{_label(name)} is required"
                    continue
                raw = str(low_int)
            try:
                whole = int(raw)
            except ValueError:
                errors[name] = f"{_label(name)} must be a whole number"
                continue
            message = _range_error(name, whole, low_int, high_int)
            if message:
                errors[name] = message
            else:
                payload[name] = whole

        status = fields.get("availabilityStatus", "").strip()
        if status not in AVAILABILITY_STATUSES:
            errors["availabilityStatus"] = (
                "Availability must be one of: "
                + ", ".join(AVAILABILITY_STATUSES)
            )
        else:
            payload["availabilityStatus"] = status

        category = payload.get("category")
        if (
            category is not None
            and category != current_category
            and category not in Settings.CATEGORIES
        ):
            errors["category"] = f"Unknown category '{category}'"
            del payload["category"]

        if errors:
            logger.debug("Form rejected: %s", errors)
        return payload, errors

    @staticmethod
    def changed_fields(
        product: Product, payload: dict[str, Any],
    ) -> dict[str, Any]:
        """Keep only the payload fields that differ from *product*."""
        current = product.to_payload()
        return {
            name: value
            for name, value in payload.items()
            if current.get(name) != value
        }


def _label(name: str) -> str:
    """``minimumOrderQuantity`` -> ``Minimum order quantity``."""
    words: list[str] = []
    word = ""
    for ch in name:
        if ch.isupper() and word:
            words.append(word)
            word = ch.lower()
        else:
            word += ch
    words.append(word)
    text = " ".join(words)
    return text[:1].upper() + text[1:]


def _range_error(
    name: str,
    value: float,
    low: float,
    high: float | None,
) -> str | None:
    if value < low:
        return f"{_label(name)} must be at least {low:g}"
    if high is not None and value > high:
        return f"{_label(name)} must be at most {high:g}"
    return None
