"""Reusable pydantic validators for request bodies."""

from pydantic import field_validator


def not_null(*fields: str):
    """Validator for partial updates: *fields* may be omitted but not sent as ``null``.

    Bind it in the model body, e.g. ``reject_nulls = not_null("name")``.
    Omitted fields are untouched because pydantic skips validators on defaults.
    """

    def check(cls, value):
        if value is None:
            raise ValueError("may not be null")
        return value

    return field_validator(*fields)(check)
