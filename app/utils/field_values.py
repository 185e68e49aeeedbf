# app/utils/field_values.py
"""
Turning raw form-data values into display strings, plus the small derivations
the court-form tables are built from. Nothing here raises on odd input.
"""
from typing import Any, Mapping, Optional, Sequence

from app.core.config import settings
from app.services.completion import is_answered

TRUTHY = ("true", "yes", "1")


def to_display(value: Any) -> str:
    if not is_answered(value):
        return ""
    if isinstance(value, bool):
        return "Yes" if value else "No"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (list, tuple)):
        return serialize_list(value)
    if isinstance(value, dict):
        return ", ".join(to_display(v) for v in value.values() if is_answered(v))
    return str(value)


def yes_no(value: Any) -> str:
    if isinstance(value, bool):
        return "Yes" if value else "No"
    return "Yes" if str(value).strip().lower() in TRUTHY else "No"


def serialize_list(items: Sequence[Any]) -> str:
    parts = [to_display(item) for item in items]
    return "; ".join(p for p in parts if p)


def join_address(street: Any, city: Any, state: Any, zip_code: Any, default_state: str = None) -> str:
    street, city, zip_code = to_display(street), to_display(city), to_display(zip_code)
    if not (street or city or zip_code):
        return ""
    state = to_display(state) or (default_state or settings.DEFAULT_STATE)
    parts = [street, city, f"{state} {zip_code}".strip()]
    return ", ".join(p for p in parts if p)


class Derivation:
    """A table entry that computes its value from the whole record."""

    def resolve(self, form_data: Mapping[str, Any]) -> str:
        raise NotImplementedError


class FirstOf(Derivation):
    def __init__(self, *sources: str):
        self.sources = sources

    def resolve(self, form_data):
        for source in self.sources:
            value = form_data.get(source)
            if is_answered(value):
                return to_display(value)
        return ""


class Default(Derivation):
    def __init__(self, source: str, default: str):
        self.source = source
        self.default = default

    def resolve(self, form_data):
        return to_display(form_data.get(self.source)) or self.default


class Constant(Derivation):
    def __init__(self, value: str):
        self.value = value

    def resolve(self, form_data):
        return self.value


class YesNo(Derivation):
    """Checkbox-style value. Unanswered stays empty."""

    def __init__(self, source: str):
        self.source = source

    def resolve(self, form_data):
        value = form_data.get(self.source)
        if not is_answered(value):
            return ""
        return yes_no(value)


class ListOf(Derivation):
    def __init__(self, source: str):
        self.source = source

    def resolve(self, form_data):
        value = form_data.get(self.source)
        if isinstance(value, (list, tuple)):
            return serialize_list(value)
        return to_display(value)


class Address(Derivation):
    def __init__(self, street: str, city: str, state: str, zip_code: str, default_state: Optional[str] = None):
        self.street = street
        self.city = city
        self.state = state
        self.zip_code = zip_code
        self.default_state = default_state

    @classmethod
    def of(cls, prefix: str, default_state: str = None):
        """<prefix>_address, <prefix>_city, <prefix>_state, <prefix>_zip"""
        return cls(f"{prefix}_address", f"{prefix}_city", f"{prefix}_state", f"{prefix}_zip", default_state)

    def resolve(self, form_data):
        return join_address(
            form_data.get(self.street),
            form_data.get(self.city),
            form_data.get(self.state),
            form_data.get(self.zip_code),
            self.default_state,
        )
