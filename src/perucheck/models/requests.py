"""Pydantic request models for client entrypoints.

These models provide a consistent "validate → normalize → execute" flow.
They are used internally by :class:`perucheck.client.PerucheckClient`.
"""

from __future__ import annotations

import re
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, model_validator

from perucheck._constants import NATIONAL_ID_LENGTH, PLATE_LENGTH


class QueryField(StrEnum):
    """Kind of value a service is queried with; also the JSON body key."""

    PLATE = "placa"
    NATIONAL_ID = "dni"


class Scope(StrEnum):
    """Entity a service reports on."""

    VEHICLE = "vehiculo"
    PERSON = "persona"

    @classmethod
    def _missing_(cls, value: object) -> Scope | None:
        aliases = {"vehicle": cls.VEHICLE, "person": cls.PERSON}
        return aliases.get(str(value).strip().lower())


_PLATE_RE = re.compile(rf"^[A-Z0-9]{{{PLATE_LENGTH}}}$")
_NATIONAL_ID_RE = re.compile(rf"^\d{{{NATIONAL_ID_LENGTH}}}$")


def format_plate(value: str) -> str:
    """Format free-form input as a display plate (``"abc123"`` → ``"ABC-123"``).

    Non-alphanumerics are dropped and the result is capped at six characters.
    """
    clean = re.sub(r"[^A-Za-z0-9]", "", value).upper()[:PLATE_LENGTH]
    if len(clean) > 3:
        return f"{clean[:3]}-{clean[3:]}"
    return clean


def format_national_id(value: str) -> str:
    """Keep the first eight digits of free-form input."""
    return re.sub(r"\D", "", value)[:NATIONAL_ID_LENGTH]


def display_query_value(field: QueryField, value: str) -> str:
    """Human form of a validated query value, as shown in ledger summaries."""
    if field == QueryField.PLATE:
        return format_plate(value)
    return value


class QueryRequest(BaseModel):
    """A query value checked against the shape its field requires.

    Plates are six alphanumerics once dashes and surrounding whitespace are
    removed (upper-cased on the way in); national ids are exactly eight
    digits.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        str_strip_whitespace=True,
    )

    field: QueryField
    value: str

    @model_validator(mode="after")
    def _check_shape(self) -> QueryRequest:
        if self.field == QueryField.PLATE:
            plate = self.value.replace("-", "").replace(" ", "").upper()
            if not _PLATE_RE.fullmatch(plate):
                raise ValueError(f"plate must be {PLATE_LENGTH} alphanumeric characters")
            object.__setattr__(self, "value", plate)
        elif not _NATIONAL_ID_RE.fullmatch(self.value):
            raise ValueError(f"dni must be exactly {NATIONAL_ID_LENGTH} digits")
        return self

    @property
    def payload(self) -> dict[str, str]:
        """JSON body posted to the upstream service."""
        return {self.field.value: self.value}
