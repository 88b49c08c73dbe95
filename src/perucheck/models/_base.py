"""Base model for normalized perucheck records.

Every record model inherits from :class:`PerucheckBaseModel` which
provides:

* ``alias_generator=to_camel`` so records serialise with the camelCase
  keys the presentation layer expects (``model_dump(by_alias=True)``).
* A ``model_validator(mode="before")`` that strips upstream sentinel
  values (``""``, ``"--"``, ``"-"``) so the field default (``None``) is
  used instead of an empty display string.
* Frozen instances: enrichment produces copies via ``model_copy``.
"""

from __future__ import annotations

from datetime import date
from typing import Any

from pydantic import BaseModel, ConfigDict, model_validator
from pydantic.alias_generators import to_camel

from perucheck.ingestion.normalize import parse_date

# Sentinel strings the scrapers emit for "not available".
_SENTINELS = frozenset({"", "--", "-"})


class PerucheckBaseModel(BaseModel):
    """Base for normalized records."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
        str_strip_whitespace=True,
    )

    @model_validator(mode="before")
    @classmethod
    def _drop_sentinels(cls, values: Any) -> Any:
        """Drop ``None`` and sentinel strings so field defaults apply."""
        if not isinstance(values, dict):
            return values
        cleaned: dict[str, Any] = {}
        for key, value in values.items():
            if value is None:
                continue
            if isinstance(value, str) and value.strip() in _SENTINELS:
                continue
            cleaned[key] = value
        return cleaned


class RecordDate(PerucheckBaseModel):
    """A date as the upstream printed it, plus its parsed form.

    ``text`` is always kept. ``value`` is ``None`` when the text could not
    be parsed, in which case the text remains the display form.
    """

    text: str
    value: date | None = None

    @classmethod
    def from_text(cls, text: str | None) -> RecordDate | None:
        if text is None or not text.strip():
            return None
        return cls(text=text.strip(), value=parse_date(text))

    def display(self) -> str:
        return self.value.isoformat() if self.value is not None else self.text
