# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Typed view of the scanner's native JSON records.

Every field is optional. Defaults are applied here, once, so that the
normalizer never touches untyped data.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class RawPosition(BaseModel):
    """1-based line/column as emitted by the scanner."""

    model_config = ConfigDict(extra="ignore")

    line: int = 1
    col: int = 1
    offset: int | None = None

    @field_validator("line", "col", mode="before")
    @classmethod
    def _coerce_int(cls, v: object) -> int:
        try:
            return int(v)  # type: ignore[arg-type]
        except (TypeError, ValueError):
            return 1


class RawMetadata(BaseModel):
    model_config = ConfigDict(extra="allow")

    cwe: str | None = None
    owasp: str | None = None
    language: str | None = None
    mode: str | None = None

    @field_validator("cwe", "owasp", mode="before")
    @classmethod
    def _join_lists(cls, v: object) -> str | None:
        if v is None:
            return None
        if isinstance(v, (list, tuple)):
            joined = ", ".join(str(item) for item in v if item)
            return joined or None
        return str(v)

    @field_validator("language", "mode", mode="before")
    @classmethod
    def _stringify(cls, v: object) -> str | None:
        if v is None:
            return None
        if isinstance(v, (list, tuple)):
            return str(v[0]) if v else None
        return str(v)


class RawExtra(BaseModel):
    model_config = ConfigDict(extra="ignore")

    severity: str = ""
    message: str = ""
    metadata: RawMetadata = Field(default_factory=RawMetadata)

    @field_validator("severity", "message", mode="before")
    @classmethod
    def _none_to_empty(cls, v: object) -> str:
        return "" if v is None else str(v)

    @field_validator("metadata", mode="before")
    @classmethod
    def _metadata_object(cls, v: object) -> object:
        return v if isinstance(v, dict) else {}


class RawRecord(BaseModel):
    """One entry of the scanner's results array."""

    model_config = ConfigDict(extra="ignore")

    check_id: str = ""
    path: str = ""
    start: RawPosition | None = None
    end: RawPosition | None = None
    extra: RawExtra = Field(default_factory=RawExtra)

    @field_validator("check_id", "path", mode="before")
    @classmethod
    def _none_to_empty(cls, v: object) -> str:
        return "" if v is None else str(v)

    @field_validator("start", "end", mode="before")
    @classmethod
    def _position_object(cls, v: object) -> object:
        return v if isinstance(v, (dict, BaseModel)) else None

    @field_validator("extra", mode="before")
    @classmethod
    def _extra_object(cls, v: object) -> object:
        return v if isinstance(v, (dict, BaseModel)) else {}

    @classmethod
    def from_json(cls, entry: dict[str, Any]) -> RawRecord:
        return cls.model_validate(entry)
