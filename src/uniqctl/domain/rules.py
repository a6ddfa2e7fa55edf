"""UniqueRule — declarative definition of one uniqueness check.

Rules are long-lived and frozen. They are usually loaded from the
``[rules.<name>]`` tables of ``uniqctl.toml`` but can be built in code.
Structural checks that need the record store (known record type, mapped
fields, lookup operation) happen when a checker is bound to the rule.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, field_validator

IS_NOT_UNIQUE = "IS_NOT_UNIQUE"
DEFAULT_MESSAGE = "This value is already used."
DEFAULT_LOOKUP_METHOD = "find_by"


class UniqueRule(BaseModel):
    """Fields of one record type that must be jointly unique.

    Attributes:
        record_type: Name of the record type being checked.
        fields: Field or association names checked together, in order.
        lookup_method: Repository operation used to find conflicting records.
        error_path: Field blamed on failure; ``fields[0]`` when unset.
        ignore_null: Skip the check when any checked value is None.
        message: Human-readable violation message.
    """

    model_config = {"frozen": True}

    record_type: str = Field(min_length=1)
    fields: tuple[str, ...]
    lookup_method: str = DEFAULT_LOOKUP_METHOD
    error_path: str | None = None
    ignore_null: bool = True
    message: str = DEFAULT_MESSAGE

    @field_validator("fields", mode="before")
    @classmethod
    def _coerce_single_field(cls, value: Any) -> Any:
        if isinstance(value, str):
            return (value,)
        return value

    @property
    def blamed_field(self) -> str:
        """Field a violation is attributed to."""
        return self.error_path if self.error_path is not None else self.fields[0]
