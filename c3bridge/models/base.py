"""Base model for all c3bridge Pydantic models.

This module provides base model classes that enforce consistent serialization
behavior across all c3bridge models.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict


class C3BridgeBaseModel(BaseModel):
    """Base model class for mutable c3bridge models."""

    model_config = ConfigDict(
        extra="forbid",
        str_strip_whitespace=True,
        validate_assignment=True,
    )

    def to_dict(self) -> dict[str, Any]:
        """Convert model to dictionary with JSON-compatible serialization."""
        return self.model_dump(by_alias=True, exclude_unset=True, mode="json")

    def to_dict_full(self) -> dict[str, Any]:
        """Convert model to dictionary including all fields (even unset ones)."""
        return self.model_dump(by_alias=True, exclude_unset=False, mode="json")


class FrozenModel(C3BridgeBaseModel):
    """Immutable record model.

    Instances are hashable and reject attribute assignment after creation.
    """

    model_config = ConfigDict(
        extra="forbid",
        str_strip_whitespace=True,
        frozen=True,
    )
