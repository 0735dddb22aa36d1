"""Responses handed back to the host for each provider operation."""

from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

from .diagnostics import Diagnostics


class OperationResult(BaseModel):
    """New state (``None`` when absent) plus any diagnostics."""

    state: Optional[Dict[str, Any]] = None
    diagnostics: Diagnostics = Field(default_factory=Diagnostics)

    @property
    def ok(self) -> bool:
        return not self.diagnostics.has_error()

    def to_wire(self) -> Dict[str, Any]:
        return {"state": self.state, "diagnostics": self.diagnostics.to_list()}


class ResourceResult(OperationResult):
    """Result of a resource lifecycle operation."""


class DataSourceResult(OperationResult):
    """Result of a data source read."""
