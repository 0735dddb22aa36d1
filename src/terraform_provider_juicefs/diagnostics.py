"""Diagnostics returned to the host orchestrator alongside operation results."""

from __future__ import annotations

from typing import Any, Dict, Iterator, List, Literal, Optional

from pydantic import BaseModel, Field, ValidationError


class Diagnostic(BaseModel):
    """A single user-facing error or warning."""

    severity: Literal["error", "warning"] = "error"
    summary: str
    detail: str = ""
    attribute: Optional[str] = None

    def __str__(self) -> str:
        prefix = f"{self.attribute}: " if self.attribute else ""
        if self.detail:
            return f"{prefix}{self.summary}: {self.detail}"
        return f"{prefix}{self.summary}"


class Diagnostics(BaseModel):
    """Ordered collection of diagnostics for one provider operation."""

    items: List[Diagnostic] = Field(default_factory=list)

    def add_error(
        self, summary: str, detail: str = "", attribute: Optional[str] = None
    ) -> None:
        self.items.append(
            Diagnostic(
                severity="error", summary=summary, detail=detail, attribute=attribute
            )
        )

    def add_warning(
        self, summary: str, detail: str = "", attribute: Optional[str] = None
    ) -> None:
        self.items.append(
            Diagnostic(
                severity="warning", summary=summary, detail=detail, attribute=attribute
            )
        )

    def extend(self, other: "Diagnostics") -> None:
        self.items.extend(other.items)

    def has_error(self) -> bool:
        return any(d.severity == "error" for d in self.items)

    def errors(self) -> List[Diagnostic]:
        return [d for d in self.items if d.severity == "error"]

    def to_list(self) -> List[Dict[str, Any]]:
        return [d.model_dump(exclude_none=True) for d in self.items]

    def __iter__(self) -> Iterator[Diagnostic]:  # type: ignore[override]
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)


def diagnostics_from_validation_error(
    exc: ValidationError, summary: str = "validation failed"
) -> Diagnostics:
    """Map each pydantic error onto a diagnostic pointing at its attribute."""
    diags = Diagnostics()
    for err in exc.errors():
        loc = ".".join(str(part) for part in err.get("loc", ()))
        message = err.get("msg", "invalid value")
        # pydantic prefixes messages raised from validators
        if message.startswith("Value error, "):
            message = message[len("Value error, ") :]
        diags.add_error(summary, message, attribute=loc or None)
    return diags
