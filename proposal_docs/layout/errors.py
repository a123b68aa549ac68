from __future__ import annotations

from typing import Iterable, List


class LayoutError(ValueError):
    """Base class for everything the layout engine refuses to lay out."""


class ValidationError(LayoutError):
    """The payload is unusable: a required item field is missing or a price is invalid."""

    def __init__(self, errors: Iterable[str] | str) -> None:
        if isinstance(errors, str):
            errors = [errors]
        self.errors: List[str] = list(errors)
        super().__init__("; ".join(self.errors) or "Invalid payload")


class ConfigurationError(LayoutError):
    """Page capacity or locale/currency settings cannot be honoured."""
