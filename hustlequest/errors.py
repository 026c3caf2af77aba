"""Domain exceptions for HustleQuest.

The engines raise these for business-rule violations; the route layer
turns them into responses (``NotFoundError`` -> 404, the rest -> 400/409).
Nothing in the core retries or swallows them.
"""

from __future__ import annotations

from typing import Any


class HustleQuestError(Exception):
    """Base class for every error the core raises on purpose.

    Args:
        message: Human-readable description.
        details: Extra structured context (entity ids, offending values).
    """

    error_code = "hustlequest_error"

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = dict(details or {})

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class NotFoundError(HustleQuestError):
    """No entity matches the given id."""

    error_code = "not_found"

    def __init__(self, entity: str, entity_id: str) -> None:
        super().__init__(
            f"{entity} {entity_id!r} not found",
            {"entity": entity, "id": entity_id},
        )


class InvalidStateError(HustleQuestError):
    """The entity exists but cannot make the requested transition."""

    error_code = "invalid_state"


class ValidationError(HustleQuestError):
    """Malformed input caught before any persistence call."""

    error_code = "validation_error"
