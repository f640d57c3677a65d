"""Events produced by diffing two states, and helpers for them."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from kongdeck.crud import Op

NODE_KEY = "node"


class NotFoundError(LookupError):
    """Raised when an entity is not present in a state."""

    def __init__(self, message: str = "entity not found") -> None:
        super().__init__(message)


@dataclass
class Event:
    """An imperative operation that moves Kong closer to the target state."""

    op: Op
    kind: str
    obj: Any
    old_obj: Any = None


def is_placeholder(entity_id: str | None) -> bool:
    """Return True if the identifier is a generated placeholder."""
    return entity_id is not None and entity_id.startswith("placeholder")