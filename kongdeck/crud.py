"""Registry of CRUD actions keyed by entity kind."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any


class CrudError(Exception):
    """Raised when a registry lookup or a registered action fails."""


@dataclass(frozen=True)
class Op:
    """A CRUD operation, identified by its name."""

    name: str = ""

    def __str__(self) -> str:
        return self.name


CREATE = Op("Create")
UPDATE = Op("Update")
DELETE = Op("Delete")


class Actions(ABC):
    """CRUD operations for one kind of entity."""

    @abstractmethod
    def create(self, *args: Any) -> Any:
        """Create an entity."""

    @abstractmethod
    def update(self, *args: Any) -> Any:
        """Update an entity."""

    @abstractmethod
    def delete(self, *args: Any) -> Any:
        """Delete an entity."""


class Registry:
    """Holds kinds and the actions registered for each."""

    def __init__(self) -> None:
        self._types: dict[str, Actions] = {}

    def register(self, kind: str, actions: Actions) -> None:
        """Register actions for kind; a kind may be registered only once."""
        if not kind:
            raise CrudError("kind cannot be empty")
        if kind in self._types:
            raise CrudError(f"kind '{kind}' already registered")
        self._types[kind] = actions

    def get(self, kind: str) -> Actions:
        """Return the actions registered for kind."""
        if not kind:
            raise CrudError("kind cannot be empty")
        try:
            return self._types[kind]
        except KeyError:
            raise CrudError(f"kind '{kind}' is not registered") from None

    def _call(self, kind: str, op: Op, args: tuple[Any, ...]) -> Any:
        try:
            actions = self.get(kind)
        except CrudError as exc:
            raise CrudError(f"{op} failed: {exc}") from exc

        handlers = {
            CREATE.name: actions.create,
            UPDATE.name: actions.update,
            DELETE.name: actions.delete,
        }
        handler = handlers.get(op.name)
        if handler is None:
            raise CrudError(f"unknown operation: {op.name}")
        try:
            return handler(*args)
        except Exception as exc:
            raise CrudError(f"{op} failed: {exc}") from exc

    def create(self, kind: str, *args: Any) -> Any:
        """Call the create action of kind with args."""
        return self._call(kind, CREATE, args)

    def update(self, kind: str, *args: Any) -> Any:
        """Call the update action of kind with args."""
        return self._call(kind, UPDATE, args)

    def delete(self, kind: str, *args: Any) -> Any:
        """Call the delete action of kind with args."""
        return self._call(kind, DELETE, args)

    def do(self, kind: str, op: Op, *args: Any) -> Any:
        """Call the action of kind selected by op with args."""
        return self._call(kind, op, args)