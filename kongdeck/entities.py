"""Diffing of services, routes, upstreams, targets, certificates and plugins.

A state is any object exposing one collection per entity kind as an
attribute. A collection provides ``get_all()`` and a lookup method (``get``
by default, ``get_by_prop`` for plugins) that raises
:class:`~kongdeck.events.NotFoundError` when nothing matches.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any, Callable, Iterator

from kongdeck.crud import CREATE, DELETE, UPDATE
from kongdeck.events import Event, NotFoundError

KeyFunc = Callable[[Any], tuple]
EqualFunc = Callable[[Any, Any], bool]

_TIMESTAMP_FIELDS = frozenset({"created_at", "updated_at"})


def _comparable(obj: Any) -> Any:
    if hasattr(obj, "__dict__"):
        return {
            name: value
            for name, value in vars(obj).items()
            if name not in _TIMESTAMP_FIELDS
        }
    return obj


def equal_ignoring_timestamps(current: Any, target: Any) -> bool:
    """Return True if both entities match apart from their timestamps."""
    return _comparable(current) == _comparable(target)


def _by_id(obj: Any) -> tuple:
    return (obj.id,)


def _by_name(obj: Any) -> tuple:
    return (obj.name,)


def _by_upstream_and_id(obj: Any) -> tuple:
    return (obj.upstream.id, obj.id)


def _identifier(obj: Any) -> Any:
    name = getattr(obj, "name", None)
    return name if name is not None else getattr(obj, "id", None)


def _target_identifier(obj: Any) -> Any:
    return getattr(obj, "target", None)


def foreign_names(plugin: Any) -> tuple[str, str, str]:
    """Return the service, route and consumer IDs a plugin is attached to.

    A missing reference gives an empty string in its place.
    """
    if plugin is None:
        return "", "", ""

    def ref_id(attr: str) -> str:
        ref = getattr(plugin, attr, None)
        if ref is None or getattr(ref, "id", None) is None:
            return ""
        return ref.id

    return ref_id("service"), ref_id("route"), ref_id("consumer")


def _plugin_key(plugin: Any) -> tuple:
    return (plugin.name, *foreign_names(plugin))


@dataclass(frozen=True)
class EntityDiff:
    """Compares one collection of entities between a current and a target state."""

    kind: str
    collection: str
    label: str
    delete_key: KeyFunc = _by_id
    change_key: KeyFunc = _by_id
    identifier: Callable[[Any], Any] = _identifier
    lookup: str = "get"
    equal: EqualFunc = field(default=equal_ignoring_timestamps)

    def _all(self, state: Any) -> list[Any]:
        try:
            return list(getattr(state, self.collection).get_all())
        except Exception as exc:
            raise RuntimeError(
                f"error fetching {self.label} from state: {exc}"
            ) from exc

    def _find(self, state: Any, key: tuple) -> Any:
        return getattr(getattr(state, self.collection), self.lookup)(*key)

    def deletions(self, current: Any, target: Any) -> Iterator[Event]:
        """Yield a delete event for each current entity absent from target."""
        for obj in self._all(current):
            try:
                self._find(target, self.delete_key(obj))
            except NotFoundError:
                yield Event(op=DELETE, kind=self.kind, obj=obj)
            except Exception as exc:
                raise RuntimeError(
                    f"looking up {self.kind} '{self.identifier(obj)}': {exc}"
                ) from exc

    def changes(self, current: Any, target: Any) -> Iterator[Event]:
        """Yield create or update events that bring current to target."""
        for obj in self._all(target):
            wanted = copy.deepcopy(obj)
            try:
                existing = self._find(current, self.change_key(wanted))
            except NotFoundError:
                yield Event(op=CREATE, kind=self.kind, obj=wanted)
                continue
            except Exception as exc:
                raise RuntimeError(
                    f"error looking up {self.kind} {self.identifier(wanted)}: {exc}"
                ) from exc
            if not self.equal(existing, wanted):
                yield Event(op=UPDATE, kind=self.kind, obj=wanted, old_obj=existing)


SERVICES = EntityDiff(kind="service", collection="services", label="services")
ROUTES = EntityDiff(kind="route", collection="routes", label="routes")
UPSTREAMS = EntityDiff(
    kind="upstream",
    collection="upstreams",
    label="upstreams",
    change_key=_by_name,
)
TARGETS = EntityDiff(
    kind="target",
    collection="targets",
    label="targets",
    delete_key=_by_upstream_and_id,
    change_key=_by_upstream_and_id,
    identifier=_target_identifier,
)
CERTIFICATES = EntityDiff(
    kind="certificate", collection="certificates", label="certificates"
)
CA_CERTIFICATES = EntityDiff(
    kind="ca_certificate", collection="ca_certificates", label="caCertificates"
)
PLUGINS = EntityDiff(
    kind="plugin",
    collection="plugins",
    label="plugins",
    delete_key=_plugin_key,
    change_key=_plugin_key,
    lookup="get_by_prop",
)