"""Actions that apply a completed event back onto the in-memory state."""

from __future__ import annotations

from typing import Any, Callable

from kongdeck.crud import Actions, Registry

KeyFunc = Callable[[Any], tuple]


def _id_key(obj: Any) -> tuple:
    return (obj.id,)


def _target_key(obj: Any) -> tuple:
    return (obj.upstream.id, obj.id)


class CollectionPostAction(Actions):
    """Adds, updates or deletes an entity in one collection of a state.

    The state is expected to expose the collection as an attribute with
    ``add``, ``update`` and ``delete`` methods.
    """

    def __init__(self, collection: str, key: KeyFunc = _id_key) -> None:
        self.collection = collection
        self._key = key

    def _collection_of(self, state: Any) -> Any:
        try:
            return getattr(state, self.collection)
        except AttributeError:
            raise TypeError(
                f"state has no '{self.collection}' collection"
            ) from None

    def create(self, state: Any, obj: Any) -> None:
        """Add obj to the collection in state."""
        self._collection_of(state).add(obj)
        return None

    def update(self, state: Any, obj: Any) -> None:
        """Replace obj in the collection in state."""
        self._collection_of(state).update(obj)
        return None

    def delete(self, state: Any, obj: Any) -> None:
        """Remove obj from the collection in state."""
        self._collection_of(state).delete(*self._key(obj))
        return None


_POST_ACTIONS: tuple[tuple[str, str, KeyFunc], ...] = (
    ("service", "services", _id_key),
    ("route", "routes", _id_key),
    ("upstream", "upstreams", _id_key),
    ("target", "targets", _target_key),
    ("certificate", "certificates", _id_key),
    ("ca_certificate", "ca_certificates", _id_key),
    ("plugin", "plugins", _id_key),
    ("consumer", "consumers", _id_key),
    ("key-auth", "key_auths", _id_key),
    ("hmac-auth", "hmac_auths", _id_key),
    ("jwt-auth", "jwt_auths", _id_key),
    ("basic-auth", "basic_auths", _id_key),
    ("acl-group", "acl_groups", _id_key),
    ("oauth2-cred", "oauth2_creds", _id_key),
)


def build_registry() -> Registry:
    """Return a registry with a post-processing action for every kind."""
    registry = Registry()
    for kind, collection, key in _POST_ACTIONS:
        registry.register(kind, CollectionPostAction(collection, key))
    return registry