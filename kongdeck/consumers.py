"""Diffing of consumers and the credentials attached to them."""

from __future__ import annotations

from typing import Any

from kongdeck.entities import EntityDiff


def _by_id(obj: Any) -> tuple:
    return (obj.id,)


def _by_consumer_and_id(obj: Any) -> tuple:
    return (obj.consumer.id, obj.id)


def _attr(name: str):
    def identifier(obj: Any) -> Any:
        return getattr(obj, name, None)

    return identifier


def _consumer_identifier(obj: Any) -> Any:
    username = getattr(obj, "username", None)
    return username if username is not None else getattr(obj, "id", None)


CONSUMERS = EntityDiff(
    kind="consumer",
    collection="consumers",
    label="consumers",
    identifier=_consumer_identifier,
)
KEY_AUTHS = EntityDiff(
    kind="key-auth",
    collection="key_auths",
    label="key-auths",
    identifier=_attr("id"),
)
HMAC_AUTHS = EntityDiff(
    kind="hmac-auth",
    collection="hmac_auths",
    label="hmac-auths",
    identifier=_attr("username"),
)
JWT_AUTHS = EntityDiff(
    kind="jwt-auth",
    collection="jwt_auths",
    label="jwt-auths",
    identifier=_attr("key"),
)
OAUTH2_CREDS = EntityDiff(
    kind="oauth2-cred",
    collection="oauth2_creds",
    label="oauth2-creds",
    identifier=_attr("name"),
)
ACL_GROUPS = EntityDiff(
    kind="acl-group",
    collection="acl_groups",
    label="acls",
    delete_key=_by_consumer_and_id,
    change_key=_by_consumer_and_id,
    identifier=_attr("group"),
)


def consumer_diffs() -> tuple[EntityDiff, ...]:
    """Return the diffs for consumers and their credentials, in sync order."""
    return (CONSUMERS, KEY_AUTHS, HMAC_AUTHS, JWT_AUTHS, OAUTH2_CREDS, ACL_GROUPS)