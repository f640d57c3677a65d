"""Read every entity from a Kong Admin API client into a raw state.

The client is any object exposing one endpoint per entity kind as an
attribute: ``services``, ``routes``, ``plugins``, ``certificates``,
``ca_certificates``, ``snis``, ``upstreams``, ``targets``, ``consumers``,
``key_auths``, ``hmac_auths``, ``jwt_auths``, ``basic_auths``,
``oauth2_credentials`` and ``acls``. Each endpoint has a ``list(opt)``
method (``list(upstream_id, opt)`` for targets) that returns a page of
entities and the options for the next page, or ``None`` after the last page.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Optional

PAGE_SIZE = 1000


class APINotFoundError(Exception):
    """Raised by a client when the Admin API answers 404 Not Found."""


@dataclass
class Config:
    """Selects which entities are exported."""

    skip_consumers: bool = False
    selector_tags: list[str] = field(default_factory=list)


@dataclass
class ListOpt:
    """Options for listing one page of entities."""

    size: int = PAGE_SIZE
    offset: str = ""
    tags: list[str] = field(default_factory=list)
    match_all_tags: bool = True


@dataclass
class KongRawState:
    """All entities read from Kong, grouped by kind."""

    services: list[Any] = field(default_factory=list)
    routes: list[Any] = field(default_factory=list)
    plugins: list[Any] = field(default_factory=list)
    certificates: list[Any] = field(default_factory=list)
    ca_certificates: list[Any] = field(default_factory=list)
    snis: list[Any] = field(default_factory=list)
    upstreams: list[Any] = field(default_factory=list)
    targets: list[Any] = field(default_factory=list)
    consumers: list[Any] = field(default_factory=list)
    key_auths: list[Any] = field(default_factory=list)
    hmac_auths: list[Any] = field(default_factory=list)
    jwt_auths: list[Any] = field(default_factory=list)
    basic_auths: list[Any] = field(default_factory=list)
    oauth2_creds: list[Any] = field(default_factory=list)
    acl_groups: list[Any] = field(default_factory=list)


Fetch = Callable[[ListOpt], "tuple[list[Any], Optional[ListOpt]]"]


def _new_opt(tags: Optional[list[str]]) -> ListOpt:
    return ListOpt(size=PAGE_SIZE, tags=list(tags or []), match_all_tags=True)


def _paginate(fetch: Fetch, opt: ListOpt) -> list[Any]:
    items: list[Any] = []
    while True:
        page, next_opt = fetch(opt)
        items.extend(page)
        if next_opt is None:
            return items
        opt = next_opt


def get(client: Any, config: Config) -> KongRawState:
    """Query every entity through client and return them as a raw state."""
    tags = config.selector_tags
    state = KongRawState()

    tagged = (
        ("services", get_all_services),
        ("routes", get_all_routes),
        ("plugins", get_all_plugins),
        ("certificates", get_all_certificates),
        ("ca-certificates", get_all_ca_certificates),
        ("snis", get_all_snis),
        ("upstreams", get_all_upstreams),
    )
    attrs = (
        "services",
        "routes",
        "plugins",
        "certificates",
        "ca_certificates",
        "snis",
        "upstreams",
    )
    for (label, fetch), attr in zip(tagged, attrs):
        try:
            setattr(state, attr, fetch(client, tags))
        except Exception as exc:
            raise RuntimeError(f"{label}: {exc}") from exc

    try:
        state.targets = get_all_targets(client, state.upstreams, tags)
    except Exception as exc:
        raise RuntimeError(f"targets: {exc}") from exc

    if not config.skip_consumers:
        state.consumers = get_all_consumers(client, tags)
        state.key_auths = get_all_key_auths(client, tags)
        state.hmac_auths = get_all_hmac_auths(client, tags)
        state.jwt_auths = get_all_jwt_auths(client, tags)
        state.basic_auths = get_all_basic_auths(client, tags)
        state.oauth2_creds = get_all_oauth2_creds(client, tags)
        state.acl_groups = get_all_acl_groups(client, tags)

    return state


def get_all_services(client: Any, tags: Optional[list[str]]) -> list[Any]:
    """Return all services."""
    return _paginate(client.services.list, _new_opt(tags))


def get_all_routes(client: Any, tags: Optional[list[str]]) -> list[Any]:
    """Return all routes."""
    return _paginate(client.routes.list, _new_opt(tags))


def get_all_plugins(client: Any, tags: Optional[list[str]]) -> list[Any]:
    """Return all plugins."""
    return _paginate(client.plugins.list, _new_opt(tags))


def get_all_certificates(client: Any, tags: Optional[list[str]]) -> list[Any]:
    """Return all certificates."""
    return _paginate(client.certificates.list, _new_opt(tags))


def get_all_ca_certificates(client: Any, tags: Optional[list[str]]) -> list[Any]:
    """Return all CA certificates.

    Kong before 1.3 has no such entity and answers 404; whatever was read
    up to that point is returned, an empty list in practice.
    """
    items: list[Any] = []
    opt: Optional[ListOpt] = _new_opt(tags)
    while opt is not None:
        try:
            page, opt = client.ca_certificates.list(opt)
        except APINotFoundError:
            return items
        items.extend(page)
    return items


def get_all_snis(client: Any, tags: Optional[list[str]]) -> list[Any]:
    """Return all SNIs."""
    return _paginate(client.snis.list, _new_opt(tags))


def get_all_consumers(client: Any, tags: Optional[list[str]]) -> list[Any]:
    """Return all consumers; use with care when there are many."""
    return _paginate(client.consumers.list, _new_opt(tags))


def get_all_upstreams(client: Any, tags: Optional[list[str]]) -> list[Any]:
    """Return all upstreams."""
    return _paginate(client.upstreams.list, _new_opt(tags))


def get_all_targets(
    client: Any, upstreams: list[Any], tags: Optional[list[str]]
) -> list[Any]:
    """Return the targets of every upstream, queried one upstream at a time."""
    targets: list[Any] = []
    for upstream in upstreams:
        targets.extend(
            _paginate(
                lambda opt, uid=upstream.id: client.targets.list(uid, opt),
                _new_opt(tags),
            )
        )
    return targets


# Credentials do not support tags, so their listings ignore the selector tags.


def get_all_key_auths(client: Any, tags: Optional[list[str]]) -> list[Any]:
    """Return all key-auth credentials."""
    return _paginate(client.key_auths.list, _new_opt(None))


def get_all_hmac_auths(client: Any, tags: Optional[list[str]]) -> list[Any]:
    """Return all hmac-auth credentials."""
    return _paginate(client.hmac_auths.list, _new_opt(None))


def get_all_jwt_auths(client: Any, tags: Optional[list[str]]) -> list[Any]:
    """Return all jwt credentials."""
    return _paginate(client.jwt_auths.list, _new_opt(None))


def get_all_basic_auths(client: Any, tags: Optional[list[str]]) -> list[Any]:
    """Return all basic-auth credentials."""
    return _paginate(client.basic_auths.list, _new_opt(None))


def get_all_oauth2_creds(client: Any, tags: Optional[list[str]]) -> list[Any]:
    """Return all oauth2 credentials."""
    return _paginate(client.oauth2_credentials.list, _new_opt(None))


def get_all_acl_groups(client: Any, tags: Optional[list[str]]) -> list[Any]:
    """Return all ACL groups."""
    return _paginate(client.acls.list, _new_opt(None))