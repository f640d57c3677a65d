from __future__ import annotations

from dataclasses import dataclass
from types import SimpleNamespace
from typing import Any

import pytest

from kongdeck.crud import CREATE, DELETE, UPDATE
from kongdeck.entities import (
    CERTIFICATES,
    PLUGINS,
    SERVICES,
    TARGETS,
    UPSTREAMS,
    EntityDiff,
    foreign_names,
)
from kongdeck.events import NotFoundError


@dataclass
class Ref:
    id: str


@dataclass
class Thing:
    id: str
    name: str | None = None
    host: str | None = None
    created_at: int | None = None
    upstream: Ref | None = None
    service: Ref | None = None
    route: Ref | None = None
    consumer: Ref | None = None
    target: str | None = None


class FakeCollection:
    def __init__(self, key, items=()):
        self._key = key
        self._items = {key(item): item for item in items}

    def get_all(self):
        return list(self._items.values())

    def get(self, *key):
        try:
            return self._items[key]
        except KeyError:
            raise NotFoundError() from None

    get_by_prop = get


class BrokenCollection:
    def __init__(self, items=()):
        self._items = list(items)

    def get_all(self):
        return self._items

    def get(self, *key):
        raise ValueError("backend down")


class UnreadableCollection:
    def get_all(self):
        raise ValueError("cannot read")


def by_id(obj: Any) -> tuple:
    return (obj.id,)


def state(**collections):
    return SimpleNamespace(**collections)


def test_deletion_for_entity_missing_in_target():
    svc = Thing(id="a", name="alpha")
    current = state(services=FakeCollection(by_id, [svc]))
    target = state(services=FakeCollection(by_id))
    events = list(SERVICES.deletions(current, target))
    assert len(events) == 1
    assert events[0].op == DELETE
    assert events[0].kind == "service"
    assert events[0].obj is svc


def test_no_deletion_when_present_in_target():
    current = state(services=FakeCollection(by_id, [Thing(id="a")]))
    target = state(services=FakeCollection(by_id, [Thing(id="a")]))
    assert list(SERVICES.deletions(current, target)) == []


def test_create_event_holds_a_copy():
    svc = Thing(id="a", name="alpha")
    current = state(services=FakeCollection(by_id))
    target = state(services=FakeCollection(by_id, [svc]))
    events = list(SERVICES.changes(current, target))
    assert len(events) == 1
    assert events[0].op == CREATE
    assert events[0].obj == svc
    assert events[0].obj is not svc
    assert events[0].old_obj is None


def test_update_when_fields_differ():
    old = Thing(id="a", host="one")
    new = Thing(id="a", host="two")
    current = state(certificates=FakeCollection(by_id, [old]))
    target = state(certificates=FakeCollection(by_id, [new]))
    events = list(CERTIFICATES.changes(current, target))
    assert len(events) == 1
    assert events[0].op == UPDATE
    assert events[0].kind == "certificate"
    assert events[0].obj == new
    assert events[0].old_obj is old


def test_timestamps_are_ignored():
    current = state(services=FakeCollection(by_id, [Thing(id="a", created_at=1)]))
    target = state(services=FakeCollection(by_id, [Thing(id="a", created_at=2)]))
    assert list(SERVICES.changes(current, target)) == []


def test_upstream_changes_are_looked_up_by_name():
    old = Thing(id="old-id", name="backend", host="one")
    new = Thing(id="new-id", name="backend", host="two")
    current = state(upstreams=FakeCollection(lambda u: (u.name,), [old]))
    target = state(upstreams=FakeCollection(lambda u: (u.name,), [new]))
    events = list(UPSTREAMS.changes(current, target))
    assert [e.op for e in events] == [UPDATE]
    assert events[0].old_obj is old


def test_targets_keyed_by_upstream_and_id():
    key = lambda t: (t.upstream.id, t.id)
    in_current = Thing(id="t1", upstream=Ref("u1"), target="10.0.0.1:80")
    in_target = Thing(id="t1", upstream=Ref("u2"), target="10.0.0.1:80")
    current = state(targets=FakeCollection(key, [in_current]))
    target = state(targets=FakeCollection(key, [in_target]))
    deletions = list(TARGETS.deletions(current, target))
    changes = list(TARGETS.changes(current, target))
    assert [e.obj for e in deletions] == [in_current]
    assert [e.op for e in changes] == [CREATE]


def test_plugins_matched_by_name_and_foreign_ids():
    key = lambda p: (p.name, *foreign_names(p))
    cur = Thing(id="p1", name="cors", service=Ref("s1"))
    tgt = Thing(id="p2", name="cors", service=Ref("s1"))
    other = Thing(id="p3", name="cors", route=Ref("r1"))
    current = state(plugins=FakeCollection(key, [cur]))
    target = state(plugins=FakeCollection(key, [tgt, other]))
    assert list(PLUGINS.deletions(current, target)) == []
    changes = list(PLUGINS.changes(current, target))
    ops = sorted(str(e.op) for e in changes)
    assert ops == sorted([str(CREATE), str(UPDATE)])


def test_lookup_error_is_wrapped():
    current = state(services=BrokenCollection([Thing(id="a", name="alpha")]))
    target = state(services=BrokenCollection([Thing(id="a", name="alpha")]))
    with pytest.raises(RuntimeError, match="alpha"):
        list(SERVICES.deletions(current, target))
    with pytest.raises(RuntimeError, match="backend down"):
        list(SERVICES.changes(current, target))


def test_fetch_error_is_wrapped():
    broken = state(services=UnreadableCollection())
    with pytest.raises(RuntimeError, match="error fetching services from state"):
        list(SERVICES.deletions(broken, broken))


def test_custom_equality_is_used():
    never_equal = EntityDiff(
        kind="service", collection="services", label="services",
        equal=lambda a, b: False,
    )
    current = state(services=FakeCollection(by_id, [Thing(id="a")]))
    target = state(services=FakeCollection(by_id, [Thing(id="a")]))
    assert [e.op for e in never_equal.changes(current, target)] == [UPDATE]


def test_foreign_names():
    plugin = Thing(id="p", service=Ref("s"), consumer=Ref("c"))
    assert foreign_names(plugin) == ("s", "", "c")
    assert foreign_names(None) == ("", "", "")
    assert foreign_names(Thing(id="p", route=Ref(None))) == ("", "", "")