"""Drive a diff between two states through a pool of worker threads."""

from __future__ import annotations

import queue
import threading
from collections import deque
from typing import Any, Callable, Iterable, Iterator, Sequence

from kongdeck.consumers import (
    ACL_GROUPS,
    CONSUMERS,
    HMAC_AUTHS,
    JWT_AUTHS,
    KEY_AUTHS,
    OAUTH2_CREDS,
)
from kongdeck.entities import (
    CA_CERTIFICATES,
    CERTIFICATES,
    PLUGINS,
    ROUTES,
    SERVICES,
    TARGETS,
    UPSTREAMS,
    EntityDiff,
)
from kongdeck.events import Event
from kongdeck.postprocess import build_registry

Do = Callable[[Event], Any]

_QUEUE_CAPACITY = 10
_POLL_INTERVAL = 0.01

# Each inner tuple is a phase; all events of a phase complete before the next.
_CREATE_UPDATE_PHASES: tuple[tuple[EntityDiff, ...], ...] = (
    (CERTIFICATES,),
    (SERVICES,),
    (ROUTES,),
    (CONSUMERS,),
    (KEY_AUTHS, HMAC_AUTHS, JWT_AUTHS, OAUTH2_CREDS, ACL_GROUPS),
    (UPSTREAMS,),
    (TARGETS,),
    (PLUGINS, CA_CERTIFICATES),
)

_DELETE_PHASES: tuple[tuple[EntityDiff, ...], ...] = (
    (PLUGINS,),
    (ROUTES,),
    (SERVICES,),
    (KEY_AUTHS, HMAC_AUTHS, JWT_AUTHS, OAUTH2_CREDS, ACL_GROUPS),
    (CONSUMERS,),
    (TARGETS,),
    (UPSTREAMS, CA_CERTIFICATES),
    (CERTIFICATES,),
)


class SyncError(Exception):
    """Raised when an event cannot be processed or post-processed."""


class _EnqueueFailed(Exception):
    """An event could not be queued because the run was stopped."""


class _EventChannel:
    """A bounded, closable queue of events."""

    def __init__(self, capacity: int) -> None:
        self._items: deque[Event] = deque()
        self._capacity = capacity
        self._closed = False
        self._cond = threading.Condition()

    def put(self, event: Event, stop: threading.Event) -> None:
        with self._cond:
            while len(self._items) >= self._capacity and not stop.is_set():
                self._cond.wait(_POLL_INTERVAL)
            if stop.is_set():
                raise _EnqueueFailed("failed to queue event")
            self._items.append(event)
            self._cond.notify_all()

    def close(self) -> None:
        with self._cond:
            self._closed = True
            self._cond.notify_all()

    def __iter__(self) -> Iterator[Event]:
        while True:
            with self._cond:
                while not self._items and not self._closed:
                    self._cond.wait()
                if not self._items:
                    return
                event = self._items.popleft()
                self._cond.notify_all()
            yield event


class Syncer:
    """Diffs a current and a target state and hands each change to a worker.

    Every completed event is applied back onto the current state, so that
    later phases see the effect of earlier ones.
    """

    def __init__(self, current: Any, target: Any) -> None:
        self.current_state = current
        self.target_state = target
        self.post_process = build_registry()
        self.silence_warnings = False
        self._in_flight = 0
        self._idle = threading.Condition()
        self._events = _EventChannel(_QUEUE_CAPACITY)
        self._stop = threading.Event()

    @property
    def in_flight_ops(self) -> int:
        """Number of events queued or being processed."""
        with self._idle:
            return self._in_flight

    def _run_phases(self, phases: Sequence[Iterable[EntityDiff]], deleting: bool) -> None:
        for phase in phases:
            for entity_diff in phase:
                events = (
                    entity_diff.deletions(self.current_state, self.target_state)
                    if deleting
                    else entity_diff.changes(self.current_state, self.target_state)
                )
                for event in events:
                    self._queue_event(event)
            self._wait()

    def _diff(self) -> None:
        self._run_phases(_CREATE_UPDATE_PHASES, deleting=False)
        self._run_phases(_DELETE_PHASES, deleting=True)

    def _queue_event(self, event: Event) -> None:
        with self._idle:
            self._in_flight += 1
        try:
            self._events.put(event, self._stop)
        except _EnqueueFailed:
            self._event_completed()
            raise

    def _event_completed(self) -> None:
        with self._idle:
            self._in_flight -= 1
            self._idle.notify_all()

    def _wait(self) -> None:
        with self._idle:
            while self._in_flight and not self._stop.is_set():
                self._idle.wait(_POLL_INTERVAL)

    def _event_loop(self, do: Do) -> None:
        for event in self._events:
            try:
                self._handle_event(do, event)
            finally:
                self._event_completed()

    def _handle_event(self, do: Do, event: Event) -> None:
        try:
            result = do(event)
        except Exception as exc:
            raise SyncError(f"while processing event: {exc}") from exc
        if result is None:
            raise SyncError("result of event is nil")
        try:
            self.post_process.do(event.kind, event.op, self.current_state, result)
        except Exception as exc:
            raise SyncError(f"while post processing event: {exc}") from exc

    def run(
        self,
        done: threading.Event | None,
        parallelism: int,
        do: Do,
    ) -> list[Exception]:
        """Run the diff, calling do for every event with parallelism workers.

        The run stops early when done is set or the first error occurs.
        Returns the errors collected, an empty list on success.
        """
        if parallelism < 1:
            return [SyncError("parallelism can not be negative")]

        self._events = _EventChannel(_QUEUE_CAPACITY)
        self._stop = threading.Event()
        errors: queue.Queue[Exception] = queue.Queue()

        def consume() -> None:
            try:
                self._event_loop(do)
            except Exception as exc:
                errors.put(exc)

        def produce() -> None:
            try:
                self._diff()
            except Exception as exc:
                errors.put(exc)
            finally:
                self._events.close()

        threads = [
            threading.Thread(target=consume, daemon=True) for _ in range(parallelism)
        ]
        threads.append(threading.Thread(target=produce, daemon=True))
        for thread in threads:
            thread.start()

        first = self._first_error(done, errors, threads)
        self._stop.set()
        for thread in threads:
            thread.join()

        collected = [first] if first is not None else []
        while True:
            try:
                collected.append(errors.get_nowait())
            except queue.Empty:
                break
        return [err for err in collected if not isinstance(err, _EnqueueFailed)]

    @staticmethod
    def _first_error(
        done: threading.Event | None,
        errors: queue.Queue[Exception],
        threads: list[threading.Thread],
    ) -> Exception | None:
        while True:
            try:
                return errors.get(timeout=_POLL_INTERVAL)
            except queue.Empty:
                pass
            if done is not None and done.is_set():
                return None
            if not any(thread.is_alive() for thread in threads):
                try:
                    return errors.get_nowait()
                except queue.Empty:
                    return None