from __future__ import annotations

import json
import logging
import queue
from typing import Callable, Iterator, Optional

from ..core.exceptions import StoreUnavailableError
from .projector import SCOPE_ROSTER, SCOPE_SESSIONS, ChangeCallback, LiveViewProjector

logger = logging.getLogger(__name__)

ProjectorFactory = Callable[[ChangeCallback], LiveViewProjector]


def snapshot(scope: str, projector: LiveViewProjector, *, include_codes: bool = True) -> dict:
    if scope == SCOPE_SESSIONS:
        sessions = [s.to_dict() for s in projector.sessions]
        if not include_codes:
            for item in sessions:
                item.pop("unique_code", None)
        return {"scope": scope, "sessions": sessions}
    if scope == SCOPE_ROSTER:
        return {
            "scope": scope,
            "session_id": projector.selected_session_id,
            "roster": [r.to_dict(include_signature=False) for r in projector.roster],
        }
    raise ValueError(f"Unknown scope: {scope!r}")


def format_sse(event: str, data: dict) -> str:
    return f"event: {event}\ndata: {json.dumps(data, separators=(',', ':'))}\n\n"


def _drain(pending: "queue.Queue[str]") -> None:
    while True:
        try:
            pending.get_nowait()
        except queue.Empty:
            return


def live_view_events(
    make_projector: ProjectorFactory,
    *,
    session_id: Optional[int] = None,
    keepalive_seconds: float = 15.0,
    include_codes: bool = True,
) -> Iterator[str]:
    """Server-Sent Events for one connected client.

    Writers only enqueue the name of a dirty scope; every re-fetch happens
    here, on the thread serving this client. The projector lives exactly as
    long as the generator: when the client disconnects, the WSGI server
    closes the generator and ``finally`` releases every subscription.
    """

    pending: "queue.Queue[str]" = queue.Queue()
    projector = make_projector(pending.put)
    try:
        projector.start()
        yield format_sse(SCOPE_SESSIONS, snapshot(SCOPE_SESSIONS, projector, include_codes=include_codes))
        if session_id is not None:
            projector.select_session(session_id)
            yield format_sse(SCOPE_ROSTER, snapshot(SCOPE_ROSTER, projector, include_codes=include_codes))

        while True:
            try:
                pending.get(timeout=keepalive_seconds)
            except queue.Empty:
                if not projector.dirty:
                    yield ": keep-alive\n\n"
                    continue
                # retry a scope whose last re-fetch failed
            # a burst of writes collapses into one re-fetch per scope
            _drain(pending)

            try:
                refreshed = projector.refresh_pending()
            except StoreUnavailableError:
                logger.warning("Live view of %s is stale; store unreachable", projector.department)
                yield format_sse("stale", {"scope": "stale", "stale": True})
                continue
            for scope in refreshed:
                yield format_sse(scope, snapshot(scope, projector, include_codes=include_codes))
    finally:
        projector.close()
