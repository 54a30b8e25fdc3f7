from __future__ import annotations

from functools import wraps

from flask import g, request

from .errors import fail

ACTOR_HEADER = "X-Actor-Id"


def actor_required(view):
    """Require the caller identity set by the upstream auth layer.

    The id is exposed to the view as ``g.actor_id``.
    """

    @wraps(view)
    def wrapper(*args, **kwargs):
        raw = (request.headers.get(ACTOR_HEADER) or "").strip()
        if not raw.isdigit() or int(raw) < 1:
            return fail("unauthorized", f"Missing or invalid {ACTOR_HEADER} header", 401)
        g.actor_id = int(raw)
        return view(*args, **kwargs)

    return wrapper
