import time
from collections import deque, defaultdict
from typing import Optional

from fastapi import Request

from wl_app.core.config import Settings
from wl_app.core.errors import ApiError

MAX_IP_LEN = 45
MAX_BUCKETS = 1024


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def client_ip(request: Request) -> Optional[str]:
    # behind a proxy the first X-Forwarded-For hop is the client
    xff = request.headers.get("x-forwarded-for")
    if xff:
        first = xff.split(",")[0].strip()
        if first:
            return first[:MAX_IP_LEN]
    return request.client.host[:MAX_IP_LEN] if request.client else None


async def read_json_object(request: Request) -> dict:
    try:
        body = await request.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}


def new_buckets() -> "defaultdict[tuple[str, str], deque[float]]":
    return defaultdict(deque)


def _sweep(buckets, now: float, window: float) -> None:
    for key in [k for k, q in buckets.items() if not q or now - q[-1] > window]:
        del buckets[key]


def rate_limit():
    """Sliding-window limit per (path, peer address), sized from settings.

    Keyed on the transport peer, not X-Forwarded-For, which callers control.
    """
    async def _guard(request: Request):
        s = get_settings(request)
        buckets = request.app.state.rate_buckets
        key = (request.url.path, request.client.host if request.client else "unknown")
        now = time.monotonic()
        if len(buckets) > MAX_BUCKETS:
            _sweep(buckets, now, s.rate_limit_window_sec)
        q = buckets[key]
        while q and now - q[0] > s.rate_limit_window_sec:
            q.popleft()
        if len(q) >= s.rate_limit_max:
            raise ApiError(429, "rate_limited")
        q.append(now)
    return _guard
