from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar

request_id_ctx: ContextVar[str | None] = ContextVar("request_id", default=None)
scan_id_ctx: ContextVar[str | None] = ContextVar("scan_id", default=None)


@contextmanager
def bind_scan_id(scan_id: str) -> Iterator[None]:
    """Tag log lines emitted inside the block with ``scan_id``."""
    token = scan_id_ctx.set(scan_id)
    try:
        yield
    finally:
        scan_id_ctx.reset(token)
