"""Server health utilities.

Provides a simple `get_health` function returning server status, start
time, uptime in seconds and whether the storage backend answers.
"""
from datetime import datetime, timezone
from typing import Optional
import time

from kvstore_lib import __version__
from kvstore_lib.storage import DocumentStorage

# record process start time at import
_START_TIME = time.time()


def get_health(storage: Optional[DocumentStorage] = None) -> dict:
    """Return a dict representing server health.

    Fields:
    - status: 'ok', or 'degraded' when the backend does not answer a ping
    - start_time: ISO 8601 UTC timestamp when the process started
    - uptime_seconds: integer seconds since start
    - version: package version
    - backend: 'ok', 'unreachable' or 'unconfigured'
    """
    now = time.time()
    uptime = int(now - _START_TIME)
    start_dt = datetime.fromtimestamp(_START_TIME, tz=timezone.utc)

    if storage is None:
        backend = 'unconfigured'
    else:
        backend = 'ok' if storage.ping() else 'unreachable'

    return {
        "status": "ok" if backend == 'ok' else "degraded",
        "start_time": start_dt.isoformat(),
        "uptime_seconds": uptime,
        "version": __version__,
        "backend": backend,
    }
