from datetime import datetime, timezone
from typing import Any, Optional, Mapping

from fastapi.responses import JSONResponse

def success(data: Any = None, message: str = "ok", status_code: int = 200):
    return JSONResponse(status_code=status_code, content={"ok": True, "message": message, "data": data})

def error(
    message: str = "error",
    status_code: int = 400,
    details: Any = None,
    headers: Optional[Mapping[str, str]] = None,
):
    body = {"ok": False, "error": message}
    if details is not None:
        body["details"] = details
    return JSONResponse(status_code=status_code, content=body, headers=headers)

def iso_timestamp(now: Optional[datetime] = None) -> str:
    """UTC ISO8601 with millisecond precision and a trailing Z, e.g. 2024-05-01T12:00:00.123Z"""
    now = now or datetime.now(timezone.utc)
    return now.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")
