"""ApiResponse envelope shared by every reward endpoint.

    {"code": 0, "message": "success", "data": {...},
     "timestamp": "2026-10-19T15:30:00+00:00", "request_id": "req_3f9a0c1d2e4b"}

code is 0 on success, otherwise the AppError code. data is null on errors
except 1002 (duplicate idempotency key), where it holds the reward that was
created first. request_id is the one RequestLogMiddleware assigned, so a
client can quote it when reporting a failed grant.
"""

import uuid
from typing import Any

from pydantic import BaseModel, Field

from src.sk_common.datetime_utils import utc_now


def new_request_id() -> str:
    return f"req_{uuid.uuid4().hex[:12]}"


class ApiResponse(BaseModel):
    code: int = 0
    message: str = "success"
    data: Any = None
    timestamp: str = Field(default_factory=lambda: utc_now().isoformat())
    request_id: str = Field(default_factory=new_request_id)


def _envelope(code: int, message: str, data: Any, request_id: str | None) -> ApiResponse:
    resp = ApiResponse(code=code, message=message, data=data)
    if request_id:
        resp.request_id = request_id
    return resp


def success_response(data: Any = None, request_id: str | None = None) -> ApiResponse:
    return _envelope(0, "success", data, request_id)


def error_response(
    code: int, message: str, data: Any = None, request_id: str | None = None
) -> ApiResponse:
    return _envelope(code, message, data, request_id)
