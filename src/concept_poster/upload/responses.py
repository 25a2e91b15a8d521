"""Parsers for Graph API upload responses.

Each parser turns an HttpResponse into Success[...] or Failure so the
engine never reaches into raw dicts.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from ..core import Failure, Result, Success
from ..http import HttpResponse
from .classifier import error_message, is_transient_payload


@dataclass(frozen=True)
class StartResponse:
    upload_session_id: str
    upload_url: str


@dataclass(frozen=True)
class FinishResponse:
    creation_id: str
    status_code: Optional[str] = None


@dataclass(frozen=True)
class StatusResponse:
    status_code: Optional[str]
    error_message: Optional[str] = None


def _error_failure(response: HttpResponse, payload: Any) -> Failure:
    details: dict[str, Any] = {
        "status_code": response.status_code,
        "retryable": response.status_code >= 500 or is_transient_payload(payload),
    }
    if isinstance(payload, dict) and isinstance(payload.get("error"), dict):
        details["error_code"] = payload["error"].get("code")
    return Failure(error_message(payload, response.text), details)


def parse_start_response(response: HttpResponse) -> Result[StartResponse]:
    payload = response.json()
    if not response.ok:
        return _error_failure(response, payload)
    if not isinstance(payload, dict):
        return Failure("Start response is not a JSON object", {"status_code": response.status_code})

    session_id = payload.get("upload_session_id")
    upload_url = payload.get("upload_url")
    if not session_id or not upload_url:
        return Failure(
            "Start response missing upload_session_id or upload_url",
            {"status_code": response.status_code, "body": response.text[:500]},
        )
    return Success(StartResponse(upload_session_id=str(session_id), upload_url=str(upload_url)))


def parse_finish_response(response: HttpResponse) -> Result[FinishResponse]:
    payload = response.json()
    if not response.ok:
        return _error_failure(response, payload)
    if not isinstance(payload, dict):
        return Failure("Finish response is not a JSON object", {"status_code": response.status_code})

    creation_id = payload.get("id") or payload.get("creation_id")
    if not creation_id:
        return Failure(
            "Finish response missing creation id",
            {"status_code": response.status_code, "body": response.text[:500]},
        )
    status = payload.get("status_code")
    return Success(FinishResponse(creation_id=str(creation_id), status_code=str(status) if status else None))


def parse_status_response(response: HttpResponse) -> Result[StatusResponse]:
    payload = response.json()
    if not response.ok:
        return _error_failure(response, payload)
    if not isinstance(payload, dict):
        return Failure("Status response is not a JSON object", {"status_code": response.status_code})

    status = payload.get("status_code") or payload.get("status")
    return Success(StatusResponse(
        status_code=str(status) if status else None,
        error_message=payload.get("error_message"),
    ))


def parse_publish_response(response: HttpResponse) -> Result[dict[str, Any]]:
    payload = response.json()
    if not response.ok:
        return _error_failure(response, payload)
    if not isinstance(payload, dict) or not payload.get("id"):
        return Failure(
            "Publish response missing media id",
            {"status_code": response.status_code, "body": response.text[:500]},
        )
    return Success(payload)
