"""SQLite request logging for API."""

import logging
import sqlite3
import time
import uuid
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path

from fastapi import HTTPException, status

from api.models.responses import ErrorCodes
from core import config
from core.exceptions import PermissionDeniedError, StoreError, StoreWriteError

logger = logging.getLogger(__name__)


@dataclass
class RequestLog:
    """Captured request/response data for logging."""

    request_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    timestamp: str = field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )
    endpoint: str = ""
    method: str = ""
    client_ip: str | None = None
    employee_id: str | None = None
    view: str | None = None
    status_code: int = 0
    error_code: str | None = None
    error_message: str | None = None
    processing_time_ms: int = 0
    events_returned: int | None = None
    created_id: str | None = None
    details: list[tuple[str, str]] = field(default_factory=list)  # (type, message)


def log_request(log: RequestLog, db_path: Path | str | None = None) -> None:
    """Write request log to SQLite database."""
    conn = sqlite3.connect(db_path or config.DB_PATH)
    try:
        cursor = conn.cursor()

        # Insert main request record
        cursor.execute(
            """
            INSERT INTO api_requests (
                request_id, timestamp, endpoint, method, client_ip,
                employee_id, view, status_code, error_code, error_message,
                processing_time_ms, events_returned, created_id
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        """,
            (
                log.request_id,
                log.timestamp,
                log.endpoint,
                log.method,
                log.client_ip,
                log.employee_id,
                log.view,
                log.status_code,
                log.error_code,
                log.error_message,
                log.processing_time_ms,
                log.events_returned,
                log.created_id,
            ),
        )

        # Insert detail records
        for detail_type, message in log.details:
            cursor.execute(
                """
                INSERT INTO api_request_details (request_id, detail_type, message)
                VALUES (?, ?, ?)
            """,
                (log.request_id, detail_type, message),
            )

        conn.commit()
    finally:
        conn.close()


@contextmanager
def logged_request(request_log: RequestLog):
    """
    Time a request, map errors to HTTP responses and always log it.

    Usage:
        with logged_request(RequestLog(endpoint="/v1/calendar", method="GET")) as request_log:
            ...
            request_log.status_code = 200
    """
    start_time = time.time()
    try:
        yield request_log

    except HTTPException as e:
        # Log HTTP errors
        request_log.status_code = e.status_code
        if isinstance(e.detail, dict):
            request_log.error_code = e.detail.get("code")
            request_log.error_message = e.detail.get("error")
            for detail in e.detail.get("details", []):
                request_log.details.append(("validation_error", detail))
        else:
            request_log.error_message = str(e.detail)
        raise

    except PermissionDeniedError as e:
        request_log.status_code = 403
        request_log.error_code = ErrorCodes.FORBIDDEN
        request_log.error_message = str(e)
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail={"error": str(e), "code": ErrorCodes.FORBIDDEN, "details": []},
        ) from e

    except StoreWriteError as e:
        request_log.status_code = 500
        request_log.error_code = ErrorCodes.WRITE_FAILED
        request_log.error_message = str(e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": "Failed to save", "code": ErrorCodes.WRITE_FAILED, "details": [str(e)]},
        ) from e

    except StoreError as e:
        request_log.status_code = 503
        request_log.error_code = ErrorCodes.STORE_UNAVAILABLE
        request_log.error_message = str(e)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail={"error": "Calendar data unavailable", "code": ErrorCodes.STORE_UNAVAILABLE, "details": []},
        ) from e

    except Exception as e:
        # Unexpected errors
        logger.exception("Unhandled error in %s %s", request_log.method, request_log.endpoint)
        request_log.status_code = 500
        request_log.error_code = ErrorCodes.INTERNAL_ERROR
        request_log.error_message = str(e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": "Internal server error", "code": ErrorCodes.INTERNAL_ERROR, "details": []},
        ) from e

    finally:
        request_log.processing_time_ms = int((time.time() - start_time) * 1000)
        # A logging failure must not fail the request
        try:
            log_request(request_log)
        except sqlite3.Error as e:
            logger.warning("Could not log request %s: %s", request_log.request_id, e)
