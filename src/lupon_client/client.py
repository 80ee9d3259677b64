"""HTTP client for the barangay case-management backend."""

from __future__ import annotations

import json as jsonlib
import logging
import mimetypes
from pathlib import Path
from typing import Any, Iterable, Union
from urllib.parse import quote
from uuid import uuid4

import httpx

from .auth import AuthenticationError, TokenStore
from .config import Settings
from .models import Stage


class BackendError(Exception):
    """Base error for backend request failures."""


class BackendAuthError(BackendError):
    """Raised when backend rejects authentication."""


class BackendNotFoundError(BackendError):
    """Raised when backend resource is not found."""


class BackendConnectionError(BackendError):
    """Raised when backend connection fails."""


class BackendRequestError(BackendError):
    """Raised for non-auth backend errors."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


logger = logging.getLogger(__name__)

# A file to upload: a path on disk, or (filename, content) / (filename, content, mime).
UploadFile = Union[Path, str, tuple]


def _decode_response(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return {"status_code": response.status_code, "text": response.text}


def _expect_mapping(payload: Any, path: str, status_code: int | None = None) -> dict:
    if not isinstance(payload, dict):
        raise BackendRequestError(f"unexpected_response_shape: {path}", status_code=status_code)
    return payload


def _extract_error_message(response: httpx.Response) -> str:
    try:
        payload = response.json()
        if isinstance(payload, dict):
            message = payload.get("error") or payload.get("message")
            if message:
                return str(message)
    except ValueError:
        pass
    return f"backend_error_{response.status_code}"


def _file_parts(field: str, files: Iterable[UploadFile]) -> list[tuple[str, tuple]]:
    parts: list[tuple[str, tuple]] = []
    for item in files:
        if isinstance(item, (str, Path)):
            path = Path(item)
            mime = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
            parts.append((field, (path.name, path.read_bytes(), mime)))
        elif len(item) == 2:
            name, content = item
            mime = mimetypes.guess_type(name)[0] or "application/octet-stream"
            parts.append((field, (name, content, mime)))
        else:
            parts.append((field, tuple(item)))
    return parts


def _form_fields(fields: dict[str, Any]) -> list[tuple[str, tuple]]:
    # (None, value) parts are plain multipart fields; the backend's upload
    # middleware only reads multipart bodies.
    return [(key, (None, str(value))) for key, value in fields.items() if value is not None]


class LuponClient:
    """HTTP client for the case-management backend API."""

    def __init__(
        self,
        settings: Settings,
        tokens: TokenStore | None = None,
        http: httpx.AsyncClient | None = None,
    ) -> None:
        self.settings = settings
        self.tokens = tokens or TokenStore.from_settings(settings)
        self.http = http or httpx.AsyncClient(
            base_url=settings.api_base_url,
            timeout=httpx.Timeout(
                connect=10.0,
                read=settings.request_timeout,
                write=10.0,
                pool=10.0,
            ),
        )
        for name, value in self.tokens.cookies.items():
            self.http.cookies.set(name, value)

    async def aclose(self) -> None:
        await self.http.aclose()

    async def __aenter__(self) -> "LuponClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def call(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: Any = None,
        files: list[tuple[str, tuple]] | None = None,
        headers: dict[str, str] | None = None,
        timeout: float | httpx.Timeout | None = None,
        raw: bool = False,
    ) -> Any:
        request_headers = {"X-Request-Id": str(uuid4())}
        if headers:
            request_headers.update(headers)

        token = self.tokens.valid_token()
        if token is None and self._has_session_cookie():
            token = await self.refresh_token()

        response = await self._send(
            method,
            path,
            bearer=token,
            params=params,
            json=json,
            files=files,
            headers=request_headers,
            timeout=timeout,
        )

        if response.status_code == 401:
            response = await self._retry_unauthorized(
                response,
                method,
                path,
                used_bearer=token is not None,
                params=params,
                json=json,
                files=files,
                headers=request_headers,
                timeout=timeout,
            )

        if response.status_code in {401, 403}:
            logger.warning("backend_auth_failed %s %s -> %s", method, path, response.status_code)
            raise BackendAuthError("backend_auth_failed")
        if response.status_code == 404:
            raise BackendNotFoundError(_extract_error_message(response))
        if response.status_code >= 400:
            message = _extract_error_message(response)
            logger.warning(
                "backend_request_failed %s %s -> %s: %s",
                method,
                path,
                response.status_code,
                message,
            )
            raise BackendRequestError(message, status_code=response.status_code)

        if raw:
            return response.content
        return _decode_response(response)

    async def _send(
        self,
        method: str,
        path: str,
        *,
        bearer: str | None,
        params: dict[str, Any] | None,
        json: Any,
        files: list[tuple[str, tuple]] | None,
        headers: dict[str, str],
        timeout: float | httpx.Timeout | None,
    ) -> httpx.Response:
        request_headers = dict(headers)
        if bearer:
            request_headers["Authorization"] = f"Bearer {bearer}"
        kwargs: dict[str, Any] = {"params": params, "headers": request_headers}
        if files is not None:
            kwargs["files"] = files
        elif json is not None:
            kwargs["json"] = json
        if timeout is not None:
            kwargs["timeout"] = timeout
        try:
            return await self.http.request(method, path, **kwargs)
        except httpx.TimeoutException as exc:
            raise BackendConnectionError(f"backend_timeout: Request to {path} timed out") from exc
        except httpx.HTTPError as exc:
            raise BackendConnectionError(f"backend_connection_failed: {exc}") from exc

    async def _retry_unauthorized(
        self,
        response: httpx.Response,
        method: str,
        path: str,
        *,
        used_bearer: bool,
        **request: Any,
    ) -> httpx.Response:
        # First retry flips the auth shape: cookie-only when a bearer was rejected.
        if used_bearer and self._has_session_cookie():
            retry = await self._send(method, path, bearer=None, **request)
            if retry.status_code != 401:
                return retry

        refreshed = await self.refresh_token() if self._has_session_cookie() else None
        if refreshed:
            retry = await self._send(method, path, bearer=refreshed, **request)
            if retry.status_code != 401:
                return retry

        self.tokens.drop_token()
        return response

    def _has_session_cookie(self) -> bool:
        return bool(self.http.cookies)

    async def refresh_token(self) -> str | None:
        """Mint a fresh JWT from the session cookies; ``None`` when the backend refuses."""
        try:
            response = await self.http.post(
                "/api/generate-jwt",
                headers={"X-Request-Id": str(uuid4())},
            )
        except httpx.HTTPError as exc:
            logger.warning("jwt_refresh_failed: %s", exc)
            return None
        if response.status_code >= 400:
            logger.info("jwt_refresh_rejected status=%s", response.status_code)
            return None
        payload = _decode_response(response)
        if not isinstance(payload, dict) or not payload.get("success"):
            return None
        token = payload.get("token")
        if not token:
            return None
        self.tokens.set_token(token)
        return token

    # Auth

    async def login(self, email: str, password: str) -> dict:
        try:
            response = await self.http.post(
                "/api/login",
                json={"email": email, "password": password},
                headers={"X-Request-Id": str(uuid4())},
            )
        except httpx.HTTPError as exc:
            raise BackendConnectionError(f"backend_connection_failed: {exc}") from exc
        if response.status_code >= 400:
            raise AuthenticationError(_extract_error_message(response))
        payload = _expect_mapping(_decode_response(response), "/api/login", response.status_code)
        if not payload.get("success") or not payload.get("token"):
            raise AuthenticationError(payload.get("message") or "login_failed")
        self.tokens.set_token(payload["token"])
        return payload

    async def logout(self) -> None:
        try:
            await self.call("POST", "/api/logout")
        finally:
            self.tokens.clear()
            self.http.cookies.clear()

    async def register(self, **fields: Any) -> dict:
        return await self.call("POST", "/api/register", json=fields)

    async def current_user(self) -> dict:
        return await self.call("GET", "/api/current-user")

    # Mediation

    async def schedule_mediation(self, *, complaint_id: int, date: str, time: str) -> dict:
        return await self.call(
            "POST",
            "/api/mediation/schedule",
            json={"complaint_id": complaint_id, "date": date, "time": time},
        )

    async def list_mediations(self) -> list[dict]:
        return await self.call("GET", "/api/mediation")

    async def mediation_available_slots(self, date: str, **exclude: Any) -> dict:
        return await self.available_slots(Stage.MEDIATION, date, **exclude)

    async def save_mediation_session(
        self,
        *,
        mediation_id: int,
        minutes: str,
        photos: Iterable[UploadFile] = (),
    ) -> dict:
        parts = _form_fields({"mediation_id": mediation_id, "minutes": minutes})
        return await self.call(
            "POST",
            "/api/mediation/session",
            files=parts + _file_parts("photos", photos),
        )

    async def soft_delete_mediation_session(self, session_id: int) -> dict:
        return await self.call(
            "PUT", f"/api/mediation/session/{quote(str(session_id))}/soft-delete"
        )

    async def reschedule_mediation(
        self, *, mediation_id: int, reschedule_date: str, reschedule_time: str, reason: str
    ) -> dict:
        return await self.call(
            "POST",
            "/api/mediation/reschedule",
            json={
                "mediation_id": mediation_id,
                "reschedule_date": reschedule_date,
                "reschedule_time": reschedule_time,
                "reason": reason,
            },
        )

    # Conciliation

    async def schedule_conciliation(
        self, *, complaint_id: int, date: str, time: str, panel: list[str] | None = None
    ) -> dict:
        return await self.call(
            "POST",
            "/api/conciliation/schedule",
            json={"complaint_id": complaint_id, "date": date, "time": time, "panel": panel or []},
        )

    async def list_conciliations(self) -> list[dict]:
        return await self.call("GET", "/api/conciliation")

    async def conciliation_available_slots(self, date: str, **exclude: Any) -> dict:
        return await self.available_slots(Stage.CONCILIATION, date, **exclude)

    async def save_conciliation_session(
        self,
        *,
        conciliation_id: int,
        minutes: str,
        photos: Iterable[UploadFile] = (),
    ) -> dict:
        parts = _form_fields({"conciliation_id": conciliation_id, "minutes": minutes})
        return await self.call(
            "POST",
            "/api/conciliation/session",
            files=parts + _file_parts("photos", photos),
        )

    async def delete_conciliation_session(self, session_id: int) -> dict:
        return await self.call("DELETE", f"/api/conciliation/session/{quote(str(session_id))}")

    async def reschedule_conciliation(
        self, *, conciliation_id: int, reschedule_date: str, reschedule_time: str, reason: str
    ) -> dict:
        return await self.call(
            "POST",
            "/api/conciliation/reschedule",
            json={
                "conciliation_id": conciliation_id,
                "reschedule_date": reschedule_date,
                "reschedule_time": reschedule_time,
                "reason": reason,
            },
        )

    async def user_conciliation_schedules(self) -> dict:
        return await self.call("GET", "/api/conciliation/user-schedules")

    # Arbitration

    async def schedule_arbitration(
        self, *, complaint_id: int, date: str, time: str, panel_members: list[str] | None = None
    ) -> dict:
        return await self.call(
            "POST",
            "/api/arbitration/schedule",
            json={
                "complaint_id": complaint_id,
                "date": date,
                "time": time,
                "panel_members": panel_members or [],
            },
        )

    async def list_arbitrations(self) -> list[dict]:
        return await self.call("GET", "/api/arbitration")

    async def save_arbitration_session(
        self,
        *,
        arbitration_id: int,
        minutes: str,
        documentation: Iterable[UploadFile] = (),
    ) -> dict:
        parts = _form_fields({"arbitration_id": arbitration_id, "minutes": minutes})
        return await self.call(
            "POST",
            "/api/arbitration/save-session",
            files=parts + _file_parts("documentation", documentation),
        )

    async def delete_arbitration_session(self, session_id: int) -> dict:
        return await self.call("DELETE", f"/api/arbitration/session/{quote(str(session_id))}")

    async def reschedule_arbitration(
        self, *, arbitration_id: int, reschedule_date: str, reschedule_time: str, reason: str
    ) -> dict:
        return await self.call(
            "POST",
            "/api/arbitration/reschedule",
            json={
                "arbitration_id": arbitration_id,
                "reschedule_date": reschedule_date,
                "reschedule_time": reschedule_time,
                "reason": reason,
            },
        )

    async def arbitration_by_case(self, complaint_id: int) -> dict:
        return await self.call("GET", f"/api/arbitration/case/{quote(str(complaint_id))}")

    # Slots

    async def available_slots(
        self,
        stage: Stage,
        date: str,
        *,
        exclude_session_id: int | None = None,
    ) -> dict:
        """
        Fetch day occupancy for ``date``.

        Arbitration has no endpoint of its own; the mediation endpoint already
        reports booked times across all three stages.
        """
        endpoint_stage = Stage.CONCILIATION if stage is Stage.CONCILIATION else Stage.MEDIATION
        params: dict[str, Any] = {}
        if exclude_session_id is not None and stage is not Stage.MEDIATION:
            key = "excludeConciliationId" if stage is Stage.CONCILIATION else "excludeArbitrationId"
            params[key] = exclude_session_id
        return await self.call(
            "GET",
            f"/api/{endpoint_stage.value}/available-slots/{quote(date, safe='')}",
            params=params or None,
        )

    # Settlement

    async def list_settlements(self) -> list[dict]:
        return await self.call("GET", "/api/settlement")

    async def create_settlement(
        self,
        *,
        complaint_id: int,
        settlement_type: str,
        settlement_date: str,
        agreements: str,
        remarks: str | None = None,
    ) -> dict:
        return await self.call(
            "POST",
            "/api/settlement",
            json={
                "complaint_id": complaint_id,
                "settlement_type": settlement_type,
                "settlement_date": settlement_date,
                "agreements": agreements,
                "remarks": remarks,
            },
        )

    async def get_settlement(self, settlement_id: int) -> dict:
        return await self.call("GET", f"/api/settlement/{quote(str(settlement_id))}")

    async def update_settlement(
        self,
        settlement_id: int,
        *,
        settlement_date: str,
        agreements: str,
        remarks: str | None = None,
    ) -> dict:
        return await self.call(
            "PUT",
            f"/api/settlement/{quote(str(settlement_id))}",
            json={"settlement_date": settlement_date, "agreements": agreements, "remarks": remarks},
        )

    async def delete_settlement(self, settlement_id: int) -> dict:
        return await self.call("DELETE", f"/api/settlement/{quote(str(settlement_id))}")

    # Complaints

    async def file_complaint(self, fields: dict[str, Any]) -> dict:
        """Submit a new complaint; party entries are sent as JSON strings."""
        encoded = {
            key: jsonlib.dumps(value) if isinstance(value, (dict, list)) else value
            for key, value in fields.items()
        }
        return await self.call("POST", "/api/complaints", files=_form_fields(encoded))

    async def list_complaints(self) -> list[dict]:
        return await self.call("GET", "/api/complaints")

    async def pending_cases(self) -> list[dict]:
        return await self.call("GET", "/api/complaints/pending_cases")

    async def pending_cases_count(self) -> dict:
        return await self.call("GET", "/api/complaints/pending_cases_count")

    async def update_complaint(self, complaint_id: int, **fields: Any) -> dict:
        return await self.call(
            "PUT",
            f"/api/complaints/{quote(str(complaint_id))}",
            json={k: v for k, v in fields.items() if v is not None},
        )

    async def withdraw_complaint(self, complaint_id: int) -> dict:
        return await self.call("PUT", f"/api/complaints/{quote(str(complaint_id))}/withdraw")

    async def withdrawn_complaints(self) -> list[dict]:
        return await self.call("GET", "/api/complaints/withdrawn")

    async def update_priority(self, complaint_id: int, priority: str) -> dict:
        return await self.call(
            "PUT",
            f"/api/complaints/{quote(str(complaint_id))}/priority",
            json={"priority": priority},
        )

    async def user_complaints(self) -> dict:
        return await self.call("GET", "/api/complaints/user-complaints")

    async def user_schedules(self) -> dict:
        return await self.call("GET", "/api/complaints/user-schedules")

    # Referrals

    async def transfer_complaint(
        self,
        complaint_id: int,
        *,
        referred_to: str,
        referral_reason: str | None = None,
    ) -> dict:
        """Move a complaint to the referrals list; the backend deletes the complaint row."""
        return await self.call(
            "POST",
            f"/api/referrals/transfer/{quote(str(complaint_id))}",
            json={"referred_to": referred_to, "referral_reason": referral_reason},
        )

    async def list_referrals(self) -> list[dict]:
        return await self.call("GET", "/api/referrals")

    async def update_referral_status(self, referral_id: int, status: str) -> dict:
        return await self.call(
            "PUT",
            f"/api/referrals/{quote(str(referral_id))}/status",
            json={"status": status},
        )

    async def delete_referral(self, referral_id: int) -> dict:
        return await self.call("DELETE", f"/api/referrals/{quote(str(referral_id))}")

    # Residents

    async def list_residents(self) -> list[dict]:
        return await self.call("GET", "/api/residents")

    async def search_residents(self, query: str) -> list[dict]:
        return await self.call("GET", "/api/residents/search", params={"query": query})

    async def get_resident(self, resident_id: int) -> dict:
        return await self.call("GET", f"/api/residents/{quote(str(resident_id))}")

    async def create_resident(self, **fields: Any) -> dict:
        """Returns ``resident_id``; an identical existing resident is reused."""
        return await self.call(
            "POST", "/api/residents", json={k: v for k, v in fields.items() if v is not None}
        )

    async def update_resident(self, resident_id: int, **fields: Any) -> dict:
        return await self.call(
            "PUT",
            f"/api/residents/{quote(str(resident_id))}",
            json={k: v for k, v in fields.items() if v is not None},
        )

    # Notifications

    async def notifications(self) -> dict:
        return await self.call("GET", "/api/notifications")

    async def unread_count(self) -> int:
        path = "/api/notifications/unread-count"
        payload = _expect_mapping(await self.call("GET", path), path)
        return int(payload.get("unread_count", 0))

    async def mark_read(self, notification_id: int) -> dict:
        return await self.call("PUT", f"/api/notifications/{quote(str(notification_id))}/read")

    async def mark_all_read(self) -> dict:
        return await self.call("PUT", "/api/notifications/mark-all-read")

    # PDF forms

    async def generate_pdf(self, route: str, payload: dict[str, Any]) -> bytes:
        content = await self.call(
            "POST",
            f"/api/pdf/{quote(route)}",
            json=payload,
            headers={"Accept": "application/pdf"},
            raw=True,
        )
        if not content:
            raise BackendRequestError("empty_pdf_response")
        return content
