"""Legajos - REST client

Thin httpx wrapper over the /api routes. The bearer token lives in memory and,
when a token file is configured, survives between runs. Any 401 answer drops
the token and notifies the unauthorized subscribers.
"""

import os
import re
from collections.abc import Callable
from pathlib import Path
from typing import Any, Optional

import httpx
from loguru import logger

DEFAULT_BASE_URL = "http://localhost:4000/api"
FILENAME_PATTERN = re.compile(r'filename="?([^";]+)"?')


def normalize_base_url(base_url: Optional[str]) -> str:
    """Base URL ending in '/api'."""
    url = (base_url or os.getenv("LEGAJOS_API_URL") or DEFAULT_BASE_URL).rstrip("/")
    if not url.endswith("/api"):
        url = f"{url}/api"
    return url


def filename_from_response(response: httpx.Response, fallback: str) -> str:
    disposition = response.headers.get("content-disposition", "")
    match = FILENAME_PATTERN.search(disposition)
    return match.group(1) if match else fallback


class ApiError(Exception):
    """Error answer from the API."""

    def __init__(self, status_code: int, error: str, message: str, details: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.error = error
        self.message = message
        self.details = details

    @classmethod
    def from_response(cls, response: httpx.Response) -> "ApiError":
        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}
        return cls(
            response.status_code,
            body.get("error", "HTTPError"),
            body.get("message", response.reason_phrase or "Error"),
            body.get("details"),
        )

    def __str__(self) -> str:
        return f"{self.status_code} {self.error}: {self.message}"


class LegajosClient:
    """Client for the Legajos API."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        token: Optional[str] = None,
        token_file: Optional[str] = None,
        http_client: Optional[httpx.Client] = None,
        timeout: float = 30.0,
    ):
        self.base_url = normalize_base_url(base_url)
        self.token_file = Path(token_file).expanduser() if token_file else None
        self._http = http_client or httpx.Client(timeout=timeout)
        self._owns_http = http_client is None
        self._unauthorized_subscribers: set[Callable[[], None]] = set()
        self._token = token if token is not None else self._load_token()

    # -- token handling --------------------------------------------------

    def _load_token(self) -> Optional[str]:
        if self.token_file and self.token_file.is_file():
            return self.token_file.read_text().strip() or None
        return None

    @property
    def token(self) -> Optional[str]:
        return self._token

    def set_token(self, token: Optional[str]) -> None:
        self._token = token
        if self.token_file is None:
            return
        if token:
            self.token_file.parent.mkdir(parents=True, exist_ok=True)
            self.token_file.write_text(token)
        elif self.token_file.exists():
            self.token_file.unlink()

    def subscribe_unauthorized(self, callback: Callable[[], None]) -> Callable[[], None]:
        """Register a forced-logout callback. Returns the unsubscribe function."""
        self._unauthorized_subscribers.add(callback)
        return lambda: self._unauthorized_subscribers.discard(callback)

    def _notify_unauthorized(self) -> None:
        self.set_token(None)
        for callback in list(self._unauthorized_subscribers):
            callback()

    # -- transport -------------------------------------------------------

    def request(self, method: str, path: str, **kwargs) -> httpx.Response:
        headers = kwargs.pop("headers", {}) or {}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        response = self._http.request(method, f"{self.base_url}{path}", headers=headers, **kwargs)
        if response.status_code == 401:
            logger.debug(f"{method} {path} answered 401, clearing session")
            self._notify_unauthorized()
        if response.is_error:
            raise ApiError.from_response(response)
        return response

    def _json(self, method: str, path: str, **kwargs) -> Any:
        response = self.request(method, path, **kwargs)
        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    def _download(self, method: str, path: str, fallback: str, **kwargs) -> tuple[str, bytes]:
        response = self.request(method, path, **kwargs)
        return filename_from_response(response, fallback), response.content

    def close(self) -> None:
        if self._owns_http:
            self._http.close()

    def __enter__(self) -> "LegajosClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # -- auth ------------------------------------------------------------

    def login(self, email: str, password: str) -> dict:
        data = self._json("POST", "/auth/login", json={"email": email, "password": password})
        self.set_token(data["accessToken"])
        return data["user"]

    def logout(self) -> None:
        self.set_token(None)

    def me(self) -> dict:
        return self._json("GET", "/users/me")["user"]

    def change_password(self, current_password: str, new_password: str) -> None:
        self._json(
            "POST",
            "/auth/change-password",
            json={"currentPassword": current_password, "newPassword": new_password},
        )

    # -- users -----------------------------------------------------------

    def list_users(self) -> list[dict]:
        return self._json("GET", "/users")["users"]

    def create_user(self, payload: dict) -> dict:
        return self._json("POST", "/users", json=payload)["user"]

    def update_user(self, user_id: str, payload: dict) -> dict:
        return self._json("PATCH", f"/users/{user_id}", json=payload)["user"]

    def reset_user_password(self, user_id: str, new_password: str) -> None:
        self._json("POST", f"/users/{user_id}/reset-password", json={"newPassword": new_password})

    def delete_user(self, user_id: str) -> None:
        self._json("DELETE", f"/users/{user_id}")

    # -- sources ---------------------------------------------------------

    def list_sources(self) -> list[dict]:
        return self._json("GET", "/sources")["sources"]

    def create_source(self, payload: dict) -> dict:
        return self._json("POST", "/sources", json=payload)["source"]

    def update_source(self, source_id: str, payload: dict) -> dict:
        return self._json("PATCH", f"/sources/{source_id}", json=payload)["source"]

    # -- persons ---------------------------------------------------------

    def list_persons(self) -> list[dict]:
        return self._json("GET", "/persons")["persons"]

    def get_person(self, person_id: str) -> dict:
        return self._json("GET", f"/persons/{person_id}")["person"]

    def create_person(self, payload: dict) -> dict:
        return self._json("POST", "/persons", json=payload)["person"]

    def update_person(self, person_id: str, payload: dict) -> dict:
        return self._json("PATCH", f"/persons/{person_id}", json=payload)["person"]

    def add_source_record(self, person_id: str, payload: dict) -> dict:
        return self._json("POST", f"/persons/{person_id}/sources", json=payload)["record"]

    # -- cases -----------------------------------------------------------

    def list_cases(self, estado: Optional[str] = None) -> list[dict]:
        params = {"estado": estado} if estado else None
        return self._json("GET", "/cases", params=params)["cases"]

    def get_case(self, case_id: str) -> dict:
        return self._json("GET", f"/cases/{case_id}")["case"]

    def create_case(self, payload: dict) -> dict:
        return self._json("POST", "/cases", json=payload)["case"]

    def update_case(self, case_id: str, payload: dict) -> dict:
        return self._json("PATCH", f"/cases/{case_id}", json=payload)["case"]

    def delete_case(self, case_id: str) -> None:
        self._json("DELETE", f"/cases/{case_id}")

    # -- media -----------------------------------------------------------

    def _upload(
        self,
        case_id: str,
        folder: str,
        content: bytes,
        filename: str,
        mime_type: str,
        description: Optional[str],
    ) -> dict:
        data = {"description": description} if description else None
        return self._json(
            "POST",
            f"/cases/{case_id}/{folder}",
            files={"file": (filename, content, mime_type)},
            data=data,
        )

    def upload_photo(
        self, case_id: str, content: bytes, filename: str, mime_type: str, description: Optional[str] = None
    ) -> dict:
        return self._upload(case_id, "photos", content, filename, mime_type, description)["photo"]

    def upload_document(
        self, case_id: str, content: bytes, filename: str, mime_type: str, description: Optional[str] = None
    ) -> dict:
        return self._upload(case_id, "documents", content, filename, mime_type, description)["document"]

    def update_photo(self, case_id: str, photo_id: str, description: str) -> dict:
        return self._json(
            "PATCH", f"/cases/{case_id}/photos/{photo_id}", json={"description": description}
        )["photo"]

    def update_document(self, case_id: str, document_id: str, description: str) -> dict:
        return self._json(
            "PATCH", f"/cases/{case_id}/documents/{document_id}", json={"description": description}
        )["document"]

    def set_primary_photo(self, case_id: str, photo_id: str) -> dict:
        return self._json("PATCH", f"/cases/{case_id}/photos/{photo_id}/primary")["photo"]

    def delete_photo(self, case_id: str, photo_id: str) -> None:
        self._json("DELETE", f"/cases/{case_id}/photos/{photo_id}")

    def delete_document(self, case_id: str, document_id: str) -> None:
        self._json("DELETE", f"/cases/{case_id}/documents/{document_id}")

    # -- exports ---------------------------------------------------------

    def export_case_pdf(self, case_id: str) -> tuple[str, bytes]:
        return self._download("GET", f"/cases/{case_id}/export/pdf", f"legajo_{case_id}.pdf")

    def export_case_zip(self, case_id: str) -> tuple[str, bytes]:
        return self._download("GET", f"/cases/{case_id}/export/zip", f"legajo_{case_id}.zip")

    def export_cases_excel(self, ids: list[str]) -> tuple[str, bytes]:
        return self._download("POST", "/cases/export/excel", "casos.xlsx", json={"ids": list(ids)})

    def export_all_cases(self, estado: Optional[str] = None) -> tuple[str, bytes]:
        params = {"estado": estado} if estado else None
        return self._download("GET", "/cases/export/zip", "casos.zip", params=params)
