"""Asset platform REST client."""

import json
from dataclasses import dataclass
from typing import Protocol

import httpx

from tts_uploader.domain.assets import UploadRequest
from tts_uploader.domain.errors import (
    MalformedResponseError,
    MissingCredentialsError,
    PlatformHttpError,
    PlatformTransportError,
)
from tts_uploader.domain.session import SessionContext

_CREATOR_ORIGIN = "https://create.roblox.com"
_ASSET_DESCRIPTION = "Audio created via automated TTS service"


class AssetPlatformClient(Protocol):
    """Interface for the authenticated asset platform endpoints.

    Each method performs exactly one request. Non-2xx responses raise
    ``PlatformHttpError`` and missing responses raise
    ``PlatformTransportError``; retrying is left to the caller.
    """

    async def get_authenticated_user(
        self, session: SessionContext
    ) -> dict[str, object]:
        """Return the identity behind the session cookie."""

    async def get_universe_permissions(
        self, session: SessionContext, universe_id: str
    ) -> dict[str, object]:
        """Return the caller's permissions for a universe."""

    async def grant_asset_permission(
        self, session: SessionContext, asset_id: int, universe_id: str
    ) -> None:
        """Allow a universe to use an asset."""

    async def create_asset(
        self, session: SessionContext, request: UploadRequest, user_id: int
    ) -> dict[str, object]:
        """Submit an audio asset and return the operation payload."""

    async def get_operation(
        self, session: SessionContext, operation_id: str
    ) -> dict[str, object]:
        """Return the current state of an asset operation."""


@dataclass
class HttpxAssetPlatformClient(AssetPlatformClient):
    """Asset platform client implemented with httpx."""

    users_base_url: str
    develop_base_url: str
    apis_base_url: str
    http_client: httpx.AsyncClient

    @classmethod
    def create(
        cls, users_base_url: str, develop_base_url: str, apis_base_url: str
    ) -> "HttpxAssetPlatformClient":
        """Create a platform client with a managed httpx session."""
        return cls(
            users_base_url=users_base_url.rstrip("/"),
            develop_base_url=develop_base_url.rstrip("/"),
            apis_base_url=apis_base_url.rstrip("/"),
            http_client=httpx.AsyncClient(),
        )

    async def get_authenticated_user(
        self, session: SessionContext
    ) -> dict[str, object]:
        """Fetch the authenticated user."""
        url = f"{self.users_base_url}/v1/users/authenticated"
        response = await self._send("GET", url, session)
        return _json_object(response)

    async def get_universe_permissions(
        self, session: SessionContext, universe_id: str
    ) -> dict[str, object]:
        """Fetch manage permissions for a universe."""
        url = f"{self.develop_base_url}/v1/universes/multiget/permissions"
        response = await self._send("GET", url, session, params={"ids": universe_id})
        return _json_object(response)

    async def grant_asset_permission(
        self, session: SessionContext, asset_id: int, universe_id: str
    ) -> None:
        """Grant a universe 'Use' permission on an asset."""
        url = (
            f"{self.apis_base_url}/asset-permissions-api/v1/assets/"
            f"{asset_id}/permissions"
        )
        payload = {
            "requests": [
                {
                    "subjectType": "Universe",
                    "subjectId": str(universe_id),
                    "action": "Use",
                }
            ],
            "grantToDependencies": False,
            "enableDeepAccessCheck": False,
        }
        await self._send(
            "PATCH",
            url,
            session,
            headers={
                "Content-Type": "application/json-patch+json",
                "Accept": "application/json, text/plain, */*",
                **_creator_headers(),
            },
            content=json.dumps(payload),
        )

    async def create_asset(
        self, session: SessionContext, request: UploadRequest, user_id: int
    ) -> dict[str, object]:
        """Upload an audio file as a new asset."""
        url = f"{self.apis_base_url}/assets/user-auth/v1/assets"
        metadata = {
            "displayName": request.display_name,
            "description": _ASSET_DESCRIPTION,
            "assetType": "Audio",
            "creationContext": {
                "creator": {"userId": user_id},
                "expectedPrice": 0,
            },
        }
        response = await self._send(
            "POST",
            url,
            session,
            headers=_creator_headers(),
            data={"request": json.dumps(metadata)},
            files={
                "FileContent": (
                    request.filename,
                    request.file_bytes,
                    request.content_type,
                )
            },
            timeout=60,
        )
        return _json_object(response)

    async def get_operation(
        self, session: SessionContext, operation_id: str
    ) -> dict[str, object]:
        """Fetch an asset operation."""
        url = f"{self.apis_base_url}/assets/user-auth/v1/operations/{operation_id}"
        response = await self._send("GET", url, session, headers=_creator_headers())
        return _json_object(response)

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()

    async def _send(  # noqa: PLR0913
        self,
        method: str,
        url: str,
        session: SessionContext,
        *,
        headers: dict[str, str] | None = None,
        timeout: float = 15,
        **kwargs: object,
    ) -> httpx.Response:
        if not session.has_cookie():
            raise MissingCredentialsError("Platform cookie not available.")
        request_headers = {"Cookie": session.get_cookie(), "Accept": "application/json"}
        if session.get_csrf():
            request_headers["x-csrf-token"] = session.get_csrf()
        if headers:
            request_headers.update(headers)
        try:
            response = await self.http_client.request(
                method, url, headers=request_headers, timeout=timeout, **kwargs
            )
        except httpx.TransportError as exc:
            raise PlatformTransportError(
                f"{method} {url} got no response: {exc}"
            ) from exc
        if response.is_error:
            raise _http_error(response)
        return response


def _creator_headers() -> dict[str, str]:
    return {"Origin": _CREATOR_ORIGIN, "Referer": f"{_CREATOR_ORIGIN}/"}


def _json_object(response: httpx.Response) -> dict[str, object]:
    """Decode a JSON object body or fail with a descriptive error."""
    payload = _safe_json(response)
    if not isinstance(payload, dict):
        raise MalformedResponseError(
            f"Expected a JSON object from {response.request.url}, "
            f"got {response.text[:200]!r}"
        )
    return payload


def _safe_json(response: httpx.Response) -> object:
    try:
        return response.json()
    except ValueError:
        return None


def _http_error(response: httpx.Response) -> PlatformHttpError:
    """Translate an error response into a ``PlatformHttpError``."""
    message = response.reason_phrase or f"HTTP {response.status_code}"
    code: str | None = None
    payload = _safe_json(response)
    if isinstance(payload, dict):
        errors = payload.get("errors")
        if isinstance(errors, list) and errors and isinstance(errors[0], dict):
            first_message = errors[0].get("message")
            if first_message:
                message = str(first_message)
        if payload.get("code") is not None:
            code = str(payload["code"])
    return PlatformHttpError(
        response.status_code,
        message,
        csrf_token=response.headers.get("x-csrf-token"),
        code=code,
    )
