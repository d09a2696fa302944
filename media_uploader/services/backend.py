"""
Upload Backend - Single Responsibility: speak the presign/multipart contract.

Wraps the application server endpoints that issue presigned URLs,
manage multipart sessions and accept proxied uploads.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Tuple

import httpx

from ..errors import HandshakeError
from ..models import CompletedPart, UploadCandidate, UploadSession
from ..protocols import IAPIClient

logger = logging.getLogger(__name__)

UPLOAD_URL_ENDPOINT = "/menus/upload-url"
MULTIPART_INITIATE_ENDPOINT = "/menus/multipart/initiate"
MULTIPART_PART_URL_ENDPOINT = "/menus/multipart/part-url"
MULTIPART_COMPLETE_ENDPOINT = "/menus/multipart/complete"
MULTIPART_ABORT_ENDPOINT = "/menus/multipart/abort"
SERVER_UPLOAD_ENDPOINT = "/menus/upload"


def _decode_json(response: httpx.Response, endpoint: str) -> Any:
    try:
        return response.json()
    except ValueError as exc:
        raise HandshakeError(
            f"Malformed JSON from {endpoint}: {response.text[:200]!r}",
            endpoint=endpoint,
            status_code=response.status_code,
        ) from exc


def _unwrap(payload: Any) -> Any:
    """Strip a ``{"data": ...}`` envelope if the server added one."""
    if isinstance(payload, dict) and "data" in payload and isinstance(payload["data"], (dict, str)):
        return payload["data"]
    return payload


def _require(payload: Any, endpoint: str, *keys: str) -> Dict[str, Any]:
    if not isinstance(payload, dict):
        raise HandshakeError(
            f"Unexpected response from {endpoint}: expected an object, got {type(payload).__name__}",
            endpoint=endpoint,
        )
    missing = [key for key in keys if not payload.get(key)]
    if missing:
        raise HandshakeError(
            f"Response from {endpoint} is missing {', '.join(missing)}",
            endpoint=endpoint,
            details={"payload": payload},
        )
    return payload


class UploadBackend:
    """
    Backend gateway for upload handshakes.

    Implements IUploadBackend protocol on top of an IAPIClient.
    """

    def __init__(self, api_client: IAPIClient):
        """
        Initialize backend gateway.

        Args:
            api_client: HTTP client for API calls
        """
        self._api = api_client

    async def get_upload_url(self, filename: str, content_type: str) -> Tuple[str, str]:
        """
        Request a presigned write URL for a single-shot upload.

        Returns:
            (upload_url, public_url)
        """
        response = await self._api.get(
            UPLOAD_URL_ENDPOINT,
            params={"filename": filename, "content_type": content_type},
        )
        data = _require(
            _unwrap(_decode_json(response, UPLOAD_URL_ENDPOINT)),
            UPLOAD_URL_ENDPOINT,
            "upload_url",
            "public_url",
        )
        return data["upload_url"], data["public_url"]

    async def initiate_multipart(self, filename: str, content_type: str) -> UploadSession:
        response = await self._api.post(
            MULTIPART_INITIATE_ENDPOINT,
            json={"filename": filename, "content_type": content_type},
        )
        data = _require(
            _unwrap(_decode_json(response, MULTIPART_INITIATE_ENDPOINT)),
            MULTIPART_INITIATE_ENDPOINT,
            "upload_id",
            "key",
        )
        return UploadSession(upload_id=str(data["upload_id"]), storage_key=str(data["key"]))

    async def get_part_url(self, session: UploadSession, part_number: int) -> str:
        """
        Request the presigned URL for one part.

        The server answers with a bare JSON string; plain-text bodies and
        objects carrying ``url``/``upload_url`` are accepted as well.
        """
        response = await self._api.get(
            MULTIPART_PART_URL_ENDPOINT,
            params={
                "key": session.storage_key,
                "upload_id": session.upload_id,
                "part_number": part_number,
            },
        )
        content_type = response.headers.get("content-type", "")
        if "json" in content_type:
            payload = _unwrap(_decode_json(response, MULTIPART_PART_URL_ENDPOINT))
        else:
            payload = response.text.strip()

        if isinstance(payload, dict):
            payload = payload.get("url") or payload.get("upload_url")
        if not isinstance(payload, str) or not payload:
            raise HandshakeError(
                f"No presigned URL for part {part_number} in response from {MULTIPART_PART_URL_ENDPOINT}",
                endpoint=MULTIPART_PART_URL_ENDPOINT,
            )
        return payload

    async def complete_multipart(self, session: UploadSession, parts: List[CompletedPart]) -> str:
        response = await self._api.post(
            MULTIPART_COMPLETE_ENDPOINT,
            json={
                "key": session.storage_key,
                "upload_id": session.upload_id,
                "parts": [part.to_payload() for part in parts],
            },
        )
        data = _require(
            _unwrap(_decode_json(response, MULTIPART_COMPLETE_ENDPOINT)),
            MULTIPART_COMPLETE_ENDPOINT,
            "url",
        )
        return data["url"]

    async def abort_multipart(self, session: UploadSession) -> None:
        await self._api.post(
            MULTIPART_ABORT_ENDPOINT,
            json={"key": session.storage_key, "upload_id": session.upload_id},
        )

    async def upload_via_server(self, candidate: UploadCandidate, payload: bytes) -> str:
        """Proxy the whole file through the application server."""
        response = await self._api.post(
            SERVER_UPLOAD_ENDPOINT,
            files={"file": (candidate.name, payload, candidate.mime_type)},
        )
        data = _require(
            _unwrap(_decode_json(response, SERVER_UPLOAD_ENDPOINT)),
            SERVER_UPLOAD_ENDPOINT,
            "url",
        )
        return data["url"]
