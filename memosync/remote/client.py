# memos-sync Remote Client
# Fetches a complete memo/resource snapshot from a Memos server

import logging
from typing import Any, Optional, Protocol
from urllib.parse import parse_qs, quote, urlsplit

import requests

from memosync.errors import AuthError, NetworkError, ProtocolError
from memosync.remote.models import Memo, RemoteSnapshot, Resource

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


class SnapshotFetcher(Protocol):
    """Anything that can produce a full remote snapshot for a credential."""

    def fetch(self, credential: str) -> RemoteSnapshot: ...


def parse_open_api(credential: str) -> tuple[str, str]:
    """
    Split a Memos OpenAPI URL into server origin and open id.

    Args:
        credential: URL like ``https://memos.example.com/api/memo?openId=abc``.

    Returns:
        Tuple of (origin, open_id).

    Raises:
        AuthError: If the credential is not a usable OpenAPI URL.
    """
    parts = urlsplit(credential.strip())
    if parts.scheme not in ("http", "https") or not parts.netloc:
        raise AuthError("OpenAPI key must be an http(s) URL")

    open_ids = parse_qs(parts.query).get("openId")
    if not open_ids or not open_ids[0]:
        raise AuthError("OpenAPI key has no openId parameter")

    return f"{parts.scheme}://{parts.netloc}", open_ids[0]


def _unwrap_list(payload: Any, what: str) -> list:
    """Accept both a bare JSON list and the ``{"data": [...]}`` envelope."""
    if isinstance(payload, dict) and "data" in payload:
        payload = payload["data"]
    if payload is None:
        return []
    if not isinstance(payload, list):
        raise ProtocolError(f"Expected a list of {what}, got {type(payload).__name__}")
    return payload


class MemosClient:
    """
    HTTP client for the Memos OpenAPI.

    The snapshot is only returned once every memo and every resource payload
    has been downloaded; any failure raises and nothing partial escapes.
    """

    def __init__(self, timeout: float = DEFAULT_TIMEOUT, session: Optional[requests.Session] = None):
        """
        Initialize client.

        Args:
            timeout: Per-request timeout in seconds.
            session: Optional session (a new one is created if not provided).
        """
        self.timeout = timeout
        self.session = session or requests.Session()

    def close(self) -> None:
        """Close the underlying session."""
        self.session.close()

    def __enter__(self) -> "MemosClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def fetch(self, credential: str) -> RemoteSnapshot:
        """
        Fetch all memos and resources.

        Args:
            credential: Memos OpenAPI URL.

        Returns:
            RemoteSnapshot with every memo and resource payload.

        Raises:
            AuthError: Credential malformed or rejected.
            NetworkError: Server unreachable or timed out.
            ProtocolError: Unexpected response.
        """
        origin, open_id = parse_open_api(credential)
        params = {"openId": open_id}

        memo_payload = _unwrap_list(self._get(f"{origin}/api/memo", params).json_body, "memos")
        memos = [Memo.from_payload(item) for item in memo_payload]
        logger.debug("Fetched %d memos from %s", len(memos), origin)

        resource_payload = _unwrap_list(self._get(f"{origin}/api/resource", params).json_body, "resources")
        resources = [self._download_resource(origin, params, item) for item in resource_payload]
        logger.debug("Fetched %d resources from %s", len(resources), origin)

        return RemoteSnapshot(memos=memos, resources=resources)

    def _download_resource(self, origin: str, params: dict[str, str], item: Any) -> Resource:
        """Download the binary payload for one resource entry."""
        if not isinstance(item, dict):
            raise ProtocolError(f"Expected resource object, got {type(item).__name__}")

        resource_id = item.get("id")
        filename = item.get("filename")
        if resource_id is None or not isinstance(filename, str) or not filename:
            raise ProtocolError(f"Resource entry is missing id or filename: {item!r}")

        url = f"{origin}/o/r/{resource_id}/{quote(filename)}"
        response = self._get(url, params, expect_json=False)
        return Resource(filename=filename, content=response.content)

    def _get(self, url: str, params: dict[str, str], *, expect_json: bool = True) -> "_Response":
        """Issue a GET and translate transport and status failures."""
        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
        except requests.exceptions.Timeout as e:
            raise NetworkError(f"Request to {url} timed out") from e
        except requests.exceptions.ConnectionError as e:
            raise NetworkError(f"Cannot connect to {url}") from e
        except requests.exceptions.RequestException as e:
            raise NetworkError(f"Request error: {e}") from e

        if response.status_code in (401, 403):
            raise AuthError(f"Server rejected the OpenAPI key ({response.status_code})")
        if response.status_code != 200:
            raise ProtocolError(f"GET {url} failed with status {response.status_code}")

        if not expect_json:
            return _Response(content=response.content)

        try:
            return _Response(content=response.content, json_body=response.json())
        except ValueError as e:
            raise ProtocolError(f"Invalid JSON from {url}") from e


class _Response:
    """Body of a successful response."""

    __slots__ = ("content", "json_body")

    def __init__(self, content: bytes, json_body: Any = None):
        self.content = content
        self.json_body = json_body
