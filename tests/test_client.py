# Tests for memosync.remote
# Memos HTTP client with a mocked requests session

from unittest.mock import MagicMock

import pytest
import requests

from memosync.errors import AuthError, FetchError, NetworkError, ProtocolError
from memosync.remote.client import MemosClient, parse_open_api
from memosync.remote.models import Memo, RemoteSnapshot

OPEN_API = "https://memos.test/api/memo?openId=abc123"


def _response(status: int = 200, json_body=None, content: bytes = b"", bad_json: bool = False) -> MagicMock:
    response = MagicMock()
    response.status_code = status
    response.content = content
    if bad_json:
        response.json.side_effect = ValueError("Expecting value")
    else:
        response.json.return_value = json_body
    return response


def _routed_session(routes: dict) -> MagicMock:
    """Session whose get() answers by URL."""
    session = MagicMock(spec=requests.Session)

    def get(url, params=None, timeout=None):
        return routes[url]

    session.get.side_effect = get
    return session


class TestParseOpenApi:
    """Tests for credential parsing."""

    def test_valid_url(self):
        assert parse_open_api(OPEN_API) == ("https://memos.test", "abc123")

    def test_keeps_port(self):
        origin, _ = parse_open_api("http://localhost:5230/api/memo?openId=x")
        assert origin == "http://localhost:5230"

    def test_missing_open_id(self):
        with pytest.raises(AuthError):
            parse_open_api("https://memos.test/api/memo")

    def test_not_a_url(self):
        with pytest.raises(AuthError):
            parse_open_api("just-a-token")


class TestMemoPayload:
    """Tests for Memo.from_payload."""

    def test_numeric_id_becomes_string(self):
        memo = Memo.from_payload({"id": 7, "content": "hi", "updatedTs": 1700000000})
        assert memo == Memo(id="7", content="hi", updated_at=1700000000)
        assert memo.filename == "7.md"

    def test_missing_timestamp(self):
        with pytest.raises(ProtocolError):
            Memo.from_payload({"id": 1, "content": "hi"})

    def test_non_object(self):
        with pytest.raises(ProtocolError):
            Memo.from_payload(["not", "a", "memo"])


class TestMemosClientFetch:
    """Tests for MemosClient.fetch."""

    def test_full_snapshot(self):
        """Memos, resource listing and payloads are combined into one snapshot."""
        session = _routed_session(
            {
                "https://memos.test/api/memo": _response(
                    json_body={"data": [{"id": 1, "content": "hello", "updatedTs": 100}]}
                ),
                "https://memos.test/api/resource": _response(json_body=[{"id": 9, "filename": "my pic.png"}]),
                "https://memos.test/o/r/9/my%20pic.png": _response(content=b"\x89PNG"),
            }
        )

        snapshot = MemosClient(session=session).fetch(OPEN_API)

        assert isinstance(snapshot, RemoteSnapshot)
        assert snapshot.memos == [Memo(id="1", content="hello", updated_at=100)]
        assert snapshot.resources[0].filename == "my pic.png"
        assert snapshot.resources[0].content == b"\x89PNG"
        assert snapshot.total == 2

    def test_passes_open_id_and_timeout(self):
        session = _routed_session(
            {
                "https://memos.test/api/memo": _response(json_body=[]),
                "https://memos.test/api/resource": _response(json_body={"data": None}),
            }
        )

        snapshot = MemosClient(timeout=5.0, session=session).fetch(OPEN_API)

        assert snapshot.total == 0
        session.get.assert_any_call("https://memos.test/api/memo", params={"openId": "abc123"}, timeout=5.0)

    @pytest.mark.parametrize("status", [401, 403])
    def test_rejected_credential(self, status):
        session = _routed_session({"https://memos.test/api/memo": _response(status=status)})
        with pytest.raises(AuthError):
            MemosClient(session=session).fetch(OPEN_API)

    def test_server_error(self):
        session = _routed_session({"https://memos.test/api/memo": _response(status=500)})
        with pytest.raises(ProtocolError):
            MemosClient(session=session).fetch(OPEN_API)

    def test_invalid_json(self):
        session = _routed_session({"https://memos.test/api/memo": _response(bad_json=True)})
        with pytest.raises(ProtocolError):
            MemosClient(session=session).fetch(OPEN_API)

    def test_unexpected_shape(self):
        session = _routed_session({"https://memos.test/api/memo": _response(json_body={"memos": []})})
        with pytest.raises(ProtocolError):
            MemosClient(session=session).fetch(OPEN_API)

    @pytest.mark.parametrize(
        "exc",
        [requests.exceptions.ConnectionError("refused"), requests.exceptions.Timeout("slow")],
    )
    def test_transport_errors(self, exc):
        session = MagicMock(spec=requests.Session)
        session.get.side_effect = exc
        with pytest.raises(NetworkError):
            MemosClient(session=session).fetch(OPEN_API)

    def test_resource_download_failure_aborts(self):
        """A failed payload download fails the whole fetch."""
        session = _routed_session(
            {
                "https://memos.test/api/memo": _response(json_body=[]),
                "https://memos.test/api/resource": _response(json_body=[{"id": 1, "filename": "a.png"}]),
                "https://memos.test/o/r/1/a.png": _response(status=404),
            }
        )
        with pytest.raises(FetchError):
            MemosClient(session=session).fetch(OPEN_API)

    def test_context_manager_closes_session(self):
        session = MagicMock(spec=requests.Session)
        with MemosClient(session=session):
            pass
        session.close.assert_called_once()
