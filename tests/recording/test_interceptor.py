# tests/recording/test_interceptor.py
"""Tests for the record policy, playback transport and interceptor state."""

import json
from pathlib import Path
from types import SimpleNamespace

import pytest
from azure.core.rest import HttpRequest

from kvharness.contracts.enums import TestMode
from kvharness.contracts.errors import RecordingNotFoundError, ReplayMissError
from kvharness.recording.interceptor import RecordPlaybackInterceptor, build_interaction
from kvharness.recording.store import RecordingStore
from tests.fixtures.recordings import make_interaction, make_recording

LIVE_VAULT = "https://contoso-kv.vault.azure.net"
PLACEHOLDER = "https://REDACTED.vault.azure.net"


@pytest.fixture
def store(tmp_path: Path) -> RecordingStore:
    return RecordingStore(tmp_path / "recordings")


class TestBuildInteraction:
    """Raw exchanges are turned into redacted interactions."""

    def test_redacts_and_normalizes(self) -> None:
        body = json.dumps({"key": {"kid": f"{LIVE_VAULT}/keys/k1/v1"}}).encode("utf-8")

        interaction = build_interaction(
            method="post",
            url=f"{LIVE_VAULT}/keys/k1/create?api-version=7.5",
            request_headers={"Authorization": "Bearer live-token", "Content-Type": "application/json"},
            request_body='{"kty": "EC"}',
            status_code=200,
            reason="OK",
            response_headers={
                "Content-Type": "application/json",
                "Content-Encoding": "gzip",
                "Transfer-Encoding": "chunked",
                "Content-Length": "9999",
                "Set-Cookie": "session=1",
            },
            content=body,
        )

        assert interaction.signature == "POST /keys/k1/create"
        assert interaction.request.method == "POST"
        assert interaction.request.url == f"{PLACEHOLDER}/keys/k1/create?api-version=7.5"
        assert interaction.request.headers == {"Content-Type": "application/json"}
        assert interaction.response.headers == {"Content-Type": "application/json", "Content-Length": str(len(body))}
        assert "contoso-kv" not in (interaction.response.body or "")
        assert f"{PLACEHOLDER}/keys/k1/v1" in (interaction.response.body or "")

    def test_binary_body_stored_base64(self) -> None:
        interaction = build_interaction(
            method="GET",
            url=f"{LIVE_VAULT}/certificates/c1/backup",
            request_headers={},
            request_body=None,
            status_code=200,
            reason="OK",
            response_headers={},
            content=b"\xff\xfe\x00\x01",
        )

        assert interaction.response.body_encoding == "base64"
        assert interaction.response.content() == b"\xff\xfe\x00\x01"
        assert interaction.response.headers["Content-Length"] == "4"

    def test_unread_body_recorded_empty(self) -> None:
        interaction = build_interaction(
            method="GET",
            url=f"{LIVE_VAULT}/keys",
            request_headers={},
            request_body=None,
            status_code=204,
            reason="No Content",
            response_headers={},
            content=None,
        )

        assert interaction.response.body is None
        assert interaction.response.content() == b""
        assert interaction.response.headers["Content-Length"] == "0"


class TestRecordMode:
    """Record mode writes each completed interaction to the test's file."""

    def test_test_name_required_before_use(self, store: RecordingStore) -> None:
        interceptor = RecordPlaybackInterceptor(store, TestMode.RECORD)

        with pytest.raises(RuntimeError, match="rename_test"):
            _ = interceptor.test_name

    def test_record_persists_immediately(self, store: RecordingStore) -> None:
        interceptor = RecordPlaybackInterceptor(store, TestMode.RECORD)
        interceptor.rename_test("test_create_key")

        interceptor.record(make_interaction("POST", "/keys/k1/create"))

        assert [i.signature for i in store.load("test_create_key").interactions] == ["POST /keys/k1/create"]

        interceptor.record(make_interaction("GET", "/keys/k1"))

        assert len(store.load("test_create_key").interactions) == 2

    def test_rename_starts_fresh_recording(self, store: RecordingStore) -> None:
        interceptor = RecordPlaybackInterceptor(store, TestMode.RECORD)
        interceptor.rename_test("test_one")
        interceptor.record(make_interaction("GET", "/keys"))

        interceptor.rename_test("test_two")
        interceptor.record(make_interaction("GET", "/deletedkeys"))

        assert [i.signature for i in store.load("test_one").interactions] == ["GET /keys"]
        assert [i.signature for i in store.load("test_two").interactions] == ["GET /deletedkeys"]

    def test_flush_writes_empty_recording(self, store: RecordingStore) -> None:
        interceptor = RecordPlaybackInterceptor(store, TestMode.RECORD)
        interceptor.rename_test("test_no_requests")

        interceptor.flush()

        assert store.load("test_no_requests").interactions == []

    def test_flush_is_noop_in_live(self, store: RecordingStore) -> None:
        interceptor = RecordPlaybackInterceptor(store, TestMode.LIVE)
        interceptor.rename_test("test_live")

        interceptor.flush()

        assert not store.exists("test_live")

    def test_record_variable_stored(self, store: RecordingStore) -> None:
        interceptor = RecordPlaybackInterceptor(store, TestMode.RECORD)
        interceptor.rename_test("test_names")

        interceptor.record_variable("name-1")
        interceptor.record_variable("name-2")

        assert store.load("test_names").variables == ["name-1", "name-2"]

    def test_policy_records_pipeline_exchange(self, store: RecordingStore) -> None:
        interceptor = RecordPlaybackInterceptor(store, TestMode.RECORD)
        interceptor.rename_test("test_policy")
        policy = interceptor.get_record_policy()

        http_request = HttpRequest(
            "PUT",
            f"{LIVE_VAULT}/keys/k1/create?api-version=7.5",
            json={"kty": "EC"},
            headers={"Authorization": "Bearer live-token"},
        )
        http_response = SimpleNamespace(
            status_code=200,
            reason="OK",
            headers={"Content-Type": "application/json"},
            body=lambda: json.dumps({"key": {"kid": f"{LIVE_VAULT}/keys/k1/v1"}}).encode("utf-8"),
        )

        policy.on_response(SimpleNamespace(http_request=http_request), SimpleNamespace(http_response=http_response))

        interaction = store.load("test_policy").interactions[0]
        assert interaction.signature == "PUT /keys/k1/create"
        assert interaction.request.body == '{"kty": "EC"}'
        assert "Authorization" not in interaction.request.headers
        assert interaction.response.status_code == 200

    def test_record_policy_cached(self, store: RecordingStore) -> None:
        interceptor = RecordPlaybackInterceptor(store, TestMode.RECORD)

        assert interceptor.get_record_policy() is interceptor.get_record_policy()


class TestPlaybackMode:
    """Playback answers requests from the stored recording."""

    def test_missing_recording_raises_on_first_use(self, store: RecordingStore) -> None:
        interceptor = RecordPlaybackInterceptor(store, TestMode.PLAYBACK)
        interceptor.rename_test("test_missing")

        assert not interceptor.has_recording()
        with pytest.raises(RecordingNotFoundError):
            _ = interceptor.recording

    def test_variables_returned_in_order(self, store: RecordingStore) -> None:
        store.save(make_recording("test_names", [], variables=["a", "b"]))
        interceptor = RecordPlaybackInterceptor(store, TestMode.PLAYBACK)
        interceptor.rename_test("test_names")

        assert interceptor.next_variable() == "a"
        assert interceptor.next_variable() == "b"
        with pytest.raises(IndexError):
            interceptor.next_variable()

    def test_playback_client_cached(self, store: RecordingStore) -> None:
        interceptor = RecordPlaybackInterceptor(store, TestMode.PLAYBACK)

        assert interceptor.get_playback_client() is interceptor.get_playback_client()

    def test_transport_replays_recorded_response(self, store: RecordingStore) -> None:
        store.save(
            make_recording(
                "test_get_key",
                [make_interaction("GET", "/keys/k1", body={"key": {"kid": f"{LIVE_VAULT}/keys/k1/v1"}})],
            )
        )
        interceptor = RecordPlaybackInterceptor(store, TestMode.PLAYBACK)
        interceptor.rename_test("test_get_key")
        transport = interceptor.get_playback_client()

        response = transport.send(HttpRequest("GET", f"{PLACEHOLDER}/keys/k1?api-version=7.5"))

        assert response.status_code == 200
        assert response.headers["Content-Type"] == "application/json; charset=utf-8"
        assert response.json() == {"key": {"kid": f"{PLACEHOLDER}/keys/k1/v1"}}
        assert interceptor.replayer.remaining == 0

    def test_transport_surfaces_replay_miss(self, store: RecordingStore) -> None:
        store.save(make_recording("test_get_key", [make_interaction("GET", "/keys/k1")]))
        interceptor = RecordPlaybackInterceptor(store, TestMode.PLAYBACK)
        interceptor.rename_test("test_get_key")

        with pytest.raises(ReplayMissError):
            interceptor.get_playback_client().send(HttpRequest("DELETE", f"{PLACEHOLDER}/keys/k1"))

    def test_rename_switches_recording(self, store: RecordingStore) -> None:
        store.save(make_recording("test_one", [make_interaction("GET", "/keys")]))
        store.save(make_recording("test_two", [make_interaction("GET", "/deletedkeys")]))
        interceptor = RecordPlaybackInterceptor(store, TestMode.PLAYBACK)
        transport = interceptor.get_playback_client()

        interceptor.rename_test("test_one")
        assert transport.send(HttpRequest("GET", f"{PLACEHOLDER}/keys")).status_code == 200

        interceptor.rename_test("test_two")
        assert transport.send(HttpRequest("GET", f"{PLACEHOLDER}/deletedkeys")).status_code == 200

    def test_recording_unavailable_in_live(self, store: RecordingStore) -> None:
        interceptor = RecordPlaybackInterceptor(store, TestMode.LIVE)
        interceptor.rename_test("test_live")

        with pytest.raises(RuntimeError, match="No recording is kept"):
            _ = interceptor.recording
