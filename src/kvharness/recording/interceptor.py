# src/kvharness/recording/interceptor.py
"""Record/playback interceptor plugged into the Azure SDK pipeline.

Two seams of azure-core are used, both public:

- Record: a SansIOHTTPPolicy passed to the client as a per-retry policy.
  It sits after the RetryPolicy and before Key Vault's challenge
  authentication policy, so it sees every attempt exactly once, before an
  Authorization header exists, and sees the final response after any 401
  challenge round-trip has been handled.
- Playback: a RequestsTransport whose requests.Session has an adapter
  mounted that answers from the recording instead of opening sockets.
  azure-core wraps the canned requests.Response exactly as it wraps a real
  one, so the SDK cannot tell the difference.

The interceptor is keyed by test name: rename_test() switches which
recording subsequent requests are written to or replayed from.
"""

from __future__ import annotations

import io
from typing import TYPE_CHECKING, Any

import requests
from azure.core.exceptions import ResponseNotReadError
from azure.core.pipeline.policies import SansIOHTTPPolicy
from azure.core.pipeline.transport import RequestsTransport
from azure.core.rest import HttpRequest as RestHttpRequest
from azure.core.rest import HttpResponse as RestHttpResponse
from requests.adapters import BaseAdapter
from requests.structures import CaseInsensitiveDict
from requests.utils import get_encoding_from_headers

from kvharness.contracts.enums import TestMode
from kvharness.contracts.recording import Interaction, RecordedRequest, RecordedResponse, Recording
from kvharness.core.logging import get_logger
from kvharness.core.redaction import filter_headers, redact_text, redact_url, request_signature
from kvharness.recording.replayer import InteractionReplayer
from kvharness.recording.store import RecordingStore, signature_hash

if TYPE_CHECKING:
    from azure.core.pipeline import PipelineRequest, PipelineResponse

logger = get_logger(__name__)

# The recorded body is already decoded and redacted, so these no longer
# describe it. Content-Length is recomputed from the redacted body.
_STALE_RESPONSE_HEADERS = frozenset({"content-encoding", "transfer-encoding", "content-length"})


def _redact_body(content: bytes | None) -> bytes | None:
    if content is None:
        return None
    try:
        return redact_text(content.decode("utf-8")).encode("utf-8")
    except UnicodeDecodeError:
        return content


def _request_body(http_request: Any) -> str | None:
    """Request body as text, or None for empty/streamed bodies."""
    body = http_request.content if isinstance(http_request, RestHttpRequest) else http_request.body
    if body is None:
        return None
    if isinstance(body, bytes):
        body = body.decode("utf-8", errors="replace")
    if not isinstance(body, str) or body == "":
        return None
    return redact_text(body)


def _response_content(http_response: Any) -> bytes | None:
    """Response body bytes, or None when the response was streamed and not read."""
    try:
        if isinstance(http_response, RestHttpResponse):
            return http_response.content
        content: bytes = http_response.body()
        return content
    except ResponseNotReadError:
        return None


def build_interaction(
    *,
    method: str,
    url: str,
    request_headers: dict[str, str],
    request_body: str | None,
    status_code: int,
    reason: str,
    response_headers: dict[str, str],
    content: bytes | None,
) -> Interaction:
    """Assemble a redacted Interaction from raw request/response parts."""
    body = _redact_body(content)
    headers = {k: v for k, v in filter_headers(response_headers).items() if k.lower() not in _STALE_RESPONSE_HEADERS}
    headers["Content-Length"] = str(len(body) if body is not None else 0)

    signature = request_signature(method, url)
    return Interaction(
        signature=signature,
        request_hash=signature_hash(signature),
        request=RecordedRequest(
            method=method.upper(),
            url=redact_url(url),
            headers=filter_headers(request_headers),
            body=request_body,
        ),
        response=RecordedResponse.from_bytes(status_code, reason or "", headers, body),
    )


class RecordPolicy(SansIOHTTPPolicy):  # type: ignore[type-arg]
    """Per-retry pipeline policy that records every completed interaction."""

    def __init__(self, interceptor: RecordPlaybackInterceptor) -> None:
        self._interceptor = interceptor

    def on_response(self, request: PipelineRequest[Any], response: PipelineResponse[Any, Any]) -> None:
        http_request = request.http_request
        http_response = response.http_response
        interaction = build_interaction(
            method=http_request.method,
            url=http_request.url,
            request_headers=dict(http_request.headers),
            request_body=_request_body(http_request),
            status_code=http_response.status_code,
            reason=http_response.reason,
            response_headers=dict(http_response.headers),
            content=_response_content(http_response),
        )
        self._interceptor.record(interaction)


class PlaybackAdapter(BaseAdapter):
    """requests transport adapter answering from the active recording."""

    def __init__(self, interceptor: RecordPlaybackInterceptor) -> None:
        super().__init__()
        self._interceptor = interceptor

    def send(
        self,
        request: requests.PreparedRequest,
        stream: bool = False,
        timeout: Any = None,
        verify: Any = True,
        cert: Any = None,
        proxies: Any = None,
    ) -> requests.Response:
        method = request.method or "GET"
        url = request.url or ""
        interaction = self._interceptor.replayer.replay(method, url)
        recorded = interaction.response
        body = recorded.content()

        response = requests.Response()
        response.status_code = recorded.status_code
        response.reason = recorded.reason
        response.headers = CaseInsensitiveDict(recorded.headers)
        response.encoding = get_encoding_from_headers(response.headers)
        response.url = url
        response.request = request
        response.raw = io.BytesIO(body)
        # Mark the body as already read so neither requests nor azure-core
        # touch raw again
        response._content = body
        response._content_consumed = True
        response.connection = self
        return response

    def close(self) -> None:
        pass


class RecordPlaybackInterceptor:
    """Routes a test's HTTP traffic to or from its recording.

    Example:
        interceptor = RecordPlaybackInterceptor(RecordingStore(path), TestMode.PLAYBACK)
        interceptor.rename_test("test_get_single_key")
        client = KeyClient(vault_url, credential, transport=interceptor.get_playback_client())

    get_playback_client() and get_record_policy() create their object once
    and return the same instance on every later call, so bindings built
    from the same interceptor compare equal.
    """

    def __init__(self, store: RecordingStore, mode: TestMode) -> None:
        self._store = store
        self._mode = mode
        self._test_name: str | None = None
        self._recording: Recording | None = None
        self._replayer: InteractionReplayer | None = None
        self._variable_position = 0
        self._playback_client: RequestsTransport | None = None
        self._record_policy: RecordPolicy | None = None

    @property
    def mode(self) -> TestMode:
        return self._mode

    @property
    def store(self) -> RecordingStore:
        return self._store

    @property
    def test_name(self) -> str:
        if self._test_name is None:
            raise RuntimeError("rename_test() must be called before the first request of a test")
        return self._test_name

    def rename_test(self, test_name: str) -> None:
        """Key all following interactions to test_name.

        In record mode this starts a fresh recording for the test. In
        playback the recording is loaded lazily on first use, so renaming
        to a test that has no recording only fails once it sends a request.
        """
        self._test_name = test_name
        self._replayer = None
        self._variable_position = 0
        self._recording = Recording(test_name=test_name) if self._mode is TestMode.RECORD else None

    @property
    def recording(self) -> Recording:
        """The active test's recording.

        Raises:
            RecordingNotFoundError: In playback, if the test has no recording
        """
        if self._recording is None:
            if self._mode is not TestMode.PLAYBACK:
                raise RuntimeError(f"No recording is kept in {self._mode} mode")
            self._recording = self._store.load(self.test_name)
        return self._recording

    @property
    def replayer(self) -> InteractionReplayer:
        if self._replayer is None:
            self._replayer = InteractionReplayer(self.recording)
        return self._replayer

    def has_recording(self) -> bool:
        return self._store.exists(self.test_name)

    def record(self, interaction: Interaction) -> None:
        """Append an interaction and persist the recording immediately."""
        recording = self.recording
        recording.interactions.append(interaction)
        self._store.save(recording)
        logger.debug(
            "interaction_recorded",
            test_name=recording.test_name,
            signature=interaction.signature,
            status_code=interaction.response.status_code,
        )

    def record_variable(self, value: str) -> None:
        """Remember a generated value so playback can return it again."""
        recording = self.recording
        recording.variables.append(value)
        self._store.save(recording)

    def next_variable(self) -> str:
        """Return the next recorded variable (playback only).

        Raises:
            IndexError: If the recording has no more variables
        """
        variables = self.recording.variables
        if self._variable_position >= len(variables):
            raise IndexError(f"Recording '{self.test_name}' has only {len(variables)} recorded variable(s)")
        value = variables[self._variable_position]
        self._variable_position += 1
        return value

    def flush(self) -> None:
        """Persist the active recording (record mode only).

        Writes even when no interaction was captured, so playback of a test
        that makes no requests still finds its file.
        """
        if self._mode is TestMode.RECORD and self._recording is not None:
            self._store.save(self._recording)

    def get_playback_client(self) -> RequestsTransport:
        """Transport that replays the active recording instead of using the network."""
        if self._playback_client is None:
            session = requests.Session()
            adapter = PlaybackAdapter(self)
            session.mount("https://", adapter)
            session.mount("http://", adapter)
            self._playback_client = RequestsTransport(session=session, session_owner=False)
        return self._playback_client

    def get_record_policy(self) -> RecordPolicy:
        """Per-retry policy writing every completed interaction to the store."""
        if self._record_policy is None:
            self._record_policy = RecordPolicy(self)
        return self._record_policy
