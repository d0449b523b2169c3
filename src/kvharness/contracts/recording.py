"""Recorded interaction types.

A recording is one JSON document per test:

    {
        "test_name": "test_get_single_key",
        "variables": ["0f6c..."],
        "interactions": [
            {
                "signature": "POST /keys/0f6c.../create",
                "request_hash": "9a1e...",
                "request": {"method": "POST", "url": "...", "headers": {...}, "body": "..."},
                "response": {"status_code": 200, "reason": "OK", "headers": {...},
                             "body": "...", "body_encoding": "utf-8"}
            }
        ]
    }

Interactions are stored in the order they completed. Playback consumes them
in that same order.
"""

from __future__ import annotations

import base64
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True, slots=True)
class RecordedRequest:
    """Redacted request as written to a recording."""

    method: str
    url: str
    headers: dict[str, str]
    body: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"method": self.method, "url": self.url, "headers": dict(self.headers), "body": self.body}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RecordedRequest:
        # Recording files are our own data - missing keys are a bug, let them raise
        return cls(method=data["method"], url=data["url"], headers=dict(data["headers"]), body=data["body"])


@dataclass(frozen=True, slots=True)
class RecordedResponse:
    """Redacted response as written to a recording.

    Bodies that are valid UTF-8 are stored as text so recordings stay
    reviewable; anything else is stored base64-encoded.
    """

    status_code: int
    reason: str
    headers: dict[str, str]
    body: str | None = None
    body_encoding: str = "utf-8"

    @classmethod
    def from_bytes(cls, status_code: int, reason: str, headers: dict[str, str], content: bytes | None) -> RecordedResponse:
        if content is None:
            return cls(status_code=status_code, reason=reason, headers=headers)
        try:
            return cls(status_code=status_code, reason=reason, headers=headers, body=content.decode("utf-8"))
        except UnicodeDecodeError:
            return cls(
                status_code=status_code,
                reason=reason,
                headers=headers,
                body=base64.b64encode(content).decode("ascii"),
                body_encoding="base64",
            )

    def content(self) -> bytes:
        """Response body exactly as it should be handed back in playback."""
        if self.body is None:
            return b""
        if self.body_encoding == "base64":
            return base64.b64decode(self.body)
        return self.body.encode("utf-8")

    def to_dict(self) -> dict[str, Any]:
        return {
            "status_code": self.status_code,
            "reason": self.reason,
            "headers": dict(self.headers),
            "body": self.body,
            "body_encoding": self.body_encoding,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RecordedResponse:
        return cls(
            status_code=data["status_code"],
            reason=data["reason"],
            headers=dict(data["headers"]),
            body=data["body"],
            body_encoding=data["body_encoding"],
        )


@dataclass(frozen=True, slots=True)
class Interaction:
    """One request/response pair.

    Attributes:
        signature: Canonical request signature ("METHOD /path")
        request_hash: Stable hash of the signature (integrity check on load)
        request: Redacted request
        response: Redacted response
    """

    signature: str
    request_hash: str
    request: RecordedRequest
    response: RecordedResponse

    def to_dict(self) -> dict[str, Any]:
        return {
            "signature": self.signature,
            "request_hash": self.request_hash,
            "request": self.request.to_dict(),
            "response": self.response.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Interaction:
        return cls(
            signature=data["signature"],
            request_hash=data["request_hash"],
            request=RecordedRequest.from_dict(data["request"]),
            response=RecordedResponse.from_dict(data["response"]),
        )


@dataclass
class Recording:
    """Everything captured for a single named test.

    Mutable while recording; treated as read-only once loaded for playback.
    """

    test_name: str
    variables: list[str] = field(default_factory=list)
    interactions: list[Interaction] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "test_name": self.test_name,
            "variables": list(self.variables),
            "interactions": [i.to_dict() for i in self.interactions],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Recording:
        return cls(
            test_name=data["test_name"],
            variables=list(data["variables"]),
            interactions=[Interaction.from_dict(i) for i in data["interactions"]],
        )
