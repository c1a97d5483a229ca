"""Opaque pagination tokens.

A token wraps the item store's last evaluated key together with a
fingerprint of the query that produced it::

    base64url(json({"v": 1, "k": {...last key...}, "f": "<fingerprint>"}))

Decoding checks the fingerprint, so a token replayed against a different
filter is rejected instead of silently resuming at an unrelated position.
"""

import base64
import binascii
import hashlib
import json
from typing import Any

from carbonflow.domain.exceptions import InvalidCursorError

CURSOR_VERSION = 1
_FINGERPRINT_LENGTH = 16


def query_fingerprint(**parts: Any) -> str:
    """Stable short digest of a query shape (index, partition, filters)."""
    canonical = json.dumps(parts, sort_keys=True, separators=(",", ":"), default=str)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()[:_FINGERPRINT_LENGTH]


def encode(last_key: dict[str, Any], fingerprint: str = "") -> str:
    """Serialise a last-evaluated key into a URL-safe token.

    Raises ``TypeError`` for keys that are not JSON-serialisable; that is a
    programming error, not a client error.
    """
    payload = {"v": CURSOR_VERSION, "k": last_key, "f": fingerprint}
    raw = json.dumps(payload, sort_keys=True, separators=(",", ":")).encode("utf-8")
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


def decode(token: str, fingerprint: str | None = None) -> dict[str, str]:
    """Recover the last-evaluated key from ``token``.

    When ``fingerprint`` is given it must match the one embedded at encode time.
    """
    if not token:
        raise InvalidCursorError("empty token")
    try:
        padded = token + "=" * (-len(token) % 4)
        raw = base64.urlsafe_b64decode(padded.encode("ascii"))
        payload = json.loads(raw.decode("utf-8"))
    except (UnicodeError, binascii.Error, ValueError) as exc:
        raise InvalidCursorError("not a pagination token") from exc

    if not isinstance(payload, dict) or payload.get("v") != CURSOR_VERSION:
        raise InvalidCursorError("unsupported token format")

    last_key = payload.get("k")
    if (
        not isinstance(last_key, dict)
        or not last_key
        or not all(isinstance(k, str) and isinstance(v, str) for k, v in last_key.items())
        or "pk" not in last_key
    ):
        raise InvalidCursorError("token does not carry a resume position")

    if fingerprint is not None and payload.get("f") != fingerprint:
        raise InvalidCursorError("token was issued for a different query")
    return last_key
