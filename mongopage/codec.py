"""
Opaque cursor tokens.

CursorCodec turns the plain key values of a boundary document into a string
token and back. With a secret the token is a JWT signed by python-jose, so
clients can neither forge nor read-modify-write it; without one it is the
URL-safe base64 of the JSON payload.

Decoding never raises: it returns a DecodedCursor tagged DECODED, ABSENT or
INVALID. Expired, corrupted, foreign-secret and mismatched-configuration
tokens are all INVALID and are treated as "no usable cursor".
"""

import base64
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

from jose import jwt
from jose.exceptions import JOSEError
from pydantic import BaseModel, ValidationError

from ._logging import logger
from .exceptions import CursorDecodeError, CursorSerializationError
from .serializer import CursorSerializer

TOKEN_VERSION = 1


class CursorPayload(BaseModel):
    """Token payload - versioned for future compatibility."""

    v: int = TOKEN_VERSION
    k: str = ""  # Ordering configuration fingerprint
    p: dict[str, Any]  # Key values of the boundary document


class CursorStatus(str, Enum):
    DECODED = "decoded"
    ABSENT = "absent"
    INVALID = "invalid"


@dataclass(frozen=True)
class DecodedCursor:
    """Outcome of decoding one cursor token."""

    status: CursorStatus
    values: dict[str, Any] | None = None
    reason: str | None = None

    @property
    def is_decoded(self) -> bool:
        return self.status is CursorStatus.DECODED

    @classmethod
    def absent(cls) -> "DecodedCursor":
        return cls(CursorStatus.ABSENT)

    @classmethod
    def invalid(cls, reason: str) -> "DecodedCursor":
        return cls(CursorStatus.INVALID, reason=reason)


class CursorCodec:
    """
    Encodes and decodes cursor tokens.

    Args:
        secret: Shared signing secret. None or "" selects plain tokens.
        algorithm: JWS algorithm used when a secret is configured
    """

    def __init__(self, secret: str | None = None, algorithm: str = "HS256") -> None:
        self.secret = secret or None
        self.algorithm = algorithm
        self.serializer = CursorSerializer()

    @property
    def signed(self) -> bool:
        return self.secret is not None

    def encode(self, values: Mapping[str, Any], fingerprint: str = "") -> str | None:
        """
        Encodes key values into an opaque token.

        Args:
            values: {field: value} map of the boundary document's keys
            fingerprint: Ordering configuration fingerprint embedded in the token

        Returns:
            The token, or None if the values could not be serialized
        """
        try:
            payload = CursorPayload(k=fingerprint, p=self.serializer.to_plain(dict(values)))
            if self.secret is not None:
                return jwt.encode(payload.model_dump(), self.secret, algorithm=self.algorithm)
            raw = payload.model_dump_json().encode("utf-8")
            return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")
        except (CursorSerializationError, JOSEError, TypeError, ValueError) as e:
            logger.warning(
                "Failed to encode cursor",
                extra={"signed": self.signed, "error_type": type(e).__name__},
            )
            return None

    def decode(self, token: str | None, fingerprint: str | None = None) -> DecodedCursor:
        """
        Decodes a token produced by encode().

        Args:
            token: The token, or None/"" when the request carried no cursor
            fingerprint: When given, tokens carrying a different fingerprint are INVALID

        Returns:
            DecodedCursor tagged DECODED (with values), ABSENT or INVALID
        """
        if not token:
            return DecodedCursor.absent()

        try:
            payload = self._parse(token)
        except CursorDecodeError as e:
            return DecodedCursor.invalid(e.message)

        if payload.v != TOKEN_VERSION:
            return DecodedCursor.invalid(f"unsupported token version {payload.v}")
        if fingerprint is not None and payload.k != fingerprint:
            return DecodedCursor.invalid("token was issued for a different ordering")

        return DecodedCursor(CursorStatus.DECODED, values=dict(payload.p))

    def _parse(self, token: str) -> CursorPayload:
        """
        Verifies and parses a token.

        Raises:
            CursorDecodeError: On any verification, encoding or schema failure
        """
        try:
            if self.secret is not None:
                claims = jwt.decode(token, self.secret, algorithms=[self.algorithm])
                return CursorPayload.model_validate(claims)
            padded = token + "=" * (-len(token) % 4)
            raw = base64.urlsafe_b64decode(padded.encode("ascii"))
            return CursorPayload.model_validate_json(raw)
        except JOSEError as e:
            raise CursorDecodeError(f"Token verification failed: {e}", original_error=e) from e
        except ValidationError as e:
            raise CursorDecodeError("Token payload has an invalid shape", original_error=e) from e
        except (TypeError, ValueError) as e:
            raise CursorDecodeError(f"Token is not decodable: {e}", original_error=e) from e
