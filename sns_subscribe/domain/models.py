"""Domain models for the SNS subscription handshake.

This module contains the value objects exchanged between the coordinator,
the callback listener and the confirmation agent, together with the error
types surfaced to the caller. All request models are immutable.
"""

from enum import Enum
from urllib.parse import urlsplit

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

_SUPPORTED_SCHEMES = ("http", "https")


class HandshakeError(RuntimeError):
    """Base class for errors that abort a subscription handshake."""


class EndpointURLError(HandshakeError, ValueError):
    """Raised when the endpoint URL cannot be used as a subscription target."""

    def __init__(self, endpoint: str, reason: str) -> None:
        """Record the offending endpoint and why it was rejected."""
        self.endpoint = endpoint
        self.reason = reason
        super().__init__(f"invalid endpoint {endpoint!r}: {reason}")


class TopicServiceError(HandshakeError):
    """Raised when the remote topic service cannot be reached or refuses."""


class CallbackServerError(HandshakeError):
    """Raised when the callback listener cannot be started."""


class ConfirmationError(HandshakeError):
    """Raised when the confirmation request to the SubscribeURL fails."""

    def __init__(self, url: str, detail: str) -> None:
        """Capture the confirmation URL and failure detail."""
        self.url = url
        self.detail = detail
        super().__init__(f"confirmation request failed: {detail}")


class HandshakeTimeoutError(HandshakeError, TimeoutError):
    """Raised when no confirmation callback arrives in time."""

    def __init__(self, timeout: float) -> None:
        """Store the timeout that elapsed."""
        self.timeout = timeout
        super().__init__(f"no confirmation received within {timeout}s")


class NotificationType(str, Enum):
    """Message types delivered by SNS to HTTP(S) endpoints."""

    SUBSCRIPTION_CONFIRMATION = "SubscriptionConfirmation"
    NOTIFICATION = "Notification"
    UNSUBSCRIBE_CONFIRMATION = "UnsubscribeConfirmation"
    UNKNOWN = "Unknown"


class SubscriptionRequest(BaseModel):
    """Immutable parameters of one subscribe invocation."""

    model_config = ConfigDict(frozen=True)

    region: str = Field(..., description="Provider region for the topic service")
    topic: str = Field(..., description="Opaque topic identifier (e.g. topic ARN)")
    endpoint: str = Field(..., description="Full URL the provider will call back")
    port: int = Field(default=80, ge=0, le=65535, description="Listener port")
    host: str = Field(
        default="0.0.0.0",  # nosec B104 - the provider must reach the listener
        description="Listener bind address",
    )

    @field_validator("region", "topic", "endpoint")
    @classmethod
    def _require_value(cls, v: str) -> str:
        v = v.strip()
        if not v:
            msg = "value must not be empty"
            raise ValueError(msg)
        return v

    @property
    def protocol(self) -> str:
        """Subscription protocol derived from the endpoint scheme."""
        return self._split()[0]

    @property
    def route_path(self) -> str:
        """Path the callback listener is routed on."""
        return self._split()[1]

    def _split(self) -> tuple[str, str]:
        try:
            parts = urlsplit(self.endpoint)
        except ValueError as exc:
            raise EndpointURLError(self.endpoint, str(exc)) from exc
        scheme = parts.scheme.lower()
        if scheme not in _SUPPORTED_SCHEMES:
            raise EndpointURLError(
                self.endpoint, f"scheme must be one of {list(_SUPPORTED_SCHEMES)}"
            )
        if not parts.hostname:
            raise EndpointURLError(self.endpoint, "missing host")
        if "{" in parts.path or "}" in parts.path:
            raise EndpointURLError(self.endpoint, "path must not contain braces")
        return scheme, parts.path or "/"


class InboundNotification(BaseModel):
    """JSON document POSTed by SNS to the subscribed endpoint.

    Only ``Type`` is mandatory. ``SubscribeURL`` must be present when the
    message is a subscription confirmation. Unrecognised ``Type`` values are
    accepted and reported as ``NotificationType.UNKNOWN``.
    """

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    type: str = Field(..., alias="Type", description="Message type discriminator")
    subscribe_url: str | None = Field(default=None, alias="SubscribeURL")
    message_id: str | None = Field(default=None, alias="MessageId")
    topic_arn: str | None = Field(default=None, alias="TopicArn")
    token: str | None = Field(default=None, alias="Token")
    message: str | None = Field(default=None, alias="Message")
    timestamp: str | None = Field(default=None, alias="Timestamp")

    @model_validator(mode="after")
    def _require_subscribe_url(self) -> "InboundNotification":
        if self.kind is not NotificationType.SUBSCRIPTION_CONFIRMATION:
            return self
        if not (self.subscribe_url and self.subscribe_url.strip()):
            msg = "SubscriptionConfirmation message without SubscribeURL"
            raise ValueError(msg)
        try:
            parts = urlsplit(self.subscribe_url.strip())
        except ValueError as exc:
            msg = f"SubscribeURL is not a valid URL: {exc}"
            raise ValueError(msg) from exc
        if parts.scheme.lower() not in _SUPPORTED_SCHEMES or not parts.hostname:
            msg = "SubscribeURL must be an absolute http(s) URL"
            raise ValueError(msg)
        return self

    @property
    def kind(self) -> NotificationType:
        """Return the message type, falling back to UNKNOWN."""
        try:
            return NotificationType(self.type)
        except ValueError:
            return NotificationType.UNKNOWN

    @property
    def is_subscription_confirmation(self) -> bool:
        return self.kind is NotificationType.SUBSCRIPTION_CONFIRMATION


class SubscriptionResult(BaseModel):
    """Outcome of a completed handshake."""

    model_config = ConfigDict(frozen=True)

    topic: str
    endpoint: str
    subscription_arn: str | None = None
    confirmed: bool = True

    def __str__(self) -> str:
        """Return string representation of the result."""
        status = "confirmed" if self.confirmed else "pending"
        return f"Subscription({self.endpoint} -> {self.topic} [{status}])"
