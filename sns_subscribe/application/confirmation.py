"""Confirmation step of the SNS subscription handshake."""

from __future__ import annotations

import asyncio
import logging

import httpx

from sns_subscribe.application.handshake_state import HandshakeState
from sns_subscribe.domain.models import ConfirmationError

logger = logging.getLogger(__name__)


class ConfirmationAgent:
    """GET the one-time SubscribeURL and signal completion.

    Safe to call repeatedly: once the handshake has completed, further
    calls return without issuing a request. A failed request leaves the
    state pending so a redelivered callback can try again.
    """

    def __init__(
        self,
        state: HandshakeState,
        *,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Bind the agent to the handshake state it completes."""
        self._state = state
        self._timeout = timeout
        self._transport = transport
        self._lock = asyncio.Lock()
        self.attempts = 0

    @property
    def state(self) -> HandshakeState:
        return self._state

    async def confirm(self, url: str) -> bool:
        """Confirm the subscription through ``url``.

        Returns:
            True once the handshake is completed (now or earlier)

        Raises:
            ConfirmationError: When the request fails or the provider
                answers with an error status

        """
        async with self._lock:
            if self._state.completed:
                logger.info("subscription_already_confirmed")
                return True

            self.attempts += 1
            try:
                async with httpx.AsyncClient(
                    timeout=self._timeout, transport=self._transport
                ) as client:
                    response = await client.get(url)
                response.raise_for_status()
            except httpx.HTTPStatusError as exc:
                logger.warning(
                    "subscription_confirmation_rejected",
                    extra={"status_code": exc.response.status_code},
                )
                raise ConfirmationError(
                    url, f"provider answered {exc.response.status_code}"
                ) from exc
            except httpx.InvalidURL as exc:
                logger.warning(
                    "subscription_confirmation_invalid_url",
                    extra={"error": str(exc)},
                )
                raise ConfirmationError(url, f"invalid SubscribeURL: {exc}") from exc
            except httpx.RequestError as exc:
                logger.warning(
                    "subscription_confirmation_transport_error",
                    extra={"error": str(exc)},
                )
                raise ConfirmationError(url, str(exc) or type(exc).__name__) from exc

            if self._state.complete():
                logger.info(
                    "subscription_confirmed",
                    extra={"status_code": response.status_code},
                )
            return True
