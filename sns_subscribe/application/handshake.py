"""Subscription handshake orchestration.

The coordinator owns one subscribe invocation end to end: it binds the
callback listener, asks the topic service to subscribe the endpoint and then
waits for the confirmation agent to complete the handshake.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import TYPE_CHECKING

from sns_subscribe.application.confirmation import ConfirmationAgent
from sns_subscribe.application.handshake_state import HandshakeState
from sns_subscribe.config import AppSettings, get_settings
from sns_subscribe.domain.models import (
    CallbackServerError,
    HandshakeError,
    HandshakeTimeoutError,
    SubscriptionRequest,
    SubscriptionResult,
    TopicServiceError,
)
from sns_subscribe.infrastructure.http.callback_server import CallbackServer
from sns_subscribe.infrastructure.sns_topic_service import SNSTopicService

if TYPE_CHECKING:
    from collections.abc import Callable

    import httpx

    from sns_subscribe.domain.ports import TopicServicePort

    TopicServiceFactory = Callable[[str], TopicServicePort]

logger = logging.getLogger(__name__)


class HandshakeCoordinator:
    """Run the subscribe -> callback -> confirm handshake once."""

    def __init__(
        self,
        settings: AppSettings | None = None,
        *,
        topic_service_factory: TopicServiceFactory | None = None,
        confirmation_transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Wire collaborators; defaults talk to AWS SNS over boto3."""
        self.settings = settings or get_settings()
        self._topic_service_factory = topic_service_factory or self._default_factory
        self._confirmation_transport = confirmation_transport
        self.state: HandshakeState | None = None
        self.agent: ConfirmationAgent | None = None
        self.server: CallbackServer | None = None

    def _default_factory(self, region: str) -> TopicServicePort:
        return SNSTopicService(region, endpoint_url=self.settings.aws_endpoint_url)

    async def run(
        self,
        request: SubscriptionRequest,
        *,
        timeout: float | None = None,
    ) -> SubscriptionResult:
        """Subscribe ``request.endpoint`` and block until it is confirmed.

        Args:
            request: Parameters of this subscribe invocation
            timeout: Seconds to wait for the confirmation callback; falls
                back to ``handshake_timeout_seconds`` and waits forever when
                both are unset

        Returns:
            SubscriptionResult describing the confirmed subscription

        Raises:
            HandshakeError: On any failure that aborts the handshake

        """
        protocol = request.protocol
        path = request.route_path
        wait_timeout = (
            timeout if timeout is not None else self.settings.handshake_timeout_seconds
        )

        try:
            topic_service = self._topic_service_factory(request.region)
        except HandshakeError:
            raise
        except Exception as exc:
            msg = f"failed to create topic service for region {request.region!r}: {exc}"
            raise TopicServiceError(msg) from exc

        self.state = HandshakeState()
        self.agent = ConfirmationAgent(
            self.state,
            timeout=self.settings.confirmation_timeout_seconds,
            transport=self._confirmation_transport,
        )
        self.server = CallbackServer(
            path,
            self.agent.confirm,
            host=request.host,
            port=request.port,
        )

        # Listener must be bound before the provider learns about the endpoint.
        await self.server.start()
        try:
            try:
                subscription_arn = await topic_service.subscribe(
                    request.topic, request.endpoint, protocol
                )
            except HandshakeError:
                raise
            except Exception as exc:
                msg = f"subscribe request failed: {exc}"
                raise TopicServiceError(msg) from exc

            logger.info(
                "awaiting_subscription_confirmation",
                extra={
                    "topic": request.topic,
                    "endpoint": request.endpoint,
                    "timeout": wait_timeout,
                },
            )
            await self._await_completion(self.state, self.server, wait_timeout)
        except HandshakeError as exc:
            logger.error(
                "subscription_handshake_failed",
                extra={"topic": request.topic, "error": str(exc)},
            )
            raise
        finally:
            await self.server.stop()

        logger.info(
            "subscription_handshake_completed",
            extra={"topic": request.topic, "endpoint": request.endpoint},
        )
        return SubscriptionResult(
            topic=request.topic,
            endpoint=request.endpoint,
            subscription_arn=subscription_arn,
            confirmed=self.state.completed,
        )

    async def _await_completion(
        self,
        state: HandshakeState,
        server: CallbackServer,
        timeout: float | None,
    ) -> None:
        completion = asyncio.create_task(state.wait(), name="handshake-wait")
        listener = asyncio.create_task(server.wait_closed(), name="listener-watch")
        try:
            done, _ = await asyncio.wait(
                {completion, listener},
                timeout=timeout,
                return_when=asyncio.FIRST_COMPLETED,
            )
        finally:
            for task in (completion, listener):
                if not task.done():
                    task.cancel()
                    with contextlib.suppress(asyncio.CancelledError):
                        await task

        failure = listener.exception() if listener in done else None
        if state.completed:
            return
        if listener in done:
            msg = "callback listener exited before the subscription was confirmed"
            raise CallbackServerError(msg) from failure
        raise HandshakeTimeoutError(timeout or 0.0)
