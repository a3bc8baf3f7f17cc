"""AWS SNS adapter implementing the topic service port."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from sns_subscribe.domain.models import TopicServiceError
from sns_subscribe.domain.ports import TopicServicePort

logger = logging.getLogger(__name__)


class SNSTopicService(TopicServicePort):
    """Subscribe endpoints to SNS topics through boto3.

    boto3 is blocking, so calls are pushed to a worker thread to keep the
    callback listener responsive on the event loop.
    """

    def __init__(
        self,
        region: str,
        *,
        endpoint_url: str | None = None,
        client: Any | None = None,
    ) -> None:
        """Create a regional SNS client (or reuse the one provided)."""
        self.region = region
        if client is not None:
            self._client = client
            return
        try:
            session = boto3.session.Session(region_name=region)
            self._client = session.client("sns", endpoint_url=endpoint_url or None)
        except (BotoCoreError, ValueError) as exc:
            msg = f"failed to create SNS client for region {region!r}: {exc}"
            raise TopicServiceError(msg) from exc

    async def subscribe(self, topic: str, endpoint: str, protocol: str) -> str | None:
        """Issue ``sns:Subscribe`` for the endpoint."""
        logger.info(
            "sns_subscribe_request",
            extra={"topic": topic, "endpoint": endpoint, "protocol": protocol},
        )
        try:
            response = await asyncio.to_thread(
                self._client.subscribe,
                TopicArn=topic,
                Protocol=protocol,
                Endpoint=endpoint,
            )
        except ClientError as exc:
            error = exc.response.get("Error", {})
            code = error.get("Code", "Unknown")
            message = error.get("Message", str(exc))
            msg = f"SNS subscribe failed ({code}): {message}"
            raise TopicServiceError(msg) from exc
        except BotoCoreError as exc:
            msg = f"SNS subscribe failed: {exc}"
            raise TopicServiceError(msg) from exc

        subscription_arn = response.get("SubscriptionArn")
        logger.info(
            "sns_subscribe_accepted",
            extra={"topic": topic, "subscription_arn": subscription_arn},
        )
        return subscription_arn
