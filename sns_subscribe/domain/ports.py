"""Domain ports (interfaces) for the subscription handshake.

The coordinator only talks to the remote topic service through this port,
so tests and alternative providers can be plugged in without touching the
handshake logic.
"""

from abc import ABC, abstractmethod


class TopicServicePort(ABC):
    """Port for the remote publish/subscribe topic service."""

    @abstractmethod
    async def subscribe(self, topic: str, endpoint: str, protocol: str) -> str | None:
        """Ask the provider to subscribe an endpoint to a topic.

        Args:
            topic: Provider resource identifier of the topic
            endpoint: Full URL the provider will deliver messages to
            protocol: Delivery protocol (``http`` or ``https``)

        Returns:
            Subscription identifier reported by the provider, if any

        Raises:
            TopicServiceError: When the provider rejects the request

        """
