"""FastAPI listener receiving the SNS subscription confirmation callback."""

from __future__ import annotations

import asyncio
import contextlib
import logging
import socket
from typing import TYPE_CHECKING

from fastapi import FastAPI, HTTPException, Request, status
from pydantic import ValidationError
import uvicorn

from sns_subscribe.domain.models import (
    CallbackServerError,
    ConfirmationError,
    InboundNotification,
)

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    ConfirmCallback = Callable[[str], Awaitable[bool]]

logger = logging.getLogger(__name__)

DEFAULT_BACKLOG = 128


def create_app(path: str, on_confirmation: ConfirmCallback) -> FastAPI:
    """Create an app exposing a single POST route at ``path``.

    Any other method on the route is answered with 405 before the body is
    read. Malformed bodies get a 400 and leave the listener running.
    """
    if "{" in path or "}" in path:
        msg = f"callback path must be literal, got {path!r}"
        raise ValueError(msg)
    app = FastAPI(
        title="SNS Subscription Callback",
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )

    async def receive_notification(request: Request) -> dict[str, str]:
        body = await request.body()
        try:
            notification = InboundNotification.model_validate_json(body)
        except ValidationError as exc:
            logger.warning(
                "callback_rejected",
                extra={
                    "path": request.url.path,
                    "errors": [err["msg"] for err in exc.errors()],
                },
            )
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Malformed notification body",
            ) from exc

        if not notification.is_subscription_confirmation:
            logger.info(
                "callback_ignored",
                extra={
                    "type": notification.type,
                    "message_id": notification.message_id,
                },
            )
            return {"status": "ignored"}

        logger.info(
            "subscription_confirmation_received",
            extra={
                "topic_arn": notification.topic_arn,
                "message_id": notification.message_id,
            },
        )
        try:
            await on_confirmation(notification.subscribe_url or "")
        except ConfirmationError as exc:
            raise HTTPException(
                status_code=status.HTTP_502_BAD_GATEWAY,
                detail=str(exc),
            ) from exc
        return {"status": "confirmed"}

    app.add_api_route(path, receive_notification, methods=["POST"])
    return app


class CallbackServer:
    """Uvicorn-served callback listener bound before it is started.

    ``start`` binds and listens on the socket synchronously, then hands it
    to uvicorn's serve loop in a background task. Connections arriving
    before the accept loop runs wait in the listen backlog.
    """

    def __init__(
        self,
        path: str,
        on_confirmation: ConfirmCallback,
        *,
        host: str = "0.0.0.0",  # nosec B104 - must be reachable by the provider
        port: int = 80,
        backlog: int = DEFAULT_BACKLOG,
    ) -> None:
        """Build the per-instance app; nothing is bound yet."""
        self.path = path
        self.host = host
        self.app = create_app(path, on_confirmation)
        self._requested_port = port
        self._backlog = backlog
        self._socket: socket.socket | None = None
        self._bound_port: int | None = None
        self._server: uvicorn.Server | None = None
        self._task: asyncio.Task[None] | None = None

    @property
    def port(self) -> int:
        """Bound port (resolves port 0 after ``start``)."""
        return self._bound_port or self._requested_port

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        """Bind the listener and launch the serve loop."""
        if self._task is not None:
            msg = "callback server already started"
            raise CallbackServerError(msg)
        self._socket = self._bind()
        self._bound_port = self._socket.getsockname()[1]
        config = uvicorn.Config(
            self.app,
            lifespan="off",
            log_config=None,
            server_header=False,
            backlog=self._backlog,
        )
        self._server = uvicorn.Server(config)
        self._task = asyncio.create_task(
            self._server.serve(sockets=[self._socket]),
            name="callback-server",
        )
        logger.info(
            "callback_server_listening",
            extra={"host": self.host, "port": self.port, "path": self.path},
        )

    async def wait_closed(self) -> None:
        """Wait for the serve loop to exit without cancelling it."""
        if self._task is not None:
            await asyncio.shield(self._task)

    async def stop(self) -> None:
        """Request graceful shutdown and wait for the serve loop."""
        port = self.port
        if self._server is not None:
            self._server.should_exit = True
        if self._task is not None:
            try:
                with contextlib.suppress(asyncio.CancelledError):
                    await self._task
            except Exception:
                logger.exception("callback_server_failed", extra={"port": port})
        if self._socket is not None:
            self._socket.close()
        logger.info("callback_server_stopped", extra={"port": port})

    def _bind(self) -> socket.socket:
        family = socket.AF_INET6 if ":" in self.host else socket.AF_INET
        sock = socket.socket(family, socket.SOCK_STREAM)
        try:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            sock.bind((self.host, self._requested_port))
            sock.listen(self._backlog)
            sock.setblocking(False)
        except OSError as exc:
            sock.close()
            msg = f"cannot listen on {self.host}:{self._requested_port}: {exc}"
            raise CallbackServerError(msg) from exc
        return sock
