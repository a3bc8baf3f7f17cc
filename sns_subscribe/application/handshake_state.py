"""Single-fire completion signal shared by the handshake components."""

from __future__ import annotations

import asyncio


class HandshakeState:
    """One-shot ``pending`` -> ``completed`` transition.

    Written by the confirmation agent, awaited by the coordinator. All
    access happens on one event loop, so the flag check in ``complete`` and
    the event set cannot interleave with another completer.
    """

    def __init__(self) -> None:
        """Start in the pending state."""
        self._completed = False
        self._event = asyncio.Event()

    @property
    def completed(self) -> bool:
        return self._completed

    def complete(self) -> bool:
        """Mark the handshake completed.

        Returns:
            True for the call that performed the transition, False for any
            later call

        """
        if self._completed:
            return False
        self._completed = True
        self._event.set()
        return True

    async def wait(self, timeout: float | None = None) -> None:
        """Block until completed; returns at once if it already is.

        Raises:
            TimeoutError: When ``timeout`` elapses first

        """
        if self._completed:
            return
        if timeout is None:
            await self._event.wait()
            return
        await asyncio.wait_for(self._event.wait(), timeout=timeout)

    def __repr__(self) -> str:
        state = "completed" if self._completed else "pending"
        return f"HandshakeState({state})"
