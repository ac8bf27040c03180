"""Registry binding job ids to open delivery channels."""

import asyncio
import json
import weakref
from typing import Any, Dict, Optional

from slidestream.exceptions import ChannelUnavailable
from slidestream.logger import logger
from .utils import is_websocket_closed


class ChannelRegistry:
    """Maps each job id to at most one delivery channel.

    A channel is anything with an async ``send(text)`` and a websockets-style
    open/closed state. Delivery is fire-and-forget: ``push`` hands the send to
    a background task and returns at once. Events for a job with no open
    channel are dropped, never queued or retried.
    """

    def __init__(self, push_timeout: float = 5.0):
        self.push_timeout = push_timeout
        self._channels: Dict[str, Any] = {}
        # Last send task per job; each send waits for its predecessor
        self._pending: Dict[str, asyncio.Task] = {}
        self._dead: "weakref.WeakSet[Any]" = weakref.WeakSet()

    def register(self, job_id: str, channel: Any) -> None:
        """Bind ``channel`` to ``job_id``, replacing any previous binding."""
        previous = self._channels.get(job_id)
        self._channels[job_id] = channel
        if previous is not None and previous is not channel:
            logger.info(f"Replaced delivery channel for job {job_id}")
        else:
            logger.info(f"Registered delivery channel for job {job_id}")

    def unregister(self, job_id: str, channel: Any = None) -> bool:
        """Remove the binding for ``job_id``.

        When ``channel`` is given the binding is only removed if it still
        points at that channel. Returns True when a binding was removed.
        """
        current = self._channels.get(job_id)
        if current is None:
            return False
        if channel is not None and current is not channel:
            return False
        del self._channels[job_id]
        logger.info(f"Unregistered delivery channel for job {job_id}")
        return True

    def get(self, job_id: str) -> Optional[Any]:
        return self._channels.get(job_id)

    def __contains__(self, job_id: object) -> bool:
        return job_id in self._channels

    def __len__(self) -> int:
        return len(self._channels)

    async def push(self, job_id: str, event: Dict[str, Any]) -> bool:
        """Hand ``event`` to the job's channel without waiting for the send.

        Returns True when a send was scheduled, False when the event was
        dropped because no usable channel is bound.
        """
        channel = self._channels.get(job_id)
        try:
            self._check_usable(channel)
        except ChannelUnavailable as e:
            logger.debug(f"Dropped '{event.get('type')}' event for job {job_id}: {e}")
            return False

        previous = self._pending.get(job_id)
        task = asyncio.create_task(
            self._send_after(previous, job_id, channel, event),
            name=f"push-{job_id}",
        )
        self._pending[job_id] = task
        task.add_done_callback(lambda done, job_id=job_id: self._forget(job_id, done))
        return True

    async def drain(self, timeout: Optional[float] = None) -> None:
        """Wait for every scheduled send to finish or be abandoned."""
        tasks = list(self._pending.values())
        if tasks:
            await asyncio.wait(tasks, timeout=timeout)

    def _forget(self, job_id: str, task: asyncio.Task) -> None:
        if self._pending.get(job_id) is task:
            del self._pending[job_id]

    def _check_usable(self, channel: Any) -> None:
        if channel is None:
            raise ChannelUnavailable("no channel bound")
        if channel in self._dead:
            raise ChannelUnavailable("channel stopped accepting events")
        if is_websocket_closed(channel):
            raise ChannelUnavailable("channel is not open")

    async def _send_after(
        self,
        previous: Optional[asyncio.Task],
        job_id: str,
        channel: Any,
        event: Dict[str, Any],
    ) -> None:
        if previous is not None:
            await asyncio.wait([previous])
        try:
            await self._deliver(channel, event)
        except ChannelUnavailable as e:
            logger.debug(f"Dropped '{event.get('type')}' event for job {job_id}: {e}")

    async def _deliver(self, channel: Any, event: Dict[str, Any]) -> None:
        self._check_usable(channel)

        message = json.dumps(event)
        try:
            if self.push_timeout > 0:
                await asyncio.wait_for(channel.send(message), timeout=self.push_timeout)
            else:
                await channel.send(message)
        except asyncio.TimeoutError as e:
            self._dead.add(channel)
            raise ChannelUnavailable(f"send timed out after {self.push_timeout}s") from e
        except Exception as e:
            self._dead.add(channel)
            raise ChannelUnavailable(f"send failed: {e}") from e
