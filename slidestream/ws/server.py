"""WebSocket server that binds client connections to running jobs."""

import asyncio
import contextlib
from typing import Optional
from urllib.parse import parse_qs, urlsplit

from websockets.asyncio.server import Server, ServerConnection, serve
from websockets.exceptions import ConnectionClosed, WebSocketException

from slidestream.jobs import STREAM_PATH, JobSupervisor
from slidestream.logger import logger
from .registry import ChannelRegistry
from .utils import close_websocket_safely, get_websocket_info

# Close codes
POLICY_VIOLATION = 1008
UNKNOWN_JOB = 4404


class SlideStreamServer:
    """Accepts ``/ws/slides?jobId=<id>`` connections.

    A connection is registered as the job's delivery channel and stays bound
    until it closes. Messages sent by the client are ignored.
    """

    def __init__(
        self,
        registry: ChannelRegistry,
        supervisor: JobSupervisor,
        host: str = "localhost",
        port: int = 8081,
    ):
        self.registry = registry
        self.supervisor = supervisor
        self.host = host
        self.port = port
        self._server: Optional[Server] = None
        self.shutdown_event = asyncio.Event()

    @staticmethod
    def parse_job_id(path: str) -> Optional[str]:
        parts = urlsplit(path)
        if parts.path.rstrip("/") != STREAM_PATH:
            return None
        values = parse_qs(parts.query).get("jobId") or parse_qs(parts.query).get("slidesId")
        return values[0] if values else None

    async def handle_connection(self, websocket: ServerConnection) -> None:
        """Handle new WebSocket connection"""
        job_id = self.parse_job_id(websocket.request.path if websocket.request else "")
        if not job_id:
            logger.warning(f"Rejected stream connection without jobId: {get_websocket_info(websocket)}")
            await close_websocket_safely(websocket, POLICY_VIOLATION, "jobId is required")
            return

        if self.supervisor.get(job_id) is None:
            logger.warning(f"Rejected stream connection for unknown job {job_id}")
            await close_websocket_safely(websocket, UNKNOWN_JOB, "unknown job")
            return

        self.registry.register(job_id, websocket)
        try:
            async for _ in websocket:
                pass
        except ConnectionClosed:
            logger.info(f"Stream connection closed for job {job_id}")
        except WebSocketException as e:
            logger.error(f"Stream connection error for job {job_id}: {e}")
        finally:
            # A replaced channel must not unbind or clean up after its successor
            if self.registry.unregister(job_id, websocket):
                self.supervisor.cleanup(job_id)

    async def start(self) -> Server:
        """Start listening; returns the underlying websockets server."""
        self._server = await serve(
            self.handle_connection,
            self.host,
            self.port,
            ping_interval=30,
            ping_timeout=10,
            max_size=1024 * 1024,
        )
        sockets = list(self._server.sockets)
        if sockets:
            self.port = sockets[0].getsockname()[1]
        logger.info(f"Slide stream server listening at ws://{self.host}:{self.port}{STREAM_PATH}")
        return self._server

    async def stop(self) -> None:
        if self._server is not None:
            self._server.close()
            with contextlib.suppress(Exception):
                await self._server.wait_closed()
            self._server = None
            logger.info("Slide stream server stopped")

    async def serve_forever(self) -> None:
        """Run until ``shutdown_event`` is set."""
        await self.start()
        try:
            await self.shutdown_event.wait()
        finally:
            await self.stop()
