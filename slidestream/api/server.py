"""FastAPI server for starting slide generation jobs."""

from fastapi import FastAPI, Path
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from slidestream.exceptions import InvalidStartParams, JobCapacityExceeded
from slidestream.jobs import JobSupervisor
from slidestream.logger import logger
from slidestream.ws.registry import ChannelRegistry
from .models import (
    ErrorResponse,
    HealthResponse,
    JobResponse,
    StartRequest,
    StartResponse,
)


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ErrorResponse(error=message).model_dump())


class APIServer:
    """HTTP front door: start jobs and inspect running ones."""

    def __init__(self, supervisor: JobSupervisor, registry: ChannelRegistry):
        self.supervisor = supervisor
        self.registry = registry
        self.app = FastAPI(
            title="SlideStream API",
            description="Start slide generation jobs and stream their progress over WebSocket",
            version="0.1.0",
        )

        self.app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

        self._register_routes()
        self._register_exception_handlers()

    def _register_exception_handlers(self):
        """Render every failure as an ``{ok: false, error}`` envelope."""

        @self.app.exception_handler(RequestValidationError)
        async def validation_exception_handler(request, exc):
            return _error(400, f"Invalid request: {exc.errors()}")

        @self.app.exception_handler(InvalidStartParams)
        async def invalid_params_handler(request, exc):
            return _error(400, str(exc))

        @self.app.exception_handler(JobCapacityExceeded)
        async def capacity_handler(request, exc):
            logger.warning(f"Rejected job: {exc}")
            return _error(503, str(exc))

        @self.app.exception_handler(Exception)
        async def general_exception_handler(request, exc):
            logger.error(f"API error: {exc}")
            return _error(500, str(exc))

    def _register_routes(self):
        """Register all API routes."""

        @self.app.get("/health")
        async def health_check():
            response = HealthResponse(
                active_jobs=self.supervisor.active_count(),
                open_channels=len(self.registry),
            )
            return JSONResponse(content=response.model_dump(by_alias=True))

        @self.app.post("/slides")
        async def start_slides(request: StartRequest):
            """Start a generation job and return where to stream its events."""
            result = self.supervisor.start(request.to_params())
            response = StartResponse(job_id=result.job_id, stream_address=result.stream_address)
            return JSONResponse(content=response.model_dump(by_alias=True))

        @self.app.get("/slides/{job_id}")
        async def get_job(job_id: str = Path(..., description="Job ID")):
            record = self.supervisor.get(job_id)
            if record is None:
                return _error(404, "Job not found")
            response = JobResponse.from_record(record)
            return JSONResponse(content=response.model_dump(by_alias=True, exclude_none=True, mode="json"))

    async def start(self, host: str = "0.0.0.0", port: int = 8080):
        """Start the API server."""
        import uvicorn

        config = uvicorn.Config(app=self.app, host=host, port=port, log_level="info")
        server = uvicorn.Server(config)

        logger.info(f"Starting API server on http://{host}:{port}")
        await server.serve()
