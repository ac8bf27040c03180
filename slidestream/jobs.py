"""Job supervisor: starts detached pipeline runs and tracks their metadata."""

import asyncio
import uuid
from typing import Dict, List, Optional, Set

from slidestream.config import Settings, settings as default_settings
from slidestream.exceptions import InvalidStartParams, JobCapacityExceeded
from slidestream.logger import logger
from slidestream.pipeline import SlideGenerationPipeline
from slidestream.schema import JobRecord, JobState, StartParams, StartResult

STREAM_PATH = "/ws/slides"


class JobSupervisor:
    """Owns the job metadata map and the background tasks running each job."""

    def __init__(self, pipeline: SlideGenerationPipeline, settings: Optional[Settings] = None):
        self.pipeline = pipeline
        self.settings = settings or default_settings
        self._jobs: Dict[str, JobRecord] = {}
        self._tasks: Set[asyncio.Task] = set()

    def stream_address(self, job_id: str) -> str:
        return f"{self.settings.stream_base_url.rstrip('/')}{STREAM_PATH}?jobId={job_id}"

    def start(self, params: StartParams) -> StartResult:
        """Accept a job and launch its pipeline without waiting for it.

        Must be called from a running event loop.
        """
        if not params.has_source():
            raise InvalidStartParams("Either conversationId or topicText is required")

        limit = self.settings.max_active_jobs
        if limit and len(self._tasks) >= limit:
            raise JobCapacityExceeded(f"Too many active jobs ({limit})")

        job_id = str(uuid.uuid4())
        self._jobs[job_id] = JobRecord(job_id=job_id, params=params)

        task = asyncio.create_task(
            self.pipeline.run(
                job_id,
                params,
                on_state=self.update_state,
                on_terminate=self.cleanup,
            ),
            name=f"slides-{job_id}",
        )
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

        source = "conversation" if params.conversation_id else "topic"
        logger.info(f"Started job {job_id} from {source} | Running jobs: {len(self._tasks)}")
        return StartResult(job_id=job_id, stream_address=self.stream_address(job_id))

    def get(self, job_id: str) -> Optional[JobRecord]:
        return self._jobs.get(job_id)

    def update_state(self, job_id: str, state: JobState) -> None:
        record = self._jobs.get(job_id)
        if record is not None:
            record.state = state

    def cleanup(self, job_id: str) -> None:
        """Drop metadata for ``job_id``; unknown ids are ignored."""
        if self._jobs.pop(job_id, None) is not None:
            logger.info(f"Cleaned up job {job_id} | Tracked jobs: {len(self._jobs)}")

    def active_count(self) -> int:
        """Number of pipelines still running, including ones whose client left."""
        return len(self._tasks)

    def job_ids(self) -> List[str]:
        return list(self._jobs)

    async def drain(self, timeout: Optional[float] = None) -> None:
        """Wait for all running jobs to finish."""
        tasks = list(self._tasks)
        if tasks:
            await asyncio.wait(tasks, timeout=timeout)

    async def shutdown(self) -> None:
        """Cancel running jobs; their cleanup still runs."""
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        logger.info(f"Job supervisor stopped ({len(tasks)} job(s) cancelled)")
