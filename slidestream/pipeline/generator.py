"""Two-stage plan-then-fill slide generation.

A run assembles source content, asks the content model for a presentation
plan, then fills each planned slide in order. Every milestone is pushed to
the job's delivery channel before the next one starts. Any fatal error ends
the run with a single ``error`` event; cleanup always runs exactly once.
"""

import asyncio
from typing import Any, Callable, Dict, Optional

from pydantic import ValidationError

from slidestream.config import Settings, settings as default_settings
from slidestream.exceptions import (
    EmptyInput,
    ImageGenerationFailure,
    JSONExtractionError,
    PlanParseError,
    SlideParseError,
)
from slidestream.history import ChatHistory
from slidestream.llm.content import ContentModel
from slidestream.llm.image import ImageModel
from slidestream.logger import logger
from slidestream.schema import (
    SLIDE_TYPE_VALUES,
    JobState,
    PresentationPlan,
    Slide,
    SlideContent,
    SlideSpec,
    StartParams,
)
from slidestream.ws.events import (
    PLANNING_PHASE,
    done_event,
    error_event,
    generating_phase,
    phase_event,
    plan_event,
    ready_event,
    slide_event,
)
from slidestream.ws.registry import ChannelRegistry
from .extract import extract_json_object
from .prompts import build_image_prompt, build_plan_prompt, build_slide_prompt

StateCallback = Callable[[str, JobState], None]
TerminateCallback = Callable[[str], None]


def format_transcript(messages) -> str:
    """Join chat messages as ``role: content`` blocks separated by blank lines."""
    return "\n\n".join(f"{message.role}: {message.content}" for message in messages)


class SlideGenerationPipeline:
    """Drives one content model (and optionally an image model) through a run."""

    def __init__(
        self,
        content_model: ContentModel,
        registry: ChannelRegistry,
        history: ChatHistory,
        image_model: Optional[ImageModel] = None,
        settings: Optional[Settings] = None,
    ):
        self.content_model = content_model
        self.registry = registry
        self.history = history
        self.image_model = image_model
        self.settings = settings or default_settings

    @property
    def images_enabled(self) -> bool:
        if self.image_model is None:
            return False
        return bool(getattr(self.image_model, "enabled", True))

    async def run(
        self,
        job_id: str,
        params: StartParams,
        on_state: Optional[StateCallback] = None,
        on_terminate: Optional[TerminateCallback] = None,
    ) -> None:
        """Execute a full run for ``job_id``. Never raises except on cancellation."""

        def set_state(state: JobState) -> None:
            if on_state is not None:
                on_state(job_id, state)

        try:
            content = await self.assemble_content(params)
            set_state(JobState.CONTENT_READY)
            await self.registry.push(job_id, ready_event(job_id))

            set_state(JobState.PLANNING)
            await self.registry.push(job_id, phase_event(PLANNING_PHASE))
            plan = await self.plan(content)
            await self.registry.push(job_id, plan_event(plan))
            logger.info(f"Job {job_id}: planned {len(plan.slides)} slides for '{plan.title}'")

            set_state(JobState.GENERATING)
            for index, spec in enumerate(plan.slides):
                await self.registry.push(job_id, phase_event(generating_phase(index)))
                slide = await self.generate_slide(plan, spec, index, content)
                await self.registry.push(job_id, slide_event(slide))
                if self.settings.slide_delay > 0:
                    await asyncio.sleep(self.settings.slide_delay)

            set_state(JobState.DONE)
            await self.registry.push(job_id, done_event(len(plan.slides)))
            logger.info(f"Job {job_id}: completed with {len(plan.slides)} slides")

        except Exception as e:
            logger.exception(f"Job {job_id}: slide generation failed: {e}")
            set_state(JobState.ERROR)
            await self.registry.push(job_id, error_event(e))

        finally:
            self.registry.unregister(job_id)
            if on_terminate is not None:
                on_terminate(job_id)

    async def assemble_content(self, params: StartParams) -> str:
        if params.conversation_id:
            messages = await self.history.fetch(params.conversation_id)
            content = format_transcript(messages)
        elif params.topic_text:
            content = params.topic_text
        else:
            content = ""

        if not content.strip():
            raise EmptyInput()
        return content

    async def plan(self, content: str) -> PresentationPlan:
        prompt = build_plan_prompt(content, self.settings.plan_content_chars)
        raw = await self.content_model.invoke(prompt)
        try:
            data = extract_json_object(raw)
        except JSONExtractionError as e:
            raise PlanParseError(f"Failed to generate presentation plan: {e}") from e

        self._warn_unknown_types(data)
        try:
            return PresentationPlan.model_validate(data)
        except ValidationError as e:
            raise PlanParseError(f"Invalid presentation plan: {e.error_count()} validation error(s)") from e

    async def generate_slide(
        self,
        plan: PresentationPlan,
        spec: SlideSpec,
        index: int,
        content: str,
    ) -> Slide:
        prompt = build_slide_prompt(plan, spec, index, content, self.settings.slide_content_chars)
        raw = await self.content_model.invoke(prompt)
        try:
            parsed = SlideContent.model_validate(extract_json_object(raw))
        except JSONExtractionError as e:
            raise SlideParseError(index, str(e)) from e
        except ValidationError as e:
            raise SlideParseError(index, f"{e.error_count()} validation error(s)") from e

        title = (parsed.title or "").strip() or spec.focus
        image_url = None
        if index == 0 and self.images_enabled:
            image_url = await self.generate_image(spec, title)

        return Slide(
            id=f"slide-{index}",
            title=title,
            bullets=parsed.bullets,
            speaker_notes=parsed.speaker_notes,
            image_url=image_url,
            type=spec.type,
        )

    async def generate_image(self, spec: SlideSpec, title: str) -> Optional[str]:
        prompt = build_image_prompt(spec.type, title)
        try:
            return await self.image_model.invoke(prompt, self.settings.image_settings.size)
        except ImageGenerationFailure as e:
            logger.warning(f"Image generation failed: {e}")
        except Exception as e:
            logger.warning(f"Image generation failed unexpectedly: {e!r}")
        return None

    @staticmethod
    def _warn_unknown_types(data: Dict[str, Any]) -> None:
        slides = data.get("slides")
        if not isinstance(slides, list):
            return
        for item in slides:
            if not isinstance(item, dict):
                continue
            raw_type = str(item.get("type") or "").strip().lower()
            if raw_type and raw_type not in SLIDE_TYPE_VALUES:
                logger.warning(f"Unknown slide type '{raw_type}' in plan, using 'concept'")
