"""Generation event protocol.

Every event is a JSON object tagged by ``type``. Events of one job are
delivered in the order they are produced; nothing follows ``done`` or
``error``.
"""

from typing import Any

from slidestream.schema import PresentationPlan, Slide


class SlideEvents:
    """Event types pushed to a job's delivery channel"""

    READY = "ready"
    PHASE = "phase"
    PLAN = "plan"
    SLIDE = "slide"
    DONE = "done"
    ERROR = "error"


TERMINAL_EVENTS = frozenset({SlideEvents.DONE, SlideEvents.ERROR})

PLANNING_PHASE = "planning"


def generating_phase(index: int) -> str:
    """Phase label for the zero-based slide ``index``."""
    return f"generating_slide_{index + 1}"


def create_event(event_type: str, **fields: Any) -> dict[str, Any]:
    """Create an event, dropping fields whose value is None"""
    event: dict[str, Any] = {"type": event_type}
    event.update({key: value for key, value in fields.items() if value is not None})
    return event


def ready_event(job_id: str) -> dict[str, Any]:
    return create_event(SlideEvents.READY, jobId=job_id)


def phase_event(value: str) -> dict[str, Any]:
    return create_event(SlideEvents.PHASE, value=value)


def plan_event(plan: PresentationPlan) -> dict[str, Any]:
    return create_event(
        SlideEvents.PLAN,
        title=plan.title,
        subtitle=plan.subtitle,
        targetAudience=plan.target_audience,
        estimatedSlides=plan.slide_count_estimate(),
    )


def slide_event(slide: Slide) -> dict[str, Any]:
    return create_event(SlideEvents.SLIDE, slide=slide.to_wire())


def done_event(total_slides: int) -> dict[str, Any]:
    return create_event(SlideEvents.DONE, totalSlides=total_slides)


def error_event(error: BaseException | str) -> dict[str, Any]:
    return create_event(SlideEvents.ERROR, error=str(error) or type(error).__name__)
