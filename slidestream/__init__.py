"""
SlideStream - streamed, LLM-driven presentation generation

- Two-stage plan-then-fill slide pipeline over a pluggable content model
- Detached background jobs keyed by an opaque id
- Best-effort WebSocket delivery of incremental events
"""

from .config import settings
from .exceptions import (
    ChannelUnavailable,
    EmptyInput,
    ImageGenerationFailure,
    PlanParseError,
    SlideParseError,
    SlideStreamError,
)
from .jobs import JobSupervisor
from .logger import logger
from .pipeline import SlideGenerationPipeline
from .schema import JobState, PresentationPlan, Slide, SlideSpec, SlideType, StartParams
from .ws.registry import ChannelRegistry

__version__ = "0.1.0"

__all__ = [
    # Core components
    "ChannelRegistry",
    "JobSupervisor",
    "SlideGenerationPipeline",
    "logger",
    "settings",
    # Schema types
    "JobState",
    "PresentationPlan",
    "Slide",
    "SlideSpec",
    "SlideType",
    "StartParams",
    # Errors
    "ChannelUnavailable",
    "EmptyInput",
    "ImageGenerationFailure",
    "PlanParseError",
    "SlideParseError",
    "SlideStreamError",
]
