import time
from enum import Enum
from typing import Any

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field
from pydantic import field_validator
from pydantic.alias_generators import to_camel


class SlideType(str, Enum):
    """Slide type tags a plan may assign"""

    OPENING = "opening"
    CONCEPT = "concept"
    DETAIL = "detail"
    SUMMARY = "summary"
    CLOSING = "closing"


SLIDE_TYPE_VALUES = tuple(slide_type.value for slide_type in SlideType)


class JobState(str, Enum):
    """Job lifecycle states"""

    CREATED = "created"
    CONTENT_READY = "content_ready"
    PLANNING = "planning"
    GENERATING = "generating"
    DONE = "done"
    ERROR = "error"


class WireModel(BaseModel):
    """Base for models that travel to clients with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class ChatMessage(BaseModel):
    """One message of a stored conversation"""

    role: str
    content: str = ""


class StartParams(BaseModel):
    """Parameters captured when a job is started"""

    conversation_id: str | None = None
    topic_text: str | None = None
    file_path: str | None = None

    def has_source(self) -> bool:
        if self.conversation_id:
            return True
        return bool(self.topic_text and self.topic_text.strip())


class JobRecord(BaseModel):
    """Minimal metadata kept for a running job"""

    job_id: str
    params: StartParams
    created_at: float = Field(default_factory=time.time)
    state: JobState = JobState.CREATED


class StartResult(BaseModel):
    job_id: str
    stream_address: str


class SlideSpec(WireModel):
    """A planned slide before its content is filled in"""

    type: SlideType = SlideType.CONCEPT
    focus: str = ""
    points: int = 3

    @field_validator("type", mode="before")
    @classmethod
    def _normalize_type(cls, value: Any) -> Any:
        if isinstance(value, SlideType):
            return value
        lowered = str(value or "").strip().lower()
        return lowered if lowered in SLIDE_TYPE_VALUES else SlideType.CONCEPT

    @field_validator("focus", mode="before")
    @classmethod
    def _coerce_focus(cls, value: Any) -> str:
        return "" if value is None else str(value).strip()

    @field_validator("points", mode="before")
    @classmethod
    def _clamp_points(cls, value: Any) -> int:
        try:
            points = int(value)
        except (TypeError, ValueError):
            return 3
        return max(1, min(points, 8))


class PresentationPlan(WireModel):
    """Structured outline produced by the planning stage"""

    title: str
    subtitle: str | None = None
    target_audience: str | None = None
    estimated_slides: int | None = None
    slides: list[SlideSpec] = Field(..., min_length=1)

    @field_validator("title", mode="before")
    @classmethod
    def _require_title(cls, value: Any) -> str:
        text = "" if value is None else str(value).strip()
        if not text:
            raise ValueError("plan title is empty")
        return text

    @field_validator("subtitle", "target_audience", mode="before")
    @classmethod
    def _blank_to_none(cls, value: Any) -> str | None:
        if value is None:
            return None
        text = str(value).strip()
        return text or None

    @field_validator("estimated_slides", mode="before")
    @classmethod
    def _coerce_estimate(cls, value: Any) -> int | None:
        try:
            return int(value) if value is not None else None
        except (TypeError, ValueError):
            return None

    def slide_count_estimate(self) -> int:
        return self.estimated_slides if self.estimated_slides else len(self.slides)


class SlideContent(WireModel):
    """Fields the model fills in for one slide"""

    title: str | None = None
    bullets: list[str] = Field(default_factory=list)
    speaker_notes: str | None = None

    @field_validator("bullets", mode="before")
    @classmethod
    def _coerce_bullets(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, list):
            return [str(item).strip() for item in value if str(item).strip()]
        return value


class Slide(WireModel):
    """A fully assembled slide as streamed to clients"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    id: str
    title: str
    bullets: list[str] = Field(default_factory=list)
    speaker_notes: str | None = None
    image_url: str | None = None
    type: SlideType
