"""API request/response models."""

from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from slidestream.schema import JobRecord, JobState, StartParams


class CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


# Request Models

class StartRequest(CamelModel):
    """Request model for starting a generation job."""

    conversation_id: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("conversationId", "chatId", "conversation_id"),
        description="Conversation whose history is the source content",
    )
    topic_text: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("topicText", "topic", "topic_text"),
        description="Free-text topic used verbatim as source content",
    )
    file_path: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("filePath", "file_path"),
        description="Reserved; accepted but not processed",
    )

    def to_params(self) -> StartParams:
        return StartParams(
            conversation_id=self.conversation_id,
            topic_text=self.topic_text,
            file_path=self.file_path,
        )


# Response Models

class StartResponse(CamelModel):
    ok: bool = True
    job_id: str = Field(..., serialization_alias="jobId")
    stream_address: str = Field(..., serialization_alias="streamAddress")


class JobResponse(CamelModel):
    ok: bool = True
    job_id: str = Field(..., serialization_alias="jobId")
    state: JobState
    created_at: float = Field(..., serialization_alias="createdAt")
    conversation_id: Optional[str] = Field(default=None, serialization_alias="conversationId")
    topic_text: Optional[str] = Field(default=None, serialization_alias="topicText")

    @classmethod
    def from_record(cls, record: JobRecord) -> "JobResponse":
        return cls(
            job_id=record.job_id,
            state=record.state,
            created_at=record.created_at,
            conversation_id=record.params.conversation_id,
            topic_text=record.params.topic_text,
        )


class ErrorResponse(CamelModel):
    ok: bool = False
    error: str


class HealthResponse(CamelModel):
    status: str = "healthy"
    active_jobs: int = Field(..., serialization_alias="activeJobs")
    open_channels: int = Field(..., serialization_alias="openChannels")
