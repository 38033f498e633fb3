"""Request and response models for the Add to Text Index API.

Status and action records are generic over the per-action result payload so
that the same job models can carry results of other asynchronous APIs.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator

ResultT = TypeVar("ResultT")
DocumentT = TypeVar("DocumentT")


class Status(str, Enum):
    """Lifecycle state of a job or of one of its actions."""

    QUEUED = "queued"
    IN_PROGRESS = "in progress"
    FINISHED = "finished"
    FAILED = "failed"

    @classmethod
    def _missing_(cls, value: object) -> Optional["Status"]:
        if isinstance(value, str):
            normalised = value.strip().lower().replace("_", " ")
            for member in cls:
                if member.value == normalised:
                    return member
        return None

    @property
    def is_terminal(self) -> bool:
        return self in (Status.FINISHED, Status.FAILED)


def _coerce_status(value: Any) -> Any:
    if isinstance(value, str) and not isinstance(value, Status):
        return Status(value)
    return value


class JobId(BaseModel):
    """Opaque identifier of a submitted job."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(alias="jobID", min_length=1)

    def __str__(self) -> str:
        return self.id


class IodError(BaseModel):
    """Error entry reported by the server, either for a request or an action."""

    model_config = ConfigDict(populate_by_name=True)

    error: Optional[int] = None
    reason: Optional[str] = None
    detail: Any = None
    message: Optional[str] = None


class Action(BaseModel, Generic[ResultT]):
    """One recorded step of a job's execution."""

    action: str
    status: Status
    errors: list[IodError] = Field(default_factory=list)
    result: Optional[ResultT] = None
    version: Optional[str] = None

    @field_validator("status", mode="before")
    @classmethod
    def _normalise_status(cls, value: Any) -> Any:
        return _coerce_status(value)

    @field_validator("errors", mode="before")
    @classmethod
    def _none_errors(cls, value: Any) -> Any:
        return [] if value is None else value


class JobStatus(BaseModel, Generic[ResultT]):
    """Status of a job together with the actions recorded so far."""

    model_config = ConfigDict(populate_by_name=True)

    job_id: str = Field(alias="jobID")
    status: Status
    actions: list[Action[ResultT]]

    @field_validator("status", mode="before")
    @classmethod
    def _normalise_status(cls, value: Any) -> Any:
        return _coerce_status(value)

    @property
    def errors(self) -> list[IodError]:
        return [err for action in self.actions for err in action.errors]

    @property
    def results(self) -> list[ResultT]:
        return [action.result for action in self.actions if action.result is not None]


class IndexedReference(BaseModel):
    """Reference of a document that was added to the index."""

    reference: str
    id: Optional[int] = None


class AddToTextIndexResponse(BaseModel):
    """Result payload of a finished Add to Text Index action."""

    index: str
    references: list[IndexedReference] = Field(default_factory=list)


AddToTextIndexJobStatus = JobStatus[AddToTextIndexResponse]


class Document(BaseModel):
    """A JSON document to index. Fields beyond the common ones are kept as-is."""

    model_config = ConfigDict(extra="allow")

    reference: Optional[str] = None
    title: Optional[str] = None
    content: Optional[str] = None


class Documents(BaseModel, Generic[DocumentT]):
    """Envelope for inline JSON documents, serialised as ``{"document": [...]}``."""

    document: list[DocumentT]
