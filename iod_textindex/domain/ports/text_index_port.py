"""TextIndexPort protocol for Add to Text Index access."""

from __future__ import annotations

from typing import Any, Iterable, Mapping, Optional, Protocol, Union

from iod_textindex.domain.models import AddToTextIndexJobStatus, Documents, JobId

JobRef = Union[JobId, str]


class TextIndexPort(Protocol):
    """Submission and polling operations of the Add to Text Index API."""

    def add_json_to_text_index(
        self,
        api_key: str,
        documents: Union[Documents[Any], Iterable[Any]],
        index: str,
        params: Optional[Mapping[str, Any]] = None,
    ) -> JobId: ...

    def add_file_to_text_index(
        self,
        api_key: str,
        file: Any,
        index: str,
        params: Optional[Mapping[str, Any]] = None,
        *,
        filename: Optional[str] = None,
        content_type: Optional[str] = None,
    ) -> JobId: ...

    def add_reference_to_text_index(
        self,
        api_key: str,
        reference: str,
        index: str,
        params: Optional[Mapping[str, Any]] = None,
    ) -> JobId: ...

    def add_url_to_text_index(
        self,
        api_key: str,
        url: str,
        index: str,
        params: Optional[Mapping[str, Any]] = None,
    ) -> JobId: ...

    def get_job_status(self, job_id: JobRef, api_key: Optional[str] = None) -> AddToTextIndexJobStatus: ...

    def get_job_result(self, job_id: JobRef, api_key: Optional[str] = None) -> AddToTextIndexJobStatus: ...
