"""Request builders for the Add to Text Index API.

Each builder validates its arguments and returns a transport-neutral
``TextIndexRequest``. Submissions are always multipart: every field travels
as a ``files`` entry so that httpx encodes a multipart body even when no
file content is present.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Iterable, Mapping, Optional, Union
from urllib.parse import quote

from pydantic import BaseModel

from iod_textindex.core.exceptions import IodErrorException
from iod_textindex.domain.models import Documents, JobId

ADD_TO_TEXT_INDEX_PATH = "/api/async/addtotextindex/v1"
JOB_STATUS_PATH = "/job/status/{job_id}"
JOB_RESULT_PATH = "/job/result/{job_id}"

API_KEY_PART = "apiKey"
INDEX_PART = "index"
CONTENT_PARTS = ("json", "file", "reference", "url")
RESERVED_PARTS = frozenset((API_KEY_PART, INDEX_PART, *CONTENT_PARTS))

JSON_CONTENT_TYPE = "application/json"


@dataclass(frozen=True)
class TextIndexRequest:
    operation: str
    method: str
    path: str
    files: list[tuple[str, tuple]] = field(default_factory=list)
    params: dict[str, str] = field(default_factory=dict)
    index: Optional[str] = None

    @property
    def part_names(self) -> list[str]:
        return [name for name, _ in self.files]


def _stringify(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, BaseModel):
        return value.model_dump_json()
    if isinstance(value, Mapping):
        try:
            return json.dumps(value, ensure_ascii=False)
        except (TypeError, ValueError) as e:
            raise IodErrorException.invalid_request(f"Parameter value is not JSON serializable: {e}") from e
    return str(value)


def encode_params(params: Optional[Mapping[str, Any]]) -> list[tuple[str, tuple]]:
    """Turn the open parameter map into text parts.

    ``None`` values are dropped and collections become one part per element.
    """
    parts: list[tuple[str, tuple]] = []
    for name, value in (params or {}).items():
        if name in RESERVED_PARTS:
            raise IodErrorException.invalid_request(
                f"Parameter '{name}' is reserved and cannot be passed in params",
                parameter=name,
            )
        if value is None:
            continue
        values = value if isinstance(value, (list, tuple, set, frozenset)) else [value]
        for item in values:
            parts.append((name, (None, _stringify(item))))
    return parts


def _require(value: Optional[str], name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise IodErrorException.invalid_request(f"{name} must be a non-empty string", parameter=name)
    return value


def _submission(
    operation: str,
    api_key: str,
    content_part: tuple[str, tuple],
    index: str,
    params: Optional[Mapping[str, Any]],
) -> TextIndexRequest:
    files = [
        (API_KEY_PART, (None, _require(api_key, API_KEY_PART))),
        content_part,
        (INDEX_PART, (None, _require(index, INDEX_PART))),
    ]
    files.extend(encode_params(params))
    return TextIndexRequest(
        operation=operation,
        method="POST",
        path=ADD_TO_TEXT_INDEX_PATH,
        files=files,
        index=index,
    )


def serialize_documents(documents: Union[Documents[Any], Mapping[str, Any], Iterable[Any]]) -> bytes:
    """Serialize documents into the ``{"document": [...]}`` JSON envelope."""
    if isinstance(documents, Documents):
        payload = documents.model_dump(mode="json", exclude_none=True)
    elif isinstance(documents, BaseModel):
        payload = {"document": [documents.model_dump(mode="json", exclude_none=True)]}
    elif isinstance(documents, Mapping):
        payload = dict(documents) if "document" in documents else {"document": [dict(documents)]}
    elif isinstance(documents, (str, bytes)):
        raise IodErrorException.invalid_request("documents must be objects, not a string", parameter="json")
    else:
        payload = {
            "document": [
                doc.model_dump(mode="json", exclude_none=True) if isinstance(doc, BaseModel) else doc
                for doc in documents
            ]
        }

    if not payload.get("document"):
        raise IodErrorException.invalid_request("At least one document is required", parameter="json")
    try:
        return json.dumps(payload, ensure_ascii=False).encode("utf-8")
    except (TypeError, ValueError) as e:
        raise IodErrorException.invalid_request(f"Documents are not JSON serializable: {e}", parameter="json") from e


def build_add_json_request(
    api_key: str,
    documents: Union[Documents[Any], Mapping[str, Any], Iterable[Any]],
    index: str,
    params: Optional[Mapping[str, Any]] = None,
) -> TextIndexRequest:
    content = ("json", (None, serialize_documents(documents), JSON_CONTENT_TYPE))
    return _submission("add_json", api_key, content, index, params)


def build_add_file_request(
    api_key: str,
    file: Any,
    index: str,
    params: Optional[Mapping[str, Any]] = None,
    *,
    filename: Optional[str] = None,
    content_type: Optional[str] = None,
) -> TextIndexRequest:
    if isinstance(file, (bytes, bytearray, memoryview)):
        if not file:
            raise IodErrorException.invalid_request("file content is empty", parameter="file")
        fileobj: Any = bytes(file)
        name = filename or "file"
    elif isinstance(file, os.PathLike):
        path = Path(file)
        try:
            fileobj = path.read_bytes()
        except OSError as e:
            raise IodErrorException.invalid_request(f"Cannot read file {path}: {e}", parameter="file") from e
        name = filename or path.name
    elif hasattr(file, "read"):
        fileobj = file
        name = filename or os.path.basename(str(getattr(file, "name", "file")))
    else:
        raise IodErrorException.invalid_request(
            "file must be bytes, a path or a binary file object",
            parameter="file",
        )
    content = ("file", (name, fileobj, content_type))
    return _submission("add_file", api_key, content, index, params)


def build_add_reference_request(
    api_key: str,
    reference: str,
    index: str,
    params: Optional[Mapping[str, Any]] = None,
) -> TextIndexRequest:
    content = ("reference", (None, _require(reference, "reference")))
    return _submission("add_reference", api_key, content, index, params)


def build_add_url_request(
    api_key: str,
    url: str,
    index: str,
    params: Optional[Mapping[str, Any]] = None,
) -> TextIndexRequest:
    content = ("url", (None, _require(url, "url")))
    return _submission("add_url", api_key, content, index, params)


def _job_request(operation: str, template: str, job_id: Union[JobId, str], api_key: Optional[str]) -> TextIndexRequest:
    job = _require(str(job_id) if job_id is not None else None, "job_id")
    params = {API_KEY_PART: api_key} if api_key else {}
    return TextIndexRequest(
        operation=operation,
        method="GET",
        path=template.format(job_id=quote(job, safe="")),
        params=params,
    )


def build_job_status_request(job_id: Union[JobId, str], api_key: Optional[str] = None) -> TextIndexRequest:
    return _job_request("get_job_status", JOB_STATUS_PATH, job_id, api_key)


def build_job_result_request(job_id: Union[JobId, str], api_key: Optional[str] = None) -> TextIndexRequest:
    return _job_request("get_job_result", JOB_RESULT_PATH, job_id, api_key)
