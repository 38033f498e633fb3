"""HTTP clients for the Add to Text Index API.

Two transports share the request builders and the response parser:
``AddToTextIndexHttpClient`` (sync httpx, one connection per call) and
``AsyncAddToTextIndexHttpClient`` (async httpx, used as a context manager).
Neither retries; every failure is raised as ``IodErrorException``.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping, Optional, TypeVar, Union

import httpx
from pydantic import BaseModel, ValidationError

from iod_textindex.core.config import Settings, get_settings
from iod_textindex.core.exceptions import IodErrorException
from iod_textindex.domain.models import AddToTextIndexJobStatus, Documents, IodError, JobId
from iod_textindex.domain.ports.text_index_port import TextIndexPort
from iod_textindex.infrastructure.clients.request_builders import (
    TextIndexRequest,
    build_add_file_request,
    build_add_json_request,
    build_add_reference_request,
    build_add_url_request,
    build_job_result_request,
    build_job_status_request,
)

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


def _to_iod_error(entry: Any) -> IodError:
    if isinstance(entry, dict):
        try:
            return IodError.model_validate(entry)
        except ValidationError:
            pass
    return IodError(message=str(entry))


def extract_errors(data: Any) -> list[IodError]:
    """Pull IOD error entries out of a response body.

    Accepts a single error object (``{"error": 4005, "reason": ...}``) or an
    object holding an ``errors`` list.
    """
    if not isinstance(data, dict):
        return []
    errors = data.get("errors")
    if isinstance(errors, list):
        return [_to_iod_error(e) for e in errors]
    if "error" in data:
        return [_to_iod_error(data)]
    return []


def parse_response(request: TextIndexRequest, resp: httpx.Response, model: type[ModelT]) -> ModelT:
    """Validate an HTTP response into ``model`` or raise ``IodErrorException``."""
    try:
        data = resp.json()
    except ValueError:
        data = None
        parsed = False
    else:
        parsed = True

    if not resp.is_success:
        errors = extract_errors(data)
        detail = None if errors else (resp.text.strip()[:500] or resp.reason_phrase)
        raise IodErrorException.server(resp.status_code, errors, detail=detail)

    if not parsed:
        raise IodErrorException.malformed(
            f"{request.operation} response is not JSON",
            http_status=resp.status_code,
            body=resp.text,
        )

    if isinstance(data, dict) and "jobID" not in data:
        errors = extract_errors(data)
        if errors:
            raise IodErrorException.server(resp.status_code, errors)

    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise IodErrorException.malformed(
            f"{request.operation} response does not match {model.__name__}: {e.error_count()} error(s)",
            http_status=resp.status_code,
            body=resp.text,
        ) from e


def _log_failure(request: TextIndexRequest, err: IodErrorException) -> None:
    logger.warning(
        "%s failed: %s",
        request.operation,
        err.message,
        extra={
            "operation": request.operation,
            "index": request.index,
            "error_code": err.error_code,
            "http_status": err.http_status,
        },
    )


class AddToTextIndexHttpClient(TextIndexPort):
    """Add to Text Index client implementing TextIndexPort using httpx (sync).

    ``api_key`` is the ambient credential used by status/result polls when no
    key is passed per call. Arguments left as ``None`` come from settings.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
        verify_ssl: Optional[bool] = None,
        transport: Optional[httpx.BaseTransport] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        settings = settings or get_settings()
        self._base_url = base_url or settings.BASE_URL
        self._api_key = api_key if api_key is not None else settings.api_key
        self._timeout_seconds = timeout_seconds if timeout_seconds is not None else settings.TIMEOUT_SECONDS
        self._verify_ssl = verify_ssl if verify_ssl is not None else settings.VERIFY_SSL
        self._transport = transport

    def _client(self) -> httpx.Client:
        if not self._base_url:
            raise IodErrorException.invalid_request("IOD base_url is not configured", parameter="base_url")
        return httpx.Client(
            base_url=self._base_url,
            timeout=self._timeout_seconds,
            verify=self._verify_ssl,
            transport=self._transport,
        )

    def _send(self, request: TextIndexRequest, model: type[ModelT]) -> ModelT:
        logger.debug(
            "%s %s",
            request.method,
            request.path,
            extra={"operation": request.operation, "index": request.index},
        )
        try:
            with self._client() as client:
                try:
                    resp = client.request(
                        request.method,
                        request.path,
                        files=request.files or None,
                        params=request.params or None,
                    )
                except httpx.TimeoutException as e:
                    raise IodErrorException.transport(e, timeout=True) from e
                except httpx.HTTPError as e:
                    raise IodErrorException.transport(e) from e
            return parse_response(request, resp, model)
        except IodErrorException as err:
            _log_failure(request, err)
            raise

    def _submit(self, request: TextIndexRequest) -> JobId:
        job_id = self._send(request, JobId)
        logger.debug(
            "Submitted %s job %s",
            request.operation,
            job_id,
            extra={"operation": request.operation, "index": request.index, "job_id": str(job_id)},
        )
        return job_id

    def add_json_to_text_index(
        self,
        api_key: str,
        documents: Union[Documents[Any], Iterable[Any]],
        index: str,
        params: Optional[Mapping[str, Any]] = None,
    ) -> JobId:
        return self._submit(build_add_json_request(api_key, documents, index, params))

    def add_file_to_text_index(
        self,
        api_key: str,
        file: Any,
        index: str,
        params: Optional[Mapping[str, Any]] = None,
        *,
        filename: Optional[str] = None,
        content_type: Optional[str] = None,
    ) -> JobId:
        request = build_add_file_request(
            api_key, file, index, params, filename=filename, content_type=content_type
        )
        return self._submit(request)

    def add_reference_to_text_index(
        self,
        api_key: str,
        reference: str,
        index: str,
        params: Optional[Mapping[str, Any]] = None,
    ) -> JobId:
        return self._submit(build_add_reference_request(api_key, reference, index, params))

    def add_url_to_text_index(
        self,
        api_key: str,
        url: str,
        index: str,
        params: Optional[Mapping[str, Any]] = None,
    ) -> JobId:
        return self._submit(build_add_url_request(api_key, url, index, params))

    def get_job_status(self, job_id: Union[JobId, str], api_key: Optional[str] = None) -> AddToTextIndexJobStatus:
        request = build_job_status_request(job_id, api_key or self._api_key)
        return self._send(request, AddToTextIndexJobStatus)

    def get_job_result(self, job_id: Union[JobId, str], api_key: Optional[str] = None) -> AddToTextIndexJobStatus:
        request = build_job_result_request(job_id, api_key or self._api_key)
        return self._send(request, AddToTextIndexJobStatus)


class AsyncAddToTextIndexHttpClient:
    """Async counterpart of ``AddToTextIndexHttpClient``.

    Must be entered with ``async with`` before use; the underlying
    ``httpx.AsyncClient`` is shared by all calls made inside the block.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
        verify_ssl: Optional[bool] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        settings = settings or get_settings()
        self.base_url = base_url or settings.BASE_URL
        self.timeout = timeout_seconds if timeout_seconds is not None else settings.TIMEOUT_SECONDS
        self.verify = verify_ssl if verify_ssl is not None else settings.VERIFY_SSL
        self._api_key = api_key if api_key is not None else settings.api_key
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self):
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            verify=self.verify,
            transport=self._transport,
        )
        return self

    async def __aexit__(self, *args):
        if self._client:
            await self._client.aclose()
            self._client = None

    async def _send(self, request: TextIndexRequest, model: type[ModelT]) -> ModelT:
        if not self._client:
            raise RuntimeError("Client not started")
        logger.debug(
            "%s %s",
            request.method,
            request.path,
            extra={"operation": request.operation, "index": request.index},
        )
        try:
            if not self.base_url:
                raise IodErrorException.invalid_request("IOD base_url is not configured", parameter="base_url")
            try:
                resp = await self._client.request(
                    request.method,
                    request.path,
                    files=request.files or None,
                    params=request.params or None,
                )
            except httpx.TimeoutException as e:
                raise IodErrorException.transport(e, timeout=True) from e
            except httpx.HTTPError as e:
                raise IodErrorException.transport(e) from e
            return parse_response(request, resp, model)
        except IodErrorException as err:
            _log_failure(request, err)
            raise

    async def _submit(self, request: TextIndexRequest) -> JobId:
        job_id = await self._send(request, JobId)
        logger.debug(
            "Submitted %s job %s",
            request.operation,
            job_id,
            extra={"operation": request.operation, "index": request.index, "job_id": str(job_id)},
        )
        return job_id

    async def add_json_to_text_index(
        self,
        api_key: str,
        documents: Union[Documents[Any], Iterable[Any]],
        index: str,
        params: Optional[Mapping[str, Any]] = None,
    ) -> JobId:
        return await self._submit(build_add_json_request(api_key, documents, index, params))

    async def add_file_to_text_index(
        self,
        api_key: str,
        file: Any,
        index: str,
        params: Optional[Mapping[str, Any]] = None,
        *,
        filename: Optional[str] = None,
        content_type: Optional[str] = None,
    ) -> JobId:
        request = build_add_file_request(
            api_key, file, index, params, filename=filename, content_type=content_type
        )
        return await self._submit(request)

    async def add_reference_to_text_index(
        self,
        api_key: str,
        reference: str,
        index: str,
        params: Optional[Mapping[str, Any]] = None,
    ) -> JobId:
        return await self._submit(build_add_reference_request(api_key, reference, index, params))

    async def add_url_to_text_index(
        self,
        api_key: str,
        url: str,
        index: str,
        params: Optional[Mapping[str, Any]] = None,
    ) -> JobId:
        return await self._submit(build_add_url_request(api_key, url, index, params))

    async def get_job_status(
        self, job_id: Union[JobId, str], api_key: Optional[str] = None
    ) -> AddToTextIndexJobStatus:
        request = build_job_status_request(job_id, api_key or self._api_key)
        return await self._send(request, AddToTextIndexJobStatus)

    async def get_job_result(
        self, job_id: Union[JobId, str], api_key: Optional[str] = None
    ) -> AddToTextIndexJobStatus:
        request = build_job_result_request(job_id, api_key or self._api_key)
        return await self._send(request, AddToTextIndexJobStatus)
