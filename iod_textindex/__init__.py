"""Client for the IDOL OnDemand Add to Text Index API.

Submit JSON documents, files, object-store references or URLs to a text index
as asynchronous jobs, then poll the returned job id for status and result.
"""

from iod_textindex.core.exceptions import ErrorCategory, IodErrorException
from iod_textindex.core.logging import configure_logging
from iod_textindex.domain.models import (
    Action,
    AddToTextIndexJobStatus,
    AddToTextIndexResponse,
    Document,
    Documents,
    IndexedReference,
    IodError,
    JobId,
    JobStatus,
    Status,
)
from iod_textindex.infrastructure.clients.add_to_text_index_http import (
    AddToTextIndexHttpClient,
    AsyncAddToTextIndexHttpClient,
)

__all__ = [
    "Action",
    "AddToTextIndexHttpClient",
    "AddToTextIndexJobStatus",
    "AddToTextIndexResponse",
    "AsyncAddToTextIndexHttpClient",
    "Document",
    "Documents",
    "ErrorCategory",
    "IndexedReference",
    "IodError",
    "IodErrorException",
    "JobId",
    "JobStatus",
    "Status",
    "configure_logging",
]
