from __future__ import annotations

import copy
import re
from dataclasses import dataclass
from typing import Callable, Optional

import httpx
import pytest

from iod_textindex.core.config import Settings


@dataclass
class Part:
    name: str
    value: bytes
    filename: Optional[str] = None
    content_type: Optional[str] = None

    @property
    def text(self) -> str:
        return self.value.decode("utf-8")


def _parse_multipart(request: httpx.Request) -> list[Part]:
    content_type = request.headers["Content-Type"]
    assert content_type.startswith("multipart/form-data")
    boundary = content_type.split("boundary=", 1)[1].encode()

    parts: list[Part] = []
    for segment in request.content.split(b"--" + boundary)[1:]:
        if segment.startswith(b"--"):
            break
        head, body = segment[2:].split(b"\r\n\r\n", 1)
        headers = head.decode("utf-8")
        name = re.search(r'name="([^"]*)"', headers).group(1)
        filename = re.search(r'filename="([^"]*)"', headers)
        ctype = re.search(r"Content-Type: (.+)", headers)
        parts.append(
            Part(
                name=name,
                value=body[:-2],
                filename=filename.group(1) if filename else None,
                content_type=ctype.group(1).strip() if ctype else None,
            )
        )
    return parts


@pytest.fixture
def parse_multipart() -> Callable[[httpx.Request], list[Part]]:
    return _parse_multipart


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None, BASE_URL="https://example.com", API_KEY=None)


FINISHED_BODY = {
    "jobID": "job-123",
    "status": "finished",
    "actions": [
        {
            "action": "addtotextindex",
            "status": "finished",
            "errors": [],
            "result": {
                "index": "mydocs",
                "references": [{"reference": "https://example.com/doc.pdf", "id": 7}],
            },
            "version": "v1",
        }
    ],
}


@pytest.fixture
def finished_body() -> dict:
    return copy.deepcopy(FINISHED_BODY)
