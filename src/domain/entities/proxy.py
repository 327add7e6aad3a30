"""Value objects passed through the development proxies."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Optional

JSON_CONTENT_TYPE = "application/json"


@dataclass(frozen=True, slots=True)
class ProxyRequest:
    """An inbound request with the proxy prefix already stripped from ``path``."""

    method: str
    path: str
    query: str = ""
    body: bytes = b""

    @property
    def normalized_path(self) -> str:
        return self.path if self.path.startswith("/") else f"/{self.path}"


@dataclass(frozen=True, slots=True)
class UpstreamResponse:
    """A response received from (or synthesized in place of) the upstream API."""

    status_code: int
    content: bytes = b""
    content_type: str = JSON_CONTENT_TYPE

    @classmethod
    def json(cls, status_code: int, payload: Any) -> "UpstreamResponse":
        return cls(
            status_code=status_code,
            content=json.dumps(payload, ensure_ascii=False).encode("utf-8"),
            content_type=JSON_CONTENT_TYPE,
        )

    def json_body(self) -> Optional[Any]:
        try:
            return json.loads(self.content or b"null")
        except ValueError:
            return None

    @property
    def text(self) -> str:
        return self.content.decode("utf-8", errors="replace")
