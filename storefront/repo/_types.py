"""
Repository types — errors.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto

import httpx
import pydantic

GENERIC_MESSAGE = "The server could not process the request."

# ═══════════════════════════════════════════════════════════════════════════════
# Repository Error
# ═══════════════════════════════════════════════════════════════════════════════


class RepoErrorKind(Enum):
    """Repository error kinds."""
    NOT_FOUND = auto()
    REJECTED = auto()
    TRANSPORT = auto()
    DECODE = auto()


@dataclass(frozen=True, slots=True)
class RepoError:
    """
    Repository operation error.

    message is always user-readable: the backend's own text when it sent
    one, a generic sentence otherwise.
    """
    kind: RepoErrorKind
    message: str
    resource: str
    status: int | None = None

    @property
    def is_not_found(self) -> bool:
        return self.kind == RepoErrorKind.NOT_FOUND

    def __str__(self) -> str:
        if self.status is not None:
            return f"{self.resource}: {self.message} (HTTP {self.status})"
        return f"{self.resource}: {self.message}"


# ═══════════════════════════════════════════════════════════════════════════════
# Exception → RepoError
# ═══════════════════════════════════════════════════════════════════════════════


def backend_message(response: httpx.Response) -> str | None:
    """
    Most specific message the backend put in an error body.

    Understands `{"detail": "..."}`, FastAPI validation lists
    (`{"detail": [{"loc": [...], "msg": "..."}]}`) and `{"message": "..."}`.
    Falls back to the raw text body.
    """
    try:
        body = response.json()
    except ValueError:
        text = response.text.strip()
        return text or None

    if isinstance(body, dict):
        detail = body.get("detail", body.get("message"))
        if isinstance(detail, str) and detail:
            return detail
        if isinstance(detail, list):
            parts: list[str] = []
            for item in detail:
                if isinstance(item, dict) and "msg" in item:
                    loc = ".".join(str(p) for p in item.get("loc", ()) if p != "body")
                    parts.append(f"{loc}: {item['msg']}" if loc else str(item["msg"]))
                elif isinstance(item, str):
                    parts.append(item)
            if parts:
                return "; ".join(parts)
    if isinstance(body, str) and body:
        return body
    return None


def to_repo_error(resource: str, exc: Exception) -> RepoError:
    match exc:
        case httpx.HTTPStatusError(response=response):
            kind = (
                RepoErrorKind.NOT_FOUND
                if response.status_code == 404
                else RepoErrorKind.REJECTED
            )
            return RepoError(
                kind=kind,
                message=backend_message(response) or GENERIC_MESSAGE,
                resource=resource,
                status=response.status_code,
            )
        case httpx.TimeoutException():
            return RepoError(
                RepoErrorKind.TRANSPORT, "The server did not answer in time.", resource
            )
        case httpx.TransportError():
            return RepoError(
                RepoErrorKind.TRANSPORT, "Could not reach the server.", resource
            )
        case pydantic.ValidationError() | ValueError():
            return RepoError(
                RepoErrorKind.DECODE, "The server sent an unexpected response.", resource
            )
        case _:
            return RepoError(RepoErrorKind.TRANSPORT, str(exc) or GENERIC_MESSAGE, resource)


__all__ = (
    "GENERIC_MESSAGE",
    "RepoErrorKind",
    "RepoError",
    "backend_message",
    "to_repo_error",
)
