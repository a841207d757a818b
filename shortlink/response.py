"""JSON response bodies of the API."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

STATUS_OK = "Ok"
STATUS_ERROR = "Error"


@dataclass(frozen=True)
class Response:
    """An API reply; empty ``error`` and ``alias`` are left out of the JSON."""

    status: str
    error: str = ""
    alias: str = ""

    def to_dict(self) -> dict[str, str]:
        body = {"status": self.status}
        if self.error:
            body["error"] = self.error
        if self.alias:
            body["alias"] = self.alias
        return body


@dataclass(frozen=True)
class FieldError:
    """A single failed validation rule on a request field."""

    field: str
    tag: str


def ok() -> Response:
    return Response(status=STATUS_OK)


def error_response(message: str) -> Response:
    return Response(status=STATUS_ERROR, error=message)


def _describe(err: FieldError) -> str:
    if err.tag == "required":
        return f"field {err.field} is a required field"
    if err.tag == "url":
        return f"field {err.field} is not a vaild URL"
    return f"field {err.field} is not valid"


def validation_error(errors: Iterable[FieldError]) -> Response:
    """Build an error reply listing every failed field, comma separated."""
    return Response(status=STATUS_ERROR, error=",".join(_describe(e) for e in errors))