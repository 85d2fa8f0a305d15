"""Search outcome models."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict


class SearchFailureKind(StrEnum):
    NO_MATCH = "no_match"
    FAILED = "failed"
    CONNECTION = "connection"


_MESSAGES: dict[SearchFailureKind, str] = {
    SearchFailureKind.NO_MATCH: "No trains found matching your search",
    SearchFailureKind.FAILED: "Search failed. Please try again.",
    SearchFailureKind.CONNECTION: "Search error. Please check your connection.",
}


class SearchFailure(BaseModel):
    """Why the last search did not change the selection.

    ``NO_MATCH`` is not an error: the server answered, nothing matched.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: SearchFailureKind
    query: str
    message: str

    @classmethod
    def of(cls, kind: SearchFailureKind, query: str) -> SearchFailure:
        return cls(kind=kind, query=query, message=_MESSAGES[kind])

    @property
    def is_no_match(self) -> bool:
        return self.kind == SearchFailureKind.NO_MATCH
