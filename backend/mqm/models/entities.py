"""
MQM CI Bridge — Workspace entities returned by paged queries.
"""

from __future__ import annotations

from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")


class Release(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    name: str


class ListItem(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    name: str


class PagedList(BaseModel, Generic[T]):
    """One page of a workspace query."""

    model_config = ConfigDict(frozen=True)

    items: list[T] = Field(default_factory=list)
    offset: int = 0
    total_count: int = 0

    @property
    def has_more(self) -> bool:
        return self.offset + len(self.items) < self.total_count
