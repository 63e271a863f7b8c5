"""
MQM CI Bridge — Pipeline registration models.

A pipeline is a Jenkins job registered in an MQM workspace. These are
value objects: built from one response and handed back to the caller.
"""

from __future__ import annotations

import enum

from pydantic import BaseModel, ConfigDict, Field as PydanticField


class Taxonomy(BaseModel):
    """Classification tag. ``root`` points at the parent node, if any."""

    model_config = ConfigDict(frozen=True)

    id: int | None = None
    name: str | None = None
    root: Taxonomy | None = None


class Field(BaseModel):
    """A list value attached to a pipeline (an MQM "tag")."""

    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    parent_id: int
    parent_name: str
    parent_logical_name: str


class FieldMetadata(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    logical_name: str
    open_list: bool = False
    multi_value_list: bool = False


class Pipeline(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    root: bool
    workspace_id: int
    release_id: int | None = None
    taxonomies: list[Taxonomy] = PydanticField(default_factory=list)
    fields: list[Field] = PydanticField(default_factory=list)


class JobConfiguration(BaseModel):
    """All pipelines a Jenkins job takes part in."""

    model_config = ConfigDict(frozen=True)

    pipelines: list[Pipeline] = PydanticField(default_factory=list)


class ReleaseAction(str, enum.Enum):
    KEEP = "KEEP"
    CLEAR = "CLEAR"
    SET = "SET"


class ReleaseAssignment(BaseModel):
    """
    What an update does to a pipeline's release.

    KEEP leaves the release untouched (field omitted), CLEAR detaches it
    (explicit JSON null), SET points it at ``release_id``.
    """

    model_config = ConfigDict(frozen=True)

    action: ReleaseAction = ReleaseAction.KEEP
    release_id: int | None = None

    @classmethod
    def keep(cls) -> ReleaseAssignment:
        return cls(action=ReleaseAction.KEEP)

    @classmethod
    def clear(cls) -> ReleaseAssignment:
        return cls(action=ReleaseAction.CLEAR)

    @classmethod
    def to(cls, release_id: int) -> ReleaseAssignment:
        return cls(action=ReleaseAction.SET, release_id=release_id)

    @classmethod
    def from_legacy(cls, release_id: int | None) -> ReleaseAssignment:
        """Map the old ``None`` / ``-1`` / id convention onto an assignment."""
        if release_id is None:
            return cls.keep()
        if release_id == -1:
            return cls.clear()
        return cls.to(release_id)


class PipelineUpdate(BaseModel):
    """Partial update: ``None`` members are left unchanged on the server."""

    model_config = ConfigDict(frozen=True)

    id: int
    workspace_id: int
    name: str | None = None
    release: ReleaseAssignment = PydanticField(default_factory=ReleaseAssignment.keep)
    taxonomies: list[Taxonomy] | None = None
    fields: list[Field] | None = None
