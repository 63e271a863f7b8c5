"""MQM data models — typed values exchanged with the MQM REST API."""

from mqm.models.entities import ListItem, PagedList, Release
from mqm.models.pipeline import (
    Field,
    FieldMetadata,
    JobConfiguration,
    Pipeline,
    PipelineUpdate,
    ReleaseAction,
    ReleaseAssignment,
    Taxonomy,
)
from mqm.models.test_results import TestOutcome, TestResultStatus

__all__ = [
    "Field",
    "FieldMetadata",
    "JobConfiguration",
    "ListItem",
    "PagedList",
    "Pipeline",
    "PipelineUpdate",
    "Release",
    "ReleaseAction",
    "ReleaseAssignment",
    "Taxonomy",
    "TestOutcome",
    "TestResultStatus",
]
