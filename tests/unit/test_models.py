"""Unit tests for the MQM value models."""

import pytest
from pydantic import ValidationError

from mqm.models import (
    JobConfiguration,
    PagedList,
    Pipeline,
    PipelineUpdate,
    Release,
    ReleaseAction,
    ReleaseAssignment,
    Taxonomy,
    TestOutcome,
    TestResultStatus,
)


class TestReleaseAssignment:
    def test_legacy_none_keeps(self):
        assert ReleaseAssignment.from_legacy(None).action is ReleaseAction.KEEP

    def test_legacy_minus_one_clears(self):
        assert ReleaseAssignment.from_legacy(-1).action is ReleaseAction.CLEAR

    def test_legacy_value_sets(self):
        r = ReleaseAssignment.from_legacy(1005)
        assert r.action is ReleaseAction.SET
        assert r.release_id == 1005

    def test_update_defaults_to_keep(self):
        u = PipelineUpdate(id=1, workspace_id=2)
        assert u.release == ReleaseAssignment.keep()
        assert u.name is None
        assert u.taxonomies is None


class TestPipelineModels:
    def test_pipeline_defaults(self):
        p = Pipeline(id=1, name="Nightly", root=True, workspace_id=7)
        assert p.release_id is None
        assert p.taxonomies == []
        assert p.fields == []

    def test_pipeline_is_frozen(self):
        p = Pipeline(id=1, name="Nightly", root=True, workspace_id=7)
        with pytest.raises(ValidationError):
            p.name = "Other"

    def test_taxonomy_chain(self):
        t = Taxonomy(id=2, name="Linux", root=Taxonomy(id=1, name="OS"))
        assert t.root.name == "OS"
        assert t.root.root is None

    def test_job_configuration_empty(self):
        assert JobConfiguration().pipelines == []


class TestPagedList:
    def test_has_more(self):
        page = PagedList[Release](items=[Release(id=1, name="R1")], offset=0, total_count=3)
        assert page.has_more is True

    def test_last_page(self):
        page = PagedList[Release](items=[Release(id=3, name="R3")], offset=2, total_count=3)
        assert page.has_more is False


class TestResultModels:
    def test_status_without_until(self):
        s = TestResultStatus(status="queued")
        assert s.until is None

    def test_outcome_pretty_names(self):
        assert TestOutcome.PASSED.to_pretty_name() == "Passed"
        assert TestOutcome.from_pretty_name("Skipped") is TestOutcome.SKIPPED

    def test_unknown_outcome(self):
        with pytest.raises(ValueError, match="Unsupported TestOutcome 'Broken'"):
            TestOutcome.from_pretty_name("Broken")
