"""Unit tests for JSON → model converters."""

import pytest

from mqm.client.factories import (
    ListItemEntityFactory,
    ReleaseEntityFactory,
    TaxonomyEntityFactory,
    from_taxonomy,
    parse_fields_metadata,
    to_pipeline,
    to_taxonomy,
)
from mqm.errors import ResponseParseError
from mqm.models import Taxonomy


def _pipeline_json(**overrides):
    item = {
        "contextEntityType": "pipeline",
        "contextEntityId": 11,
        "contextEntityName": "Nightly",
        "pipelineRoot": True,
        "workspaceId": 7,
    }
    item.update(overrides)
    return item


class TestEntityFactories:
    def test_release(self):
        r = ReleaseEntityFactory().create('{"id": 1005, "name": "Q3"}')
        assert r.id == 1005
        assert r.name == "Q3"

    def test_list_item(self):
        item = ListItemEntityFactory().build({"id": "12", "name": "Chrome"})
        assert item.id == 12

    def test_taxonomy_recurses_into_root(self):
        t = TaxonomyEntityFactory().build({
            "id": 3, "name": "Ubuntu",
            "taxonomy_root": {"id": 1, "name": "OS"},
        })
        assert t.root == Taxonomy(id=1, name="OS")

    def test_taxonomy_without_root(self):
        t = TaxonomyEntityFactory().build({"id": 1, "name": "OS", "taxonomy_root": None})
        assert t.root is None

    def test_missing_field_is_parse_error(self):
        with pytest.raises(ResponseParseError):
            ReleaseEntityFactory().build({"id": 1})

    def test_malformed_json_is_parse_error(self):
        with pytest.raises(ResponseParseError):
            ReleaseEntityFactory().create("{not json")

    def test_fields_metadata(self):
        fields = parse_fields_metadata({"lists": [{
            "id": 4, "name": "Browser", "logicalName": "hp.qc.browser",
            "openList": True, "multiValueList": False,
        }]})
        assert len(fields) == 1
        assert fields[0].logical_name == "hp.qc.browser"
        assert fields[0].open_list is True

    def test_fields_metadata_requires_lists(self):
        with pytest.raises(ResponseParseError, match="no 'lists' array"):
            parse_fields_metadata({"data": []})


class TestPipelineCodecs:
    def test_to_pipeline_minimal(self):
        p = to_pipeline(_pipeline_json())
        assert p.id == 11
        assert p.root is True
        assert p.release_id is None

    def test_to_pipeline_null_release(self):
        assert to_pipeline(_pipeline_json(releaseId=None)).release_id is None

    def test_to_pipeline_with_tags_and_taxonomies(self):
        p = to_pipeline(_pipeline_json(
            releaseId=5,
            taxonomies=[{"id": 2, "name": "Linux", "parent": {"id": 1, "name": "OS", "parent": None}}],
            tags=[{"id": 9, "name": "Chrome", "parentId": 4,
                   "parentName": "Browser", "parentLogicalName": "hp.qc.browser"}],
        ))
        assert p.release_id == 5
        assert p.taxonomies[0].root.name == "OS"
        assert p.fields[0].parent_logical_name == "hp.qc.browser"

    def test_to_pipeline_missing_name(self):
        item = _pipeline_json()
        del item["contextEntityName"]
        with pytest.raises(ResponseParseError):
            to_pipeline(item)

    def test_taxonomy_parent_chain(self):
        t = to_taxonomy({"id": 3, "name": "a", "parent": {"id": 2, "name": "b", "parent": {"id": 1, "name": "c"}}})
        assert t.root.root.name == "c"
        assert t.root.root.root is None

    def test_from_taxonomy_writes_explicit_null_parent(self):
        assert from_taxonomy(Taxonomy(id=1, name="OS")) == {"id": 1, "name": "OS", "parent": None}

    def test_from_taxonomy_omits_unset_members(self):
        t = Taxonomy(name="new", root=Taxonomy(id=1))
        assert from_taxonomy(t) == {"name": "new", "parent": {"id": 1, "parent": None}}
