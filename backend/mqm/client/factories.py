"""
MQM CI Bridge — JSON → model converters.

One factory per paged entity type, plus the pipeline codecs used by the
job-configuration endpoints. Anything that does not decode cleanly is
reported as ResponseParseError so callers see a single failure type.
"""

from __future__ import annotations

import json
from typing import Any, Generic, TypeVar

from mqm.errors import ResponseParseError
from mqm.models.entities import ListItem, Release
from mqm.models.pipeline import Field, FieldMetadata, Pipeline, Taxonomy

E = TypeVar("E")

_DECODE_ERRORS = (KeyError, TypeError, ValueError)


class EntityFactory(Generic[E]):
    entity_name = "entity"

    def create(self, json_text: str) -> E:
        try:
            obj = json.loads(json_text)
        except ValueError as exc:
            raise ResponseParseError(f"Malformed {self.entity_name} JSON: {exc}") from exc
        return self.build(obj)

    def build(self, obj: dict[str, Any]) -> E:
        try:
            return self.do_create(obj)
        except _DECODE_ERRORS as exc:
            raise ResponseParseError(f"Cannot decode {self.entity_name}: {exc!r}") from exc

    def do_create(self, obj: dict[str, Any]) -> E:
        raise NotImplementedError


class ReleaseEntityFactory(EntityFactory[Release]):
    entity_name = "release"

    def do_create(self, obj: dict[str, Any]) -> Release:
        return Release(id=int(obj["id"]), name=str(obj["name"]))


class ListItemEntityFactory(EntityFactory[ListItem]):
    entity_name = "list item"

    def do_create(self, obj: dict[str, Any]) -> ListItem:
        return ListItem(id=int(obj["id"]), name=str(obj["name"]))


class TaxonomyEntityFactory(EntityFactory[Taxonomy]):
    """Taxonomy nodes nest their category under ``taxonomy_root``."""

    entity_name = "taxonomy"

    def do_create(self, obj: dict[str, Any]) -> Taxonomy:
        root = obj.get("taxonomy_root")
        return Taxonomy(
            id=int(obj["id"]),
            name=str(obj["name"]),
            root=self.do_create(root) if isinstance(root, dict) else None,
        )


class FieldMetadataFactory(EntityFactory[FieldMetadata]):
    entity_name = "field metadata"

    def do_create(self, obj: dict[str, Any]) -> FieldMetadata:
        return FieldMetadata(
            id=int(obj["id"]),
            name=str(obj["name"]),
            logical_name=str(obj["logicalName"]),
            open_list=bool(obj["openList"]),
            multi_value_list=bool(obj["multiValueList"]),
        )


# ---- Pipeline codecs ----

def to_taxonomy(obj: dict[str, Any]) -> Taxonomy:
    parent = obj.get("parent")
    return Taxonomy(
        id=int(obj["id"]),
        name=str(obj["name"]),
        root=to_taxonomy(parent) if isinstance(parent, dict) else None,
    )


def from_taxonomy(taxonomy: Taxonomy) -> dict[str, Any]:
    t: dict[str, Any] = {}
    if taxonomy.id is not None:
        t["id"] = taxonomy.id
    if taxonomy.name is not None:
        t["name"] = taxonomy.name
    t["parent"] = from_taxonomy(taxonomy.root) if taxonomy.root is not None else None
    return t


def to_field(obj: dict[str, Any]) -> Field:
    return Field(
        id=int(obj["id"]),
        name=str(obj["name"]),
        parent_id=int(obj["parentId"]),
        parent_name=str(obj["parentName"]),
        parent_logical_name=str(obj["parentLogicalName"]),
    )


def from_field(field: Field) -> dict[str, Any]:
    return {
        "id": field.id,
        "name": field.name,
        "parentId": field.parent_id,
        "parentName": field.parent_name,
        "parentLogicalName": field.parent_logical_name,
    }


def to_pipeline(obj: dict[str, Any]) -> Pipeline:
    try:
        release_id = obj.get("releaseId")
        return Pipeline(
            id=int(obj["contextEntityId"]),
            name=str(obj["contextEntityName"]),
            root=bool(obj["pipelineRoot"]),
            workspace_id=int(obj["workspaceId"]),
            release_id=int(release_id) if release_id is not None else None,
            taxonomies=[to_taxonomy(t) for t in obj.get("taxonomies") or []],
            fields=[to_field(f) for f in obj.get("tags") or []],
        )
    except _DECODE_ERRORS as exc:
        raise ResponseParseError(f"Cannot decode pipeline: {exc!r}") from exc


def parse_fields_metadata(obj: dict[str, Any]) -> list[FieldMetadata]:
    items = obj.get("lists")
    if not isinstance(items, list):
        raise ResponseParseError("Fields metadata: no 'lists' array")
    factory = FieldMetadataFactory()
    return [factory.build(item) for item in items]
