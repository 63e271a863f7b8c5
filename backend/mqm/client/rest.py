"""
MQM CI Bridge — MQM REST client.

One public method per MQM operation, each a single round-trip:

  POST analytics/ci/test-results                          — push a result report
  GET  analytics/ci/test-results/{id}                     — poll its processing
  GET  analytics/ci/servers/{server}/jobs/{job}/configuration
  POST analytics/ci/servers/{server}/jobs/{job}/configuration — create pipeline
  PUT  analytics/ci/servers/{server}/jobs/{job}/configuration — update pipeline
  PUT  analytics/ci/events                                — best-effort events
  GET  releases | taxonomy_nodes | list_nodes             — paged workspace queries
"""

from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path
from typing import IO, Any, Iterator, Union

import httpx

from mqm.client import query
from mqm.client.base import AbstractMqmRestClient
from mqm.client.factories import (
    EntityFactory,
    ListItemEntityFactory,
    ReleaseEntityFactory,
    TaxonomyEntityFactory,
    from_field,
    from_taxonomy,
    parse_fields_metadata,
    to_pipeline,
)
from mqm.errors import (
    LocalFileNotFoundError,
    MqmError,
    ResponseParseError,
    TransportFailedError,
)
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
from mqm.models.test_results import TestResultStatus
from mqm.utils.logging import client_logger as logger, round_trip

DATETIME_FORMAT = "%Y-%m-%dT%H:%M:%S%z"

PREFIX_CI = "analytics/ci/"

URI_TEST_RESULT_PUSH = PREFIX_CI + "test-results"
URI_TEST_RESULT_STATUS = PREFIX_CI + "test-results/{0}"
URI_JOB_CONFIGURATION = PREFIX_CI + "servers/{0}/jobs/{1}/configuration"
URI_PUT_EVENTS = PREFIX_CI + "events"
URI_METADATA = PREFIX_CI + "metadata"
URI_RELEASES = "releases"
URI_LIST_ITEMS = "list_nodes"
URI_TAXONOMY_NODES = "taxonomy_nodes"

CONTEXT_PIPELINE = "pipeline"
CHUNK_SIZE = 64 * 1024

TestResultSource = Union[str, Path, bytes, IO[bytes]]


def _read_chunks(stream: IO[bytes]) -> Iterator[bytes]:
    while True:
        chunk = stream.read(CHUNK_SIZE)
        if not chunk:
            return
        yield chunk


def parse_datetime(value: str) -> datetime:
    return datetime.strptime(value, DATETIME_FORMAT)


def pipeline_update_payload(update: PipelineUpdate) -> dict[str, Any]:
    """Build the ``{"data": [pipeline]}`` body; unset members are omitted."""
    pipeline: dict[str, Any] = {
        "contextEntityType": CONTEXT_PIPELINE,
        "contextEntityId": update.id,
        "workspaceId": update.workspace_id,
    }
    if update.name is not None:
        pipeline["contextEntityName"] = update.name
    if update.release.action is ReleaseAction.CLEAR:
        pipeline["releaseId"] = None
    elif update.release.action is ReleaseAction.SET:
        pipeline["releaseId"] = update.release.release_id
    if update.taxonomies is not None:
        pipeline["taxonomies"] = [from_taxonomy(t) for t in update.taxonomies]
    if update.fields is not None:
        pipeline["tags"] = [from_field(f) for f in update.fields]
    return {"data": [pipeline]}


class MqmRestClient(AbstractMqmRestClient):
    """Synchronous MQM client. Safe to share: calls keep no per-request state."""

    # ---- Test results ----

    def post_test_result(self, source: TestResultSource, skip_errors: bool = False) -> int:
        """Upload a test-result XML report and return its processing id."""
        stream: IO[bytes] | None = None
        if isinstance(source, (str, Path)):
            try:
                stream = open(source, "rb")
            except FileNotFoundError as exc:
                raise LocalFileNotFoundError(str(source)) from exc
            content: Any = _read_chunks(stream)
        elif isinstance(source, bytes):
            content = source
        else:
            content = _read_chunks(source)

        try:
            with round_trip("post test result"):
                with self._exchange(
                    "POST",
                    self.shared_space_internal_api_uri(URI_TEST_RESULT_PUSH),
                    params={"skip-errors": str(skip_errors).lower()},
                    headers={"Content-Type": "application/xml"},
                    content=content,
                ) as resp:
                    if resp.status_code != httpx.codes.ACCEPTED:
                        raise self._request_failure("Test result post failed", resp)
                    obj = self._json_object(resp, "Test result post")
                    try:
                        result_id = int(obj["id"])
                    except (KeyError, TypeError, ValueError) as exc:
                        raise ResponseParseError(f"Test result post: no id in response ({exc!r})") from exc
        except FileNotFoundError as exc:
            raise LocalFileNotFoundError(str(exc.filename or source)) from exc
        except OSError as exc:
            raise TransportFailedError(f"Cannot post test results to MQM: {exc}", exc) from exc
        finally:
            if stream is not None:
                stream.close()

        logger.info("  Test result accepted → id %d", result_id)
        return result_id

    def get_test_result_status(self, result_id: int) -> TestResultStatus:
        with round_trip("test result status"):
            with self._exchange(
                "GET", self.shared_space_internal_api_uri(URI_TEST_RESULT_STATUS, result_id)
            ) as resp:
                if resp.status_code != httpx.codes.OK:
                    raise self._request_failure("Result status retrieval failed", resp)
                obj = self._json_object(resp, "Result status")

        until = None
        if obj.get("until") is not None:
            try:
                until = parse_datetime(str(obj["until"]))
            except ValueError as exc:
                raise ResponseParseError(f"Cannot obtain status: bad 'until' value ({exc})") from exc
        if "status" not in obj:
            raise ResponseParseError("Cannot obtain status: no 'status' in response")
        return TestResultStatus(status=str(obj["status"]), until=until)

    # ---- Job configuration / pipelines ----

    def get_job_configuration(self, server_id: str, job_name: str) -> JobConfiguration:
        with round_trip("job configuration"):
            with self._exchange(
                "GET",
                self.shared_space_internal_api_uri(URI_JOB_CONFIGURATION, server_id, job_name),
            ) as resp:
                if resp.status_code != httpx.codes.OK:
                    raise self._request_failure("Job configuration retrieval failed", resp)
                obj = self._json_object(resp, "Job configuration")

        pipelines: list[Pipeline] = []
        for context in self._json_objects(obj, "data", "Job configuration"):
            if context.get("contextEntityType") == CONTEXT_PIPELINE:
                pipelines.append(to_pipeline(context))
            else:
                logger.info(
                    "Context type '%s' is not supported", context.get("contextEntityType")
                )
        return JobConfiguration(pipelines=pipelines)

    def create_pipeline(
        self,
        server_id: str,
        project_name: str,
        pipeline_name: str,
        workspace_id: int,
        release_id: int | None,
        structure_json: str,
        server_json: str,
    ) -> Pipeline:
        payload = {
            "contextEntityType": CONTEXT_PIPELINE,
            "contextEntityName": pipeline_name,
            "workspaceId": workspace_id,
            "releaseId": release_id,
            "server": json.loads(server_json),
            "structure": json.loads(structure_json),
        }
        with round_trip(f"create pipeline '{pipeline_name}'"):
            with self._exchange(
                "POST",
                self.shared_space_internal_api_uri(URI_JOB_CONFIGURATION, server_id, project_name),
                json=payload,
            ) as resp:
                if resp.status_code != httpx.codes.CREATED:
                    raise self._request_failure("Pipeline creation failed", resp)
                obj = self._json_object(resp, "Pipeline creation")

        return self._find_pipeline(
            obj,
            lambda item: bool(item.get("pipelineRoot"))
            and item.get("contextEntityName") == pipeline_name
            and _same_id(item.get("workspaceId"), workspace_id),
        )

    def update_pipeline(self, server_id: str, job_name: str, update: PipelineUpdate) -> Pipeline:
        with round_trip(f"update pipeline {update.id}"):
            with self._exchange(
                "PUT",
                self.shared_space_internal_api_uri(URI_JOB_CONFIGURATION, server_id, job_name),
                json=pipeline_update_payload(update),
            ) as resp:
                if resp.status_code != httpx.codes.OK:
                    raise self._request_failure("Pipeline update failed", resp)
                obj = self._json_object(resp, "Pipeline update")

        return self._find_pipeline(
            obj, lambda item: _same_id(item.get("contextEntityId"), update.id)
        )

    def update_pipeline_metadata(
        self,
        server_id: str,
        project_name: str,
        pipeline_id: int,
        pipeline_name: str,
        workspace_id: int,
        release: ReleaseAssignment,
    ) -> Pipeline:
        return self.update_pipeline(
            server_id,
            project_name,
            PipelineUpdate(
                id=pipeline_id, workspace_id=workspace_id, name=pipeline_name, release=release
            ),
        )

    def update_pipeline_tags(
        self,
        server_id: str,
        job_name: str,
        pipeline_id: int,
        workspace_id: int,
        taxonomies: list[Taxonomy],
        fields: list[Field],
    ) -> Pipeline:
        return self.update_pipeline(
            server_id,
            job_name,
            PipelineUpdate(
                id=pipeline_id, workspace_id=workspace_id, taxonomies=taxonomies, fields=fields
            ),
        )

    def _find_pipeline(self, obj: dict[str, Any], matches) -> Pipeline:
        """The server echoes every pipeline of the job; pick the one we touched."""
        for item in self._json_objects(obj, "data", "Pipeline lookup"):
            if item.get("contextEntityType") != CONTEXT_PIPELINE:
                continue
            if matches(item):
                return to_pipeline(item)
        raise ResponseParseError("Failed to obtain pipeline: item not found")

    # ---- Events ----

    def put_events(self, events_json: str) -> bool:
        """
        Deliver CI events. Best-effort: delivery failures are logged and
        reported as False. A 307 means the session expired; sign in again
        and resend once.
        """
        url = self.shared_space_internal_api_uri(URI_PUT_EVENTS)
        headers = {"Content-Type": "application/json"}
        try:
            with self._exchange("PUT", url, content=events_json, headers=headers) as resp:
                status = resp.status_code
            if status == httpx.codes.TEMPORARY_REDIRECT:
                logger.info("  Events endpoint redirected; signing in again")
                self.login()
                with self._exchange("PUT", url, content=events_json, headers=headers) as resp:
                    status = resp.status_code
        except (MqmError, httpx.HTTPError) as exc:
            logger.error("put request failed while sending events: %s", exc)
            return False

        if status != httpx.codes.OK:
            logger.error("put request failed while sending events: %d", status)
            return False
        return True

    # ---- Workspace queries ----

    def query_releases(
        self, name: str | None, workspace_id: int, offset: int, limit: int
    ) -> PagedList[Release]:
        conditions = query.name_conditions(name)
        return self._get_entities(
            workspace_id, URI_RELEASES, conditions, offset, limit, ReleaseEntityFactory()
        )

    def query_taxonomy_items(
        self,
        taxonomy_root_id: int | None,
        name: str | None,
        workspace_id: int,
        offset: int,
        limit: int,
    ) -> PagedList[Taxonomy]:
        conditions = query.name_conditions(name)
        if taxonomy_root_id is not None:
            conditions.append(query.condition("taxonomy_root.id", str(taxonomy_root_id)))
        conditions.append(query.condition("subtype", "taxonomy_item_node"))
        return self._get_entities(
            workspace_id, URI_TAXONOMY_NODES, conditions, offset, limit, TaxonomyEntityFactory()
        )

    def query_taxonomy_categories(
        self, name: str | None, workspace_id: int, offset: int, limit: int
    ) -> PagedList[Taxonomy]:
        conditions = query.name_conditions(name)
        conditions.append(query.condition("subtype", "taxonomy_category_node"))
        return self._get_entities(
            workspace_id, URI_TAXONOMY_NODES, conditions, offset, limit, TaxonomyEntityFactory()
        )

    def query_taxonomies(
        self, name: str | None, workspace_id: int, offset: int, limit: int
    ) -> PagedList[Taxonomy]:
        conditions = query.name_conditions(name, "taxonomy_root.name")
        return self._get_entities(
            workspace_id, URI_TAXONOMY_NODES, conditions, offset, limit, TaxonomyEntityFactory()
        )

    def query_list_items(
        self, list_id: int, name: str | None, workspace_id: int, offset: int, limit: int
    ) -> PagedList[ListItem]:
        conditions = query.name_conditions(name)
        conditions.append(query.condition("list_root.id", str(list_id)))
        return self._get_entities(
            workspace_id, URI_LIST_ITEMS, conditions, offset, limit, ListItemEntityFactory()
        )

    def get_fields_metadata(self, workspace_id: int) -> list[FieldMetadata]:
        with round_trip("fields metadata"):
            with self._exchange("GET", self.workspace_api_uri(workspace_id, URI_METADATA)) as resp:
                if resp.status_code != httpx.codes.OK:
                    raise self._request_failure("Fields metadata retrieval failed", resp)
                obj = self._json_object(resp, "Fields metadata")
        return parse_fields_metadata(obj)

    def _get_entities(
        self,
        workspace_id: int,
        collection: str,
        conditions: list[str],
        offset: int,
        limit: int,
        factory: EntityFactory,
    ) -> PagedList:
        with round_trip(f"query {collection}"):
            with self._exchange(
                "GET",
                self.workspace_api_uri(workspace_id, collection),
                params=query.query_params(conditions, offset, limit),
            ) as resp:
                if resp.status_code != httpx.codes.OK:
                    raise self._request_failure(f"Entity retrieval failed ({collection})", resp)
                obj = self._json_object(resp, collection)

        items = [factory.build(item) for item in self._json_objects(obj, "data", collection)]
        try:
            total = int(obj.get("total_count", len(items)))
        except (TypeError, ValueError) as exc:
            raise ResponseParseError(f"{collection}: bad total_count ({exc})") from exc
        return PagedList(items=items, offset=offset, total_count=total)


def _same_id(value: Any, expected: int) -> bool:
    try:
        return int(value) == expected
    except (TypeError, ValueError):
        return False
