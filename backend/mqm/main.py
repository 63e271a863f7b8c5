"""
MQM CI Bridge — FastAPI service

Endpoints:
  POST /v1/test-results                               — XML report → MQM (returns id)
  GET  /v1/test-results/{id}                          — processing status
  PUT  /v1/events                                     — forward CI events (best-effort)
  GET  /v1/servers/{server}/jobs/{job}/configuration  — pipelines of a job
  POST /v1/jobs/{job}/builds                          — schedule a Jenkins build
  POST /v1/jobs/{job}/builds/{number}/stop            — abort a Jenkins build
  GET  /health                                        — Health check
"""

import uuid
from functools import lru_cache

from fastapi import Depends, FastAPI, HTTPException, Request
from pydantic import BaseModel, Field
from starlette.concurrency import run_in_threadpool

from mqm.client.rest import MqmRestClient
from mqm.core.config import load_config, validate_config
from mqm.errors import BuildSchedulerError, MqmError, RequestFailedError
from mqm.jenkins.processor import WorkflowJobProcessor
from mqm.jenkins.scheduler import (
    BuildCause,
    BuildRun,
    BuildScheduler,
    HostJob,
    JenkinsBuildScheduler,
    ParentKind,
)
from mqm.utils.logging import logger

MAX_REPORT_BYTES = 50 * 1024 * 1024

app = FastAPI(
    title="MQM CI Bridge",
    description="Publish Jenkins test results, events and pipelines to MQM.",
    version="1.0.0",
)


@app.on_event("startup")
async def _startup_banner():
    settings = load_config()
    validate_config(settings)
    logger.info("")
    logger.info("╔══════════════════════════════════════════════════╗")
    logger.info("║              MQM CI Bridge  ·  v1               ║")
    logger.info("╠══════════════════════════════════════════════════╣")
    logger.info("║  MQM      : %-36s║", settings.mqm.location)
    logger.info("║  Space    : %-36s║", settings.mqm.shared_space)
    logger.info("║  Jenkins  : %-36s║", settings.jenkins.base_url)
    logger.info("╚══════════════════════════════════════════════════╝")
    logger.info("")


# ──────────────────────────────────────────────────────────
# Dependencies
# ──────────────────────────────────────────────────────────

@lru_cache(maxsize=1)
def get_mqm_client() -> MqmRestClient:
    return MqmRestClient(load_config().mqm)


@lru_cache(maxsize=1)
def get_scheduler() -> BuildScheduler:
    return JenkinsBuildScheduler(load_config().jenkins)


def _to_http_error(request_id: str, exc: MqmError) -> HTTPException:
    logger.warning("[%s] MQM error: %s", request_id, exc.code)
    status = 502
    if isinstance(exc, RequestFailedError) and exc.status_code == 404:
        status = 404
    return HTTPException(status_code=status, detail=exc.to_dict())


def _host_job(job_name: str, parent_kind: ParentKind, quiet_period: int) -> HostJob:
    short_name = job_name.rsplit("/", 1)[-1]
    return HostJob(
        name=short_name,
        full_name=job_name,
        display_name=short_name,
        parent_kind=parent_kind,
        quiet_period=quiet_period,
    )


# ──────────────────────────────────────────────────────────
# Request models
# ──────────────────────────────────────────────────────────

class BuildRequest(BaseModel):
    cause: str = Field(default="Triggered by MQM", description="Build cause shown in Jenkins")
    parent_kind: ParentKind = Field(
        default=ParentKind.ROOT,
        description="ROOT | FOLDER | MULTI_BRANCH — where the job lives in Jenkins",
    )
    quiet_period: int = Field(default=0, ge=0, description="Seconds Jenkins waits before starting")
    parameters: dict[str, str] = Field(default_factory=dict)


# ──────────────────────────────────────────────────────────
# Endpoints
# ──────────────────────────────────────────────────────────

@app.get("/health")
async def health():
    return {"status": "ok", "service": "mqm-ci-bridge", "version": "1.0.0"}


@app.post("/v1/test-results", status_code=202)
async def post_test_results(
    request: Request,
    skip_errors: bool = False,
    client: MqmRestClient = Depends(get_mqm_client),
):
    """Forward a raw test-result XML body to MQM."""
    request_id = uuid.uuid4().hex[:12]
    body = await request.body()
    logger.info("[%s] POST /v1/test-results — %d bytes", request_id, len(body))
    if not body:
        raise HTTPException(status_code=422, detail="Empty test result report")
    if len(body) > MAX_REPORT_BYTES:
        raise HTTPException(status_code=413, detail="Report exceeds 50MB limit")

    try:
        result_id = await run_in_threadpool(client.post_test_result, body, skip_errors)
    except MqmError as exc:
        raise _to_http_error(request_id, exc)
    return {"id": result_id}


@app.get("/v1/test-results/{result_id}")
def get_test_result_status(result_id: int, client: MqmRestClient = Depends(get_mqm_client)):
    request_id = uuid.uuid4().hex[:12]
    try:
        status = client.get_test_result_status(result_id)
    except MqmError as exc:
        raise _to_http_error(request_id, exc)
    return status.model_dump(mode="json")


@app.put("/v1/events")
async def put_events(request: Request, client: MqmRestClient = Depends(get_mqm_client)):
    """Events are best-effort: a failed delivery is reported, not raised."""
    body = await request.body()
    try:
        events = body.decode("utf-8")
    except UnicodeDecodeError:
        raise HTTPException(status_code=422, detail="Events body is not valid UTF-8")
    delivered = await run_in_threadpool(client.put_events, events)
    return {"delivered": delivered}


@app.get("/v1/servers/{server_id}/jobs/{job_name:path}/configuration")
def get_job_configuration(
    server_id: str, job_name: str, client: MqmRestClient = Depends(get_mqm_client)
):
    request_id = uuid.uuid4().hex[:12]
    logger.info("[%s] GET configuration — server=%s job=%s", request_id, server_id, job_name)
    try:
        configuration = client.get_job_configuration(server_id, job_name)
    except MqmError as exc:
        raise _to_http_error(request_id, exc)
    return configuration.model_dump()


@app.post("/v1/jobs/{job_name:path}/builds", status_code=201)
def schedule_build(
    job_name: str, req: BuildRequest, scheduler: BuildScheduler = Depends(get_scheduler)
):
    request_id = uuid.uuid4().hex[:12]
    processor = WorkflowJobProcessor(
        _host_job(job_name, req.parent_kind, req.quiet_period), scheduler
    )
    logger.info(
        "[%s] POST build — %s (quiet period %ds)",
        request_id, processor.get_translated_job_name(), req.quiet_period,
    )
    try:
        queue_url = processor.schedule_build(BuildCause(req.cause), req.parameters or None)
    except BuildSchedulerError as exc:
        raise _to_http_error(request_id, exc)
    return {"job": processor.get_translated_job_name(), "queue_url": queue_url}


@app.post("/v1/jobs/{job_name:path}/builds/{number}/stop", status_code=202)
def stop_build(
    job_name: str,
    number: int,
    parent_kind: ParentKind = ParentKind.ROOT,
    scheduler: BuildScheduler = Depends(get_scheduler),
):
    job = _host_job(job_name, parent_kind, 0)
    processor = WorkflowJobProcessor(job, scheduler)
    processor.stop_build(BuildRun(job=job, number=number))
    return {"job": processor.get_translated_job_name(), "build": number, "stop_requested": True}
