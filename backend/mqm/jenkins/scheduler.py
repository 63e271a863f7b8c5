"""
MQM CI Bridge — Jenkins build scheduling.

Jenkins owns its queue and quiet periods; this module only asks it to
enqueue or abort a build through the remote-access API:

  POST {JENKINS}/job/<a>/job/<b>/build?delay=<n>sec
  POST {JENKINS}/job/<a>/job/<b>/buildWithParameters?delay=<n>sec&<params>
  POST {JENKINS}/job/<a>/job/<b>/<number>/stop
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, Protocol

import httpx

from mqm.core.config import JenkinsConfig
from mqm.errors import BuildSchedulerError
from mqm.utils.logging import jenkins_logger as logger, round_trip

JOB_LEVEL_SEPARATOR = "/job/"


class ParentKind(str, enum.Enum):
    ROOT = "ROOT"
    FOLDER = "FOLDER"
    MULTI_BRANCH = "MULTI_BRANCH"


@dataclass(frozen=True)
class HostJob:
    """What the bridge needs to know about a Jenkins job."""
    name: str
    full_name: str
    display_name: str = ""
    parent_kind: ParentKind = ParentKind.ROOT
    quiet_period: int = 0


@dataclass(frozen=True)
class BuildRun:
    job: HostJob
    number: int
    display_name: str = ""

    @property
    def label(self) -> str:
        return self.display_name or f"#{self.number}"


@dataclass(frozen=True)
class BuildCause:
    """Why a build was requested; forwarded to Jenkins as the build cause."""
    description: str


def translate_folder_job_name(full_name: str) -> str:
    """``folder/branch`` → ``folder/job/branch``."""
    return full_name.replace("/", JOB_LEVEL_SEPARATOR)


def job_url_path(job: HostJob) -> str:
    return "job/" + translate_folder_job_name(job.full_name)


class BuildScheduler(Protocol):
    def schedule(
        self,
        job: HostJob,
        delay: int,
        cause: BuildCause,
        parameters: dict[str, str] | None = None,
    ) -> str | None:
        ...

    def stop(self, run: BuildRun) -> None:
        ...


class JenkinsBuildScheduler:
    """BuildScheduler backed by Jenkins' remote-access REST API."""

    def __init__(self, config: JenkinsConfig, transport: httpx.BaseTransport | None = None):
        self.base_url = config.base_url.rstrip("/")
        self._http = httpx.Client(
            timeout=30.0,
            auth=(config.username, config.api_token),
            transport=transport,
        )

    def schedule(
        self,
        job: HostJob,
        delay: int,
        cause: BuildCause,
        parameters: dict[str, str] | None = None,
    ) -> str | None:
        """Enqueue a build and return the queue item URL, if Jenkins sent one."""
        params: dict[str, Any] = {"delay": f"{delay}sec", "cause": cause.description}
        if parameters:
            params.update(parameters)
            endpoint = "buildWithParameters"
        else:
            endpoint = "build"
        resp = self._post(f"{job_url_path(job)}/{endpoint}", params, "schedule", job.full_name)
        queue_url = resp.headers.get("Location")
        logger.info("  Build of '%s' queued (delay %ds) → %s", job.full_name, delay, queue_url)
        return queue_url

    def stop(self, run: BuildRun) -> None:
        self._post(f"{job_url_path(run.job)}/{run.number}/stop", None, "stop", run.job.full_name)

    def close(self) -> None:
        self._http.close()

    def _post(self, path: str, params: dict[str, Any] | None, action: str, job: str) -> httpx.Response:
        with round_trip(f"{action} '{job}'", logger):
            try:
                resp = self._http.post(f"{self.base_url}/{path}", params=params)
            except httpx.HTTPError as exc:
                logger.error("  Jenkins %s of '%s' failed: %s", action, job, exc)
                raise BuildSchedulerError(action, job) from exc
            if not resp.is_success:
                raise BuildSchedulerError(action, job, resp.status_code)
        return resp
