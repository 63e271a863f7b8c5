"""
MQM CI Bridge — Jenkins job processors.

Thin adapters over a Jenkins job: they name it the way MQM expects and
forward build requests to a BuildScheduler.
"""

from __future__ import annotations

import httpx

from mqm.errors import MqmError
from mqm.jenkins.scheduler import (
    BuildCause,
    BuildRun,
    BuildScheduler,
    HostJob,
    ParentKind,
    translate_folder_job_name,
)
from mqm.utils.logging import jenkins_logger as logger


class ProjectProcessor:
    def __init__(self, job: HostJob, scheduler: BuildScheduler):
        self.job = job
        self.scheduler = scheduler

    def get_translated_job_name(self) -> str:
        if self.job.parent_kind is ParentKind.FOLDER:
            return translate_folder_job_name(self.job.full_name)
        return self.job.name

    def schedule_build(
        self, cause: BuildCause, parameters: dict[str, str] | None = None
    ) -> str | None:
        return self.scheduler.schedule(self.job, self.job.quiet_period, cause, parameters)

    def stop_build(self, run: BuildRun) -> None:
        try:
            self.scheduler.stop(run)
            logger.info("Build is stopped : %s %s", self.job.display_name or self.job.name, run.label)
        except (MqmError, httpx.HTTPError) as exc:
            logger.warning("Failed to stop build '%s' : %s", run.label, exc)


class WorkflowJobProcessor(ProjectProcessor):
    """Pipeline jobs; branches of a multi-branch project live one level down."""

    def get_translated_job_name(self) -> str:
        if self.job.parent_kind is ParentKind.MULTI_BRANCH:
            return translate_folder_job_name(self.job.full_name)
        return super().get_translated_job_name()
