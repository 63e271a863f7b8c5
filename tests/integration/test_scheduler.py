"""Integration tests for the Jenkins remote-access scheduler."""

import httpx
import pytest

from mqm.core.config import JenkinsConfig
from mqm.errors import BuildSchedulerError
from mqm.jenkins.scheduler import (
    BuildCause,
    BuildRun,
    HostJob,
    JenkinsBuildScheduler,
    ParentKind,
)


@pytest.fixture
def jenkins_requests():
    return []


@pytest.fixture
def scheduler(jenkins_requests):
    def handler(request):
        jenkins_requests.append(request)
        if request.url.path.endswith("/stop") and "broken" in request.url.path:
            return httpx.Response(403)
        return httpx.Response(201, headers={"Location": "http://jenkins.test/queue/item/77/"})

    s = JenkinsBuildScheduler(
        JenkinsConfig(base_url="http://jenkins.test/", username="bot", api_token="tok"),
        transport=httpx.MockTransport(handler),
    )
    yield s
    s.close()


JOB = HostJob(name="main", full_name="app/main", parent_kind=ParentKind.MULTI_BRANCH, quiet_period=3)


class TestJenkinsBuildScheduler:
    def test_schedule_without_parameters(self, scheduler, jenkins_requests):
        queue_url = scheduler.schedule(JOB, 3, BuildCause("Triggered by MQM"))
        assert queue_url == "http://jenkins.test/queue/item/77/"
        request = jenkins_requests[0]
        assert request.method == "POST"
        assert request.url.path == "/job/app/job/main/build"
        assert request.url.params["delay"] == "3sec"
        assert request.url.params["cause"] == "Triggered by MQM"
        assert request.headers["Authorization"].startswith("Basic ")

    def test_schedule_with_parameters(self, scheduler, jenkins_requests):
        scheduler.schedule(JOB, 0, BuildCause("MQM"), {"SUITE": "smoke"})
        request = jenkins_requests[0]
        assert request.url.path == "/job/app/job/main/buildWithParameters"
        assert request.url.params["SUITE"] == "smoke"

    def test_stop(self, scheduler, jenkins_requests):
        scheduler.stop(BuildRun(job=JOB, number=12))
        assert jenkins_requests[0].url.path == "/job/app/job/main/12/stop"

    def test_refused_stop(self, scheduler):
        job = HostJob(name="broken", full_name="broken")
        with pytest.raises(BuildSchedulerError, match="HTTP 403"):
            scheduler.stop(BuildRun(job=job, number=1))

    def test_unreachable_jenkins(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        s = JenkinsBuildScheduler(
            JenkinsConfig(base_url="http://jenkins.test", username="bot", api_token="tok"),
            transport=httpx.MockTransport(handler),
        )
        with pytest.raises(BuildSchedulerError) as exc_info:
            s.schedule(JOB, 0, BuildCause("MQM"))
        assert exc_info.value.code == "BUILD_SCHEDULE_FAILED"
