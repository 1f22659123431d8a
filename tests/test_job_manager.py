"""Tests for SparkApplication submission and state lookup."""

from unittest.mock import MagicMock, patch

import pytest
from kubernetes.client.rest import ApiException
from urllib3.exceptions import MaxRetryError

from policy_reco_orchestrator.core.exceptions import JobStatusError, JobSubmissionError
from policy_reco_orchestrator.models.job import JobRequest, JobState
from policy_reco_orchestrator.services.job_manager import SparkApplicationManager
from policy_reco_orchestrator.services.spec_builder import SparkApplicationBuilder

from conftest import make_config, make_core_api, make_pod


@pytest.fixture
def custom_api():
    return MagicMock()


@pytest.fixture
def manager(custom_api, core_api):
    with patch("policy_reco_orchestrator.services.job_manager.client") as k8s_client:
        k8s_client.CustomObjectsApi.return_value = custom_api
        k8s_client.CoreV1Api.return_value = core_api
        yield SparkApplicationManager(MagicMock(), make_config())


def _application(state=None, error_message=None):
    app = {"metadata": {"name": "policy-reco-abc", "namespace": "flow-visibility"}, "spec": {}}
    if state is not None:
        app["status"] = {"applicationState": {"state": state}}
        if error_message:
            app["status"]["applicationState"]["errorMessage"] = error_message
    return app


class TestSubmit:
    def test_creates_custom_object(self, manager, custom_api):
        spec = SparkApplicationBuilder(make_config()).build(JobRequest())
        custom_api.create_namespaced_custom_object.return_value = {
            "metadata": {"name": spec.name, "namespace": spec.namespace},
        }

        handle = manager.submit(spec)

        custom_api.create_namespaced_custom_object.assert_called_once_with(
            group="sparkoperator.k8s.io",
            version="v1beta2",
            namespace="flow-visibility",
            plural="sparkapplications",
            body=spec.body,
        )
        assert handle.job_id == spec.job_id
        assert handle.name == spec.name
        assert handle.state is JobState.NEW

    def test_rejection(self, manager, custom_api):
        spec = SparkApplicationBuilder(make_config()).build(JobRequest())
        error = ApiException(status=422, reason="Unprocessable Entity")
        error.body = '{"message": "spec.driver.memory invalid"}'
        custom_api.create_namespaced_custom_object.side_effect = error

        with pytest.raises(JobSubmissionError, match="422 Unprocessable Entity") as excinfo:
            manager.submit(spec)

        assert excinfo.value.details["job_id"] == spec.job_id

    def test_unreachable_control_plane(self, manager, custom_api):
        spec = SparkApplicationBuilder(make_config()).build(JobRequest())
        custom_api.create_namespaced_custom_object.side_effect = ConnectionRefusedError("refused")

        with pytest.raises(JobSubmissionError, match="control plane unreachable"):
            manager.submit(spec)


def _connection_refused(path):
    return MaxRetryError(None, path, reason=ConnectionRefusedError(111, "Connection refused"))


class TestSparkOperatorCheck:
    def test_running_operator(self, manager):
        manager.check_spark_operator()

    def test_missing_operator(self, custom_api):
        core_api = make_core_api(pods_by_selector={
            "app.kubernetes.io/name=spark-operator": [make_pod("spark-operator-0", phase="Pending")],
        })
        with patch("policy_reco_orchestrator.services.job_manager.client") as k8s_client:
            k8s_client.CustomObjectsApi.return_value = custom_api
            k8s_client.CoreV1Api.return_value = core_api
            manager = SparkApplicationManager(MagicMock(), make_config())

        with pytest.raises(JobSubmissionError, match="Spark operator"):
            manager.check_spark_operator()

    def test_api_failure(self, manager, core_api):
        core_api.list_namespaced_pod.side_effect = ApiException(status=403, reason="Forbidden")

        with pytest.raises(JobSubmissionError, match="Forbidden"):
            manager.check_spark_operator()


class TestState:
    @pytest.mark.parametrize("raw, expected", [
        (None, JobState.NEW),
        ("RUNNING", JobState.RUNNING),
        ("COMPLETED", JobState.COMPLETED),
        ("FAILING", JobState.FAILING),
        ("NOT_A_STATE", JobState.UNKNOWN),
    ])
    def test_get_state(self, manager, custom_api, raw, expected):
        custom_api.get_namespaced_custom_object.return_value = _application(raw)

        assert manager.get_state("abc") is expected
        custom_api.get_namespaced_custom_object.assert_called_once_with(
            group="sparkoperator.k8s.io",
            version="v1beta2",
            namespace="flow-visibility",
            plural="sparkapplications",
            name="policy-reco-abc",
        )

    def test_job_not_found(self, manager, custom_api):
        custom_api.get_namespaced_custom_object.side_effect = ApiException(status=404, reason="Not Found")

        with pytest.raises(JobStatusError, match="not found"):
            manager.get_state("abc")

    def test_api_error(self, manager, custom_api):
        custom_api.get_namespaced_custom_object.side_effect = ApiException(status=500, reason="Internal Server Error")

        with pytest.raises(JobStatusError, match="500"):
            manager.get_application("abc")


class TestControlPlaneUnreachable:
    def test_submit(self, manager, custom_api):
        spec = SparkApplicationBuilder(make_config()).build(JobRequest())
        custom_api.create_namespaced_custom_object.side_effect = _connection_refused(
            "/apis/sparkoperator.k8s.io/v1beta2/namespaces/flow-visibility/sparkapplications"
        )

        with pytest.raises(JobSubmissionError, match="control plane unreachable") as excinfo:
            manager.submit(spec)

        assert excinfo.value.exit_code == 3

    def test_get_state(self, manager, custom_api):
        custom_api.get_namespaced_custom_object.side_effect = _connection_refused(
            "/apis/sparkoperator.k8s.io/v1beta2/namespaces/flow-visibility/sparkapplications/policy-reco-abc"
        )

        with pytest.raises(JobStatusError, match="control plane unreachable"):
            manager.get_state("abc")

    def test_spark_operator_check(self, manager, core_api):
        core_api.list_namespaced_pod.side_effect = _connection_refused("/api/v1/namespaces/flow-visibility/pods")

        with pytest.raises(JobSubmissionError, match="control plane unreachable"):
            manager.check_spark_operator()
