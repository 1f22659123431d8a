"""Tests for SparkApplication spec construction and argument encoding."""

import json
import uuid

from policy_reco_orchestrator.models.job import JobRequest
from policy_reco_orchestrator.services.spec_builder import (
    SparkApplicationBuilder,
    decode_job_arguments,
    encode_job_arguments,
    job_name,
)
from policy_reco_orchestrator.services.validator import validate_request

from conftest import make_config, make_params


def _argument_map(arguments):
    return dict(zip(arguments[::2], arguments[1::2]))


class TestArgumentEncoding:
    def test_initial_anp_deny_applied_scenario(self):
        request = validate_request(make_params(
            type="initial",
            limit=10000,
            option="anp-deny-applied",
            start_time="2022-01-01 00:00:00",
            end_time="2022-01-31 23:59:59",
        ))

        args = encode_job_arguments(request, "job-1")

        assert args == [
            "--type", "initial",
            "--limit", "10000",
            "--option", "1",
            "--start_time", "2022-01-01 00:00:00",
            "--end_time", "2022-01-31 23:59:59",
            "--rm_labels", "true",
            "--to_services", "true",
            "--id", "job-1",
        ]

    def test_option_codes(self):
        codes = {
            option: _argument_map(encode_job_arguments(validate_request(make_params(option=option)), "x"))["--option"]
            for option in ("anp-deny-applied", "anp-deny-all", "k8s-np")
        }

        assert codes == {"anp-deny-applied": "1", "anp-deny-all": "2", "k8s-np": "3"}

    def test_ns_allow_list_encoded_as_json(self):
        request = validate_request(make_params(ns_allow_list='["kube-system","flow-aggregator"]'))

        args = _argument_map(encode_job_arguments(request, "x"))

        assert json.loads(args["--ns_allow_list"]) == ["kube-system", "flow-aggregator"]

    def test_optional_arguments_omitted(self):
        args = encode_job_arguments(JobRequest(), "x")

        assert "--start_time" not in args
        assert "--end_time" not in args
        assert "--ns_allow_list" not in args

    def test_boolean_toggles(self):
        request = validate_request(make_params(rm_labels=False, to_services=False))

        args = _argument_map(encode_job_arguments(request, "x"))

        assert args["--rm_labels"] == "false"
        assert args["--to_services"] == "false"

    def test_round_trip(self):
        request = validate_request(make_params(
            type="subsequent",
            limit=42,
            option="anp-deny-all",
            start_time="2022-03-01 08:00:00",
            end_time="2022-03-02 08:00:00",
            ns_allow_list='["kube-system"]',
            rm_labels=False,
        ))

        decoded = decode_job_arguments(encode_job_arguments(request, "abc"))

        assert decoded["id"] == "abc"
        assert decoded["option"] == "anp-deny-all"
        assert validate_request(decoded) == request

    def test_decode_ignores_unknown_keys(self):
        decoded = decode_job_arguments(["--type", "initial", "--verbose", "1"])

        assert decoded == {"type": "initial"}


class TestSparkApplicationBuilder:
    def test_spec_identity(self):
        builder = SparkApplicationBuilder(make_config())

        spec = builder.build(JobRequest())

        assert uuid.UUID(spec.job_id).version == 4
        assert spec.name == job_name(spec.job_id) == f"policy-reco-{spec.job_id}"
        assert spec.namespace == "flow-visibility"
        assert spec.arguments[-2:] == ("--id", spec.job_id)

    def test_job_ids_are_unique_for_identical_requests(self):
        builder = SparkApplicationBuilder(make_config())
        request = validate_request(make_params(limit=10))

        ids = {builder.build(request).job_id for _ in range(200)}

        assert len(ids) == 200

    def test_manifest(self):
        config = make_config(spark_image="registry.local/reco:1.0", namespace="reco")
        request = validate_request(make_params(
            executor_instances=3,
            driver_core_request="500m",
            driver_memory="1G",
            executor_core_request="1",
            executor_memory="2G",
        ))

        spec = SparkApplicationBuilder(config).build(request)
        body = spec.body

        assert body["apiVersion"] == "sparkoperator.k8s.io/v1beta2"
        assert body["kind"] == "SparkApplication"
        assert body["metadata"] == {"name": spec.name, "namespace": "reco"}

        app = body["spec"]
        assert app["type"] == "Python"
        assert app["mode"] == "cluster"
        assert app["sparkVersion"] == "3.1.1"
        assert app["image"] == "registry.local/reco:1.0"
        assert app["imagePullPolicy"] == "IfNotPresent"
        assert app["mainApplicationFile"] == "local:///opt/spark/work-dir/policy_recommendation_job.py"
        assert app["arguments"] == list(spec.arguments)

        assert app["driver"]["coreRequest"] == "500m"
        assert app["driver"]["memory"] == "1G"
        assert app["driver"]["serviceAccount"] == "policy-reco-spark"
        assert app["driver"]["labels"] == {"version": "3.1.1"}
        assert app["executor"]["coreRequest"] == "1"
        assert app["executor"]["memory"] == "2G"
        assert app["executor"]["instances"] == 3

        for role in ("driver", "executor"):
            assert app[role]["envSecretKeyRefs"] == {
                "CH_USERNAME": {"name": "clickhouse-secret", "key": "username"},
                "CH_PASSWORD": {"name": "clickhouse-secret", "key": "password"},
            }

    def test_request_not_mutated(self):
        request = validate_request(make_params(limit=7))

        spec = SparkApplicationBuilder(make_config()).build(request)

        assert spec.request is request
        assert request.limit == 7
