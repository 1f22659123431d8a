"""Tests for the ClickHouse HTTP client."""

import base64

import httpx
import pytest

from policy_reco_orchestrator.core.exceptions import RetrievalQueryError
from policy_reco_orchestrator.utils.clickhouse import ClickHouseClient, RECOMMENDATION_QUERY


YAMLS = """apiVersion: crd.antrea.io/v1alpha1
kind: NetworkPolicy
metadata:
  name: recommend-allow-anp-fj3hd
"""


def _client(handler):
    return ClickHouseClient(
        "http://clickhouse.test:8123",
        "default",
        "secret",
        transport=httpx.MockTransport(handler),
    )


def test_query_by_job_id():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["params"] = dict(request.url.params)
        seen["body"] = request.content.decode()
        seen["auth"] = request.headers["authorization"]
        return httpx.Response(200, json={"data": [{"yamls": YAMLS}], "rows": 1})

    with _client(handler) as ch:
        result = ch.get_recommendation("abc-123")

    assert result == YAMLS
    assert seen["params"] == {"param_id": "abc-123"}
    assert seen["body"] == RECOMMENDATION_QUERY
    assert seen["auth"] == "Basic " + base64.b64encode(b"default:secret").decode()


def test_no_rows_is_empty_result():
    def handler(request):
        return httpx.Response(200, json={"data": [], "rows": 0})

    with _client(handler) as ch:
        assert ch.get_recommendation("abc") == ""


def test_http_error():
    def handler(request):
        return httpx.Response(500, text="Code: 60. DB::Exception: Table default.recommendations doesn't exist.\n")

    with _client(handler) as ch:
        with pytest.raises(RetrievalQueryError, match="HTTP 500: Code: 60"):
            ch.get_recommendation("abc")


def test_connection_error():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with _client(handler) as ch:
        with pytest.raises(RetrievalQueryError, match="failed to query ClickHouse"):
            ch.get_recommendation("abc")


def test_undecodable_response():
    def handler(request):
        return httpx.Response(200, text="not json")

    with _client(handler) as ch:
        with pytest.raises(RetrievalQueryError, match="failed to decode"):
            ch.get_recommendation("abc")


@pytest.mark.parametrize("payload", [
    [{"yamls": YAMLS}],
    "yamls",
    {"data": "yamls"},
    {"data": ["yamls"]},
])
def test_unexpected_json_shape(payload):
    def handler(request):
        return httpx.Response(200, json=payload)

    with _client(handler) as ch:
        with pytest.raises(RetrievalQueryError, match="unexpected ClickHouse response"):
            ch.get_recommendation("abc")
