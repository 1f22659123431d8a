"""Tests for structured logging and job context propagation."""

import json
import logging

import pytest

from policy_reco_orchestrator.utils.logger import LoggerContext, setup_logger


@pytest.fixture
def log_file(tmp_path):
    path = tmp_path / "logs" / "orchestrator.log"
    yield path
    logger = logging.getLogger("policy_reco_tests")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


def _records(path):
    return [json.loads(line) for line in path.read_text().splitlines()]


def test_structured_records_carry_job_context(log_file):
    logger = setup_logger("policy_reco_tests", level="INFO", log_file=str(log_file))

    with LoggerContext(logger, job_id="abc"):
        logger.info("Submitting policy recommendation job abc")
    logger.info("done")

    first, second = _records(log_file)
    assert first["level"] == "INFO"
    assert first["message"] == "Submitting policy recommendation job abc"
    assert first["extra"]["job_id"] == "abc"
    assert "extra" not in second


def test_level_filters_records(log_file):
    logger = setup_logger("policy_reco_tests", level="WARNING", log_file=str(log_file))

    logger.info("hidden")
    logger.warning("No recommendation result stored for job abc")

    records = _records(log_file)
    assert [r["message"] for r in records] == ["No recommendation result stored for job abc"]


def test_reconfiguration_replaces_handlers(log_file):
    setup_logger("policy_reco_tests", log_file=str(log_file))
    logger = setup_logger("policy_reco_tests", log_file=str(log_file))

    assert len(logger.handlers) == 2


def test_exception_info(log_file):
    logger = setup_logger("policy_reco_tests", log_file=str(log_file))

    try:
        raise RuntimeError("boom")
    except RuntimeError:
        logger.error("query failed", exc_info=True)

    record = _records(log_file)[0]
    assert record["exception"]["type"] == "RuntimeError"
    assert record["exception"]["message"] == "boom"
