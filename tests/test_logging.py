"""Tests for correlation-id logging and the use-case boundary."""

import asyncio
import json
import logging

import pytest

from docverify.config.logging_config import (
    CorrelationIdFilter,
    JSONFormatter,
    set_correlation_id,
)
from docverify.core.result import GENERIC_INTERNAL_MESSAGE, ErrorKind
from docverify.core.use_cases.boundary import use_case_boundary


class Flaky:

    @use_case_boundary("flaky operation")
    async def explode(self):
        raise ValueError("secret connection string")

    @use_case_boundary("slow operation")
    async def wait_forever(self):
        await asyncio.Event().wait()


def make_record(msg: str = "hello") -> logging.LogRecord:
    return logging.LogRecord("docverify.test", logging.INFO, __file__, 1, msg, None, None)


def test_filter_stamps_correlation_id():
    set_correlation_id("cid-123")
    record = make_record()

    CorrelationIdFilter().filter(record)

    assert record.correlation_id == "cid-123"


def test_json_formatter():
    record = make_record("uploaded")
    record.correlation_id = "cid-9"

    data = json.loads(JSONFormatter().format(record))

    assert data["message"] == "uploaded"
    assert data["correlation_id"] == "cid-9"
    assert data["level"] == "INFO"


@pytest.mark.asyncio
async def test_boundary_hides_exception_text(caplog):
    set_correlation_id("cid-boundary")

    with caplog.at_level(logging.ERROR):
        result = await Flaky().explode()

    assert result.error.kind == ErrorKind.INTERNAL
    assert result.error.message == GENERIC_INTERNAL_MESSAGE
    assert result.error.detail == "correlation_id=cid-boundary"
    assert "cid-boundary" in caplog.text
    assert "secret connection string" in caplog.text


@pytest.mark.asyncio
async def test_boundary_lets_cancellation_through():
    task = asyncio.create_task(Flaky().wait_forever())
    await asyncio.sleep(0)
    task.cancel()

    with pytest.raises(asyncio.CancelledError):
        await task

