"""Tests for the background-check coordinator and stub provider."""

import asyncio
from datetime import date

import pytest

from docverify.core.interfaces.background_check import BackgroundCheckStatus, IBackgroundCheckProvider
from docverify.core.use_cases.background_check import BackgroundCheckCoordinator
from docverify.infrastructure.background_check.in_memory_store import InMemoryBackgroundCheckStore
from docverify.infrastructure.background_check.stub_provider import STUB_DETAILS, StubBackgroundCheckProvider
from tests.fakes import FIXED_NOW

BIRTH_DATE = date(1990, 5, 17)


class BrokenProvider(IBackgroundCheckProvider):

    async def submit(self, subject_id, full_name, birth_date):
        raise ConnectionError("provider offline")

    async def poll_status(self, request_id):
        raise ConnectionError("provider offline")


@pytest.fixture
def store():
    return InMemoryBackgroundCheckStore()


@pytest.fixture
def coordinator(store):
    return BackgroundCheckCoordinator(StubBackgroundCheckProvider(store, clock=lambda: FIXED_NOW))


class TestSubmit:

    @pytest.mark.asyncio
    async def test_submit_creates_pending(self, coordinator, store):
        record = await coordinator.submit("U1", "Maria Silva", BIRTH_DATE)

        assert record.status == BackgroundCheckStatus.PENDING
        assert record.subject_id == "U1"
        assert record.has_record is None
        assert await store.get(record.request_id) == record

    @pytest.mark.asyncio
    async def test_each_submit_gets_new_request_id(self, coordinator, store):
        first = await coordinator.submit("U1", "Maria Silva", BIRTH_DATE)
        second = await coordinator.submit("U1", "Maria Silva", BIRTH_DATE)

        assert first.request_id != second.request_id
        assert len(store) == 2

    @pytest.mark.asyncio
    async def test_submit_failure_propagates(self):
        coordinator = BackgroundCheckCoordinator(BrokenProvider())
        with pytest.raises(ConnectionError):
            await coordinator.submit("U1", "Maria Silva", BIRTH_DATE)


class TestPollStatus:

    @pytest.mark.asyncio
    async def test_first_poll_completes(self, coordinator):
        submitted = await coordinator.submit("U1", "Maria Silva", BIRTH_DATE)

        record = await coordinator.poll_status(submitted.request_id)

        assert record.status == BackgroundCheckStatus.COMPLETED
        assert record.has_record is False
        assert record.details == STUB_DETAILS
        assert record.completed_at == FIXED_NOW

    @pytest.mark.asyncio
    async def test_polls_after_first_are_identical(self, coordinator):
        submitted = await coordinator.submit("U1", "Maria Silva", BIRTH_DATE)
        await coordinator.poll_status(submitted.request_id)

        second = await coordinator.poll_status(submitted.request_id)
        third = await coordinator.poll_status(submitted.request_id)

        assert second == third

    @pytest.mark.asyncio
    async def test_concurrent_first_polls_agree(self, coordinator):
        submitted = await coordinator.submit("U1", "Maria Silva", BIRTH_DATE)

        records = await asyncio.gather(*(coordinator.poll_status(submitted.request_id) for _ in range(10)))

        assert len(set(records)) == 1
        assert records[0].status == BackgroundCheckStatus.COMPLETED

    @pytest.mark.asyncio
    async def test_unknown_request_is_not_available(self, coordinator, store):
        record = await coordinator.poll_status("does-not-exist")

        assert record.status == BackgroundCheckStatus.NOT_AVAILABLE
        assert "does-not-exist" in record.error_message
        assert len(store) == 0

    @pytest.mark.asyncio
    async def test_empty_request_id(self, coordinator):
        record = await coordinator.poll_status("")
        assert record.status == BackgroundCheckStatus.NOT_AVAILABLE

    @pytest.mark.asyncio
    async def test_provider_failure_never_raises(self):
        coordinator = BackgroundCheckCoordinator(BrokenProvider())

        record = await coordinator.poll_status("abc")

        assert record.status == BackgroundCheckStatus.NOT_AVAILABLE
        assert record.request_id == "abc"
