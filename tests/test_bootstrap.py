"""End-to-end flow through the composition root with SQLite and stubbed remotes."""

from datetime import date

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from docverify.bootstrap import build_services, upload_policy_from
from docverify.config.settings import Settings
from docverify.core.entities.actor import ActorClaims
from docverify.core.entities.document import DocumentStatus, DocumentType
from docverify.core.interfaces.background_check import BackgroundCheckStatus
from docverify.core.result import ErrorKind
from docverify.core.use_cases.request_upload import UploadRequest
from docverify.infrastructure.db.database import init_db
from tests.fakes import FakeAccessTokenIssuer, FakeAnalyzer

OWNER = ActorClaims.user("U1")
ADMIN = ActorClaims.user("admin-1", roles=["admin"])


@pytest_asyncio.fixture()
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'flow.db'}")
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def services(engine):
    settings = Settings(
        _env_file=None,
        upload_max_file_size_by_type={"CriminalRecord": 1024},
        analysis_min_confidence=0.95,
    )
    return build_services(
        settings,
        session_factory=async_sessionmaker(bind=engine, expire_on_commit=False),
        token_issuer=FakeAccessTokenIssuer(),
        analyzer=FakeAnalyzer(),
    )


async def upload_identity(services) -> str:
    async with services.document_store() as store:
        slot = (await services.uploads(store).execute(UploadRequest(
            owner_id="U1",
            document_type="IdentityDocument",
            file_name="id.pdf",
            content_type="application/pdf",
            file_size_bytes=1000,
        ), OWNER)).value
    services.token_issuer.objects.add(slot.storage_path)
    return slot.document_id


def test_upload_policy_from_settings():
    settings = Settings(
        _env_file=None,
        upload_allowed_content_types=["Application/PDF"],
        upload_max_file_size_by_type={"IdentityDocument": 2048},
    )

    policy = upload_policy_from(settings)

    assert policy.allowed_content_types == ("application/pdf",)
    assert policy.max_size_for(DocumentType.IDENTITY_DOCUMENT) == 2048
    assert policy.max_size_for(DocumentType.OTHER) == settings.upload_max_file_size_bytes


@pytest.mark.asyncio
async def test_full_verification_flow(services):
    document_id = await upload_identity(services)

    async with services.document_store() as store:
        lifecycle = services.lifecycle(store)
        analyzed = await lifecycle.request_analysis(document_id)
        assert analyzed.value.status == DocumentStatus.PENDING_VERIFICATION
        assert analyzed.value.extracted_data["low_confidence"] is True

        approved = await lifecycle.approve(document_id, ADMIN, notes="matches selfie")
        assert approved.is_success
        assert approved.value.version == 3

    async with services.document_store() as store:
        queries = services.queries(store)
        status = (await queries.get_document_status(document_id)).value
        counts = (await queries.get_status_counts("U1")).value

    assert status.status == DocumentStatus.VERIFIED
    assert status.updated_at == approved.value.verified_at
    assert counts.verified == 1


@pytest.mark.asyncio
async def test_guard_failures_release_connections(services, engine):
    document_id = await upload_identity(services)

    async with services.document_store() as store:
        forbidden = await services.lifecycle(store).approve(document_id, OWNER)
        missing = await services.queries(store).get_document("missing")

    assert forbidden.error.kind == ErrorKind.FORBIDDEN
    assert missing.error.kind == ErrorKind.NOT_FOUND
    assert engine.pool.checkedout() == 0


@pytest.mark.asyncio
async def test_store_closed_when_body_raises(services, engine):
    with pytest.raises(RuntimeError):
        async with services.document_store() as store:
            await store.get_by_id("anything")
            raise RuntimeError("caller bug")

    assert engine.pool.checkedout() == 0


@pytest.mark.asyncio
async def test_per_type_size_limit_from_settings(services):
    async with services.document_store() as store:
        result = await services.uploads(store).execute(UploadRequest(
            owner_id="U1",
            document_type="CriminalRecord",
            file_name="cr.pdf",
            content_type="application/pdf",
            file_size_bytes=4096,
        ), OWNER)
    assert result.error.kind == ErrorKind.BAD_REQUEST


@pytest.mark.asyncio
async def test_background_checks_are_wired(services):
    record = await services.background_checks.submit("U1", "Maria Silva", date(1990, 5, 17))
    polled = await services.background_checks.poll_status(record.request_id)
    assert polled.status == BackgroundCheckStatus.COMPLETED
