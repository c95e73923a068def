"""
Composition root.

Wires settings, adapters and use cases. Shared adapters (storage
issuer, analyzer, notifications, background checks) live for the whole
process; every unit of work opens its own DocumentRepository with
`async with services.document_store() as store` and hands it to the
use case, so the session is closed on every exit path.
"""

import logging
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import async_sessionmaker

from docverify.config.logging_config import configure_logging
from docverify.config.settings import Settings, get_settings
from docverify.core.interfaces.access_token_issuer import IAccessTokenIssuer
from docverify.core.interfaces.document_analyzer import IDocumentAnalyzer
from docverify.core.interfaces.document_store import IDocumentStore
from docverify.core.interfaces.notification_sink import INotificationSink
from docverify.core.use_cases.background_check import BackgroundCheckCoordinator
from docverify.core.use_cases.document_lifecycle import DocumentLifecycleUseCase
from docverify.core.use_cases.document_queries import DocumentQueries
from docverify.core.use_cases.request_upload import RequestUploadUseCase, UploadPolicy
from docverify.infrastructure.analysis.gemini_document_analyzer import GeminiDocumentAnalyzer
from docverify.infrastructure.background_check.in_memory_store import InMemoryBackgroundCheckStore
from docverify.infrastructure.background_check.stub_provider import StubBackgroundCheckProvider
from docverify.infrastructure.db.database import get_session_factory
from docverify.infrastructure.db.repository import DocumentRepository
from docverify.infrastructure.notifications.logging_sink import LoggingNotificationSink
from docverify.infrastructure.storage.s3_access_token_issuer import S3AccessTokenIssuer

logger = logging.getLogger(__name__)


def upload_policy_from(settings: Settings) -> UploadPolicy:
    return UploadPolicy(
        allowed_content_types=tuple(t.lower() for t in settings.upload_allowed_content_types),
        max_file_size_bytes=settings.upload_max_file_size_bytes,
        max_file_size_by_type=tuple(settings.upload_max_file_size_by_type.items()),
    )


@dataclass
class Services:
    settings: Settings
    session_factory: async_sessionmaker
    token_issuer: IAccessTokenIssuer
    analyzer: IDocumentAnalyzer
    notifications: INotificationSink
    background_checks: BackgroundCheckCoordinator

    def document_store(self) -> DocumentRepository:
        """New unit of work; use as `async with services.document_store() as store`."""
        return DocumentRepository(self.session_factory)

    def lifecycle(self, store: IDocumentStore) -> DocumentLifecycleUseCase:
        return DocumentLifecycleUseCase(
            store=store,
            token_issuer=self.token_issuer,
            analyzer=self.analyzer,
            notifications=self.notifications,
            admin_roles=self.settings.admin_roles,
            min_confidence=self.settings.analysis_min_confidence,
            analysis_timeout_seconds=self.settings.analysis_timeout_seconds,
        )

    def uploads(self, store: IDocumentStore) -> RequestUploadUseCase:
        return RequestUploadUseCase(
            store=store,
            token_issuer=self.token_issuer,
            policy=upload_policy_from(self.settings),
            admin_roles=self.settings.admin_roles,
        )

    def queries(self, store: IDocumentStore) -> DocumentQueries:
        return DocumentQueries(store)


def build_services(
    settings: Settings | None = None,
    session_factory: async_sessionmaker | None = None,
    token_issuer: IAccessTokenIssuer | None = None,
    analyzer: IDocumentAnalyzer | None = None,
) -> Services:
    """Build the process-wide services; adapters can be overridden (tests)."""
    settings = settings or get_settings()
    configure_logging(settings.log_level, json_output=settings.log_json)

    token_issuer = token_issuer or S3AccessTokenIssuer(
        bucket=settings.storage_container,
        endpoint_url=settings.storage_endpoint_url,
        access_key=settings.storage_access_key,
        secret_key=settings.storage_secret_key,
        region=settings.storage_region,
    )
    analyzer = analyzer or GeminiDocumentAnalyzer(
        api_key=settings.gemini_api_key,
        model_name=settings.gemini_model,
    )
    if not settings.gemini_api_key and isinstance(analyzer, GeminiDocumentAnalyzer):
        logger.warning("GEMINI_API_KEY not set; document analysis calls will fail")

    services = Services(
        settings=settings,
        session_factory=session_factory or get_session_factory(),
        token_issuer=token_issuer,
        analyzer=analyzer,
        notifications=LoggingNotificationSink(),
        background_checks=BackgroundCheckCoordinator(
            StubBackgroundCheckProvider(InMemoryBackgroundCheckStore())
        ),
    )
    logger.info(f"Document verification services ready (env={settings.env})")
    return services
