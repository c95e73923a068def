"""
Adapter: S3 Access Token Issuer

Implementação concreta do contrato IAccessTokenIssuer usando boto3
(AWS S3 ou MinIO). Grants são presigned URLs: PUT para upload,
GET para download. O bucket é criado sob demanda, uma única vez.

boto3 é síncrono; as chamadas rodam em thread para não bloquear o loop.
"""

import asyncio
import logging
from datetime import datetime
from typing import Callable

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError, NoCredentialsError

from docverify.core.entities.document import utcnow
from docverify.core.interfaces.access_token_issuer import (
    DOWNLOAD_GRANT_TTL,
    DOWNLOAD_PERMISSIONS,
    UPLOAD_GRANT_TTL,
    UPLOAD_PERMISSIONS,
    AccessGrant,
    IAccessTokenIssuer,
)
from docverify.core.result import Result

logger = logging.getLogger(__name__)

_MISSING_CODES = {"404", "NoSuchKey", "NoSuchBucket", "NotFound"}


def _error_code(exc: ClientError) -> str:
    return str(exc.response.get("Error", {}).get("Code", "Unknown"))


class S3AccessTokenIssuer(IAccessTokenIssuer):
    """
    Issues presigned URLs against a single bucket.

    Container creation is double-checked: a plain flag serves the fast
    path once set; the slow path runs under an asyncio.Lock and awaits a
    shared creation task. A waiter that gets cancelled leaves the task
    running, so the flag is only ever written by a finished creation.
    """

    def __init__(
        self,
        bucket: str,
        endpoint_url: str | None = None,
        access_key: str = "",
        secret_key: str = "",
        region: str = "us-east-1",
        client=None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self._bucket = bucket
        self._region = region
        self._clock = clock
        self._client = client or boto3.client(
            "s3",
            endpoint_url=endpoint_url,
            aws_access_key_id=access_key or None,
            aws_secret_access_key=secret_key or None,
            region_name=region,
            config=Config(signature_version="s3v4"),
        )

        self._container_ready = False
        self._init_lock = asyncio.Lock()
        self._init_task: asyncio.Task | None = None

        logger.info(
            f"Initialized S3 access token issuer: bucket={bucket}, "
            f"endpoint={endpoint_url or 'AWS S3'}, region={region}"
        )

    @property
    def bucket(self) -> str:
        return self._bucket

    @property
    def container_ready(self) -> bool:
        return self._container_ready

    # ── Container ──────────────────────────────────────────

    async def ensure_container(self) -> Result[None]:
        if self._container_ready:
            return Result.ok()

        async with self._init_lock:
            if self._container_ready:
                return Result.ok()
            if self._init_task is None or self._init_task.done():
                self._init_task = asyncio.ensure_future(self._create_container())
                self._init_task.add_done_callback(self._on_container_task_done)
            task = self._init_task

            try:
                await asyncio.shield(task)
            except ClientError as e:
                code = _error_code(e)
                return Result.internal(detail=f"container creation failed: status={code}")
            except (BotoCoreError, OSError) as e:
                return Result.internal(detail=f"container creation failed: {e}")

        return Result.ok()

    async def _create_container(self) -> None:
        await asyncio.to_thread(self._create_container_sync)
        self._container_ready = True
        logger.info(f"Storage container ready: {self._bucket}")

    def _create_container_sync(self) -> None:
        try:
            self._client.head_bucket(Bucket=self._bucket)
            return
        except ClientError as e:
            if _error_code(e) not in _MISSING_CODES:
                raise

        params: dict = {"Bucket": self._bucket}
        if self._region and self._region != "us-east-1":
            params["CreateBucketConfiguration"] = {"LocationConstraint": self._region}
        try:
            self._client.create_bucket(**params)
            logger.info(f"Created storage container: {self._bucket}")
        except ClientError as e:
            if _error_code(e) != "BucketAlreadyOwnedByYou":
                raise

    def _on_container_task_done(self, task: asyncio.Task) -> None:
        # Retrieves the exception even when every waiter was cancelled.
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error(f"Storage container initialization failed: bucket={self._bucket}, error={exc}")

    # ── Grants ─────────────────────────────────────────────

    async def issue_upload_grant(self, object_key: str, content_type: str) -> Result[AccessGrant]:
        if not object_key:
            return Result.bad_request("Object key is required")
        params = {"Bucket": self._bucket, "Key": object_key}
        if content_type:
            params["ContentType"] = content_type
        return await self._issue("put_object", params, UPLOAD_GRANT_TTL, UPLOAD_PERMISSIONS)

    async def issue_download_grant(self, object_key: str) -> Result[AccessGrant]:
        if not object_key:
            return Result.bad_request("Object key is required")
        params = {"Bucket": self._bucket, "Key": object_key}
        return await self._issue("get_object", params, DOWNLOAD_GRANT_TTL, DOWNLOAD_PERMISSIONS)

    async def _issue(self, operation: str, params: dict, ttl, permissions) -> Result[AccessGrant]:
        ready = await self.ensure_container()
        if ready.is_failure:
            return Result.from_error(ready.error)

        issued_at = self._clock()
        try:
            url = await asyncio.to_thread(
                self._client.generate_presigned_url,
                operation,
                Params=params,
                ExpiresIn=int(ttl.total_seconds()),
            )
        except NoCredentialsError:
            logger.error(f"Storage credentials cannot sign grants: bucket={self._bucket}")
            return Result.internal(detail="credentials unsupported for scoped grants")
        except ClientError as e:
            code = _error_code(e)
            logger.error(f"Grant generation failed: key={params['Key']}, op={operation}, error={code}")
            return Result.internal(detail=f"grant generation failed: status={code}")
        except BotoCoreError as e:
            logger.error(f"Grant generation failed: key={params['Key']}, op={operation}, error={e}")
            return Result.internal(detail=f"grant generation failed: {e}")

        logger.info(f"Issued {operation} grant: key={params['Key']}, expires_in={int(ttl.total_seconds())}s")
        return Result.ok(AccessGrant(
            url=url,
            issued_at=issued_at,
            expires_at=issued_at + ttl,
            permissions=permissions,
        ))

    # ── Objects ────────────────────────────────────────────

    async def exists(self, object_key: str) -> Result[bool]:
        try:
            await asyncio.to_thread(self._client.head_object, Bucket=self._bucket, Key=object_key)
            return Result.ok(True)
        except ClientError as e:
            code = _error_code(e)
            if code in _MISSING_CODES:
                return Result.ok(False)
            logger.error(f"Existence check failed: key={object_key}, error={code}")
            return Result.internal(detail=f"head_object failed: status={code}")
        except BotoCoreError as e:
            logger.error(f"Existence check failed: key={object_key}, error={e}")
            return Result.internal(detail=f"head_object failed: {e}")

    async def delete(self, object_key: str) -> Result[None]:
        try:
            await asyncio.to_thread(self._client.delete_object, Bucket=self._bucket, Key=object_key)
            logger.info(f"Deleted object: key={object_key}")
            return Result.ok()
        except ClientError as e:
            code = _error_code(e)
            if code in _MISSING_CODES:
                return Result.ok()
            logger.error(f"Delete failed: key={object_key}, error={code}")
            return Result.internal(detail=f"delete_object failed: status={code}")
        except BotoCoreError as e:
            logger.error(f"Delete failed: key={object_key}, error={e}")
            return Result.internal(detail=f"delete_object failed: {e}")
