"""AWS Transcribe batch adapter.

Transcribe has no synchronous short-audio call, so one utterance becomes a
small job:

1. upload the recording to S3
2. start a transcription job writing its JSON output to the same bucket
3. poll the job status every POLL_INTERVAL_SECONDS
4. read and parse the output object once the job completes

boto3 is blocking, so every SDK call runs in a worker thread. This adapter
never substitutes a local transcript: a failed or timed-out job surfaces to
the caller as a TranscriptionError.
"""

from __future__ import annotations

import asyncio
import json
import secrets
import time
from collections.abc import Awaitable, Callable
from typing import Any

from botocore.exceptions import BotoCoreError, ClientError

from polyvoice.config import Settings
from polyvoice.core.catalog import ProviderId
from polyvoice.core.config_accessor import ConfigAccessor
from polyvoice.logging_config import get_logger
from polyvoice.services.aws import create_aws_client
from polyvoice.services.base import ProviderAdapter, extract_text
from polyvoice.services.stt.exceptions import (
    TranscriptionError,
    TranscriptionTimeoutError,
)
from polyvoice.services.stt.protocol import AudioPayload

logger: Any = get_logger(__name__)

POLL_INTERVAL_SECONDS = 2.0
MAX_POLL_ATTEMPTS = 30  # 60s ceiling at the default interval

JOB_COMPLETED = "COMPLETED"
JOB_FAILED = "FAILED"


class AWSTranscribeService(ProviderAdapter):
    """Long-running STT adapter: S3 upload, job start, status polling, output fetch."""

    provider = ProviderId.AWS_TRANSCRIBE
    error_cls = TranscriptionError

    def __init__(
        self,
        config: ConfigAccessor,
        settings: Settings | None = None,
        *,
        s3_client: Any = None,
        transcribe_client: Any = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        poll_interval: float = POLL_INTERVAL_SECONDS,
        max_attempts: int = MAX_POLL_ATTEMPTS,
    ) -> None:
        super().__init__(config, settings)
        self._s3 = s3_client
        self._transcribe = transcribe_client
        self._sleep = sleep
        self._poll_interval = poll_interval
        self._max_attempts = max_attempts

    @property
    def s3(self) -> Any:
        """Lazy initialization of the S3 client."""
        if self._s3 is None:
            self._s3 = create_aws_client("s3", self._config)
        return self._s3

    @property
    def transcribe(self) -> Any:
        """Lazy initialization of the Transcribe client."""
        if self._transcribe is None:
            self._transcribe = create_aws_client("transcribe", self._config)
        return self._transcribe

    async def invoke(self, payload: AudioPayload) -> str:
        bucket = self._secret("AWS_TRANSCRIBE_BUCKET")
        prefix = self._settings.aws_transcribe_prefix.rstrip("/")
        stamp = int(time.time() * 1000)

        object_key = f"{prefix}/{stamp}-{secrets.token_hex(6)}.{payload.media_format}"
        job_name = f"polyvoice-transcribe-{stamp}-{secrets.token_hex(3)}"
        output_key = f"{prefix}/transcripts/{job_name}.json"

        await self._call(
            "S3 upload",
            self._s3_request,
            "put_object",
            Bucket=bucket,
            Key=object_key,
            Body=payload.data,
            ContentType=payload.content_type,
        )
        logger.debug(f"Uploaded {len(payload)} bytes to s3://{bucket}/{object_key}")

        await self._call(
            "Transcribe start",
            self._transcribe_request,
            "start_transcription_job",
            TranscriptionJobName=job_name,
            LanguageCode=self._settings.stt_language,
            MediaFormat=payload.media_format,
            Media={"MediaFileUri": f"s3://{bucket}/{object_key}"},
            OutputBucketName=bucket,
            OutputKey=output_key,
        )
        logger.info(f"Started AWS Transcribe job {job_name}")

        await self._wait_for_job(job_name)
        return await self._read_transcript(bucket, output_key)

    async def _wait_for_job(self, job_name: str) -> None:
        """Poll until the job completes.

        Raises:
            TranscriptionError: If the job reports FAILED
            TranscriptionTimeoutError: If no terminal status within the attempt budget
        """
        status = ""
        for attempt in range(1, self._max_attempts + 1):
            await self._sleep(self._poll_interval)
            response = await self._call(
                "Transcribe status",
                self._transcribe_request,
                "get_transcription_job",
                TranscriptionJobName=job_name,
            )
            job = (response or {}).get("TranscriptionJob") or {}
            status = job.get("TranscriptionJobStatus") or ""
            logger.debug(f"Transcribe job {job_name} attempt {attempt}: status={status}")

            if status == JOB_COMPLETED:
                return
            if status == JOB_FAILED:
                reason = job.get("FailureReason") or "AWS Transcribe job failed."
                logger.error(f"Transcribe job {job_name} failed: {reason}")
                raise self._error(reason)

        message = (
            f"AWS Transcribe timed out while status={status}."
            if status
            else "AWS Transcribe timed out before transcript became available."
        )
        logger.error(message)
        raise TranscriptionTimeoutError(message, provider=self.descriptor.name, last_status=status)

    async def _read_transcript(self, bucket: str, key: str) -> str:
        location = f"s3://{bucket}/{key}"
        body = await self._call(f"transcript read from {location}", self._fetch_object, bucket, key)
        try:
            data = json.loads(body or b"{}")
        except ValueError as e:
            raise self._error(f"AWS transcript at {location} is not valid JSON: {e}") from e
        return extract_text(data, "results", "transcripts", 0, "transcript")

    def _fetch_object(self, bucket: str, key: str) -> bytes:
        response = self.s3.get_object(Bucket=bucket, Key=key)
        return response["Body"].read()

    def _s3_request(self, method: str, **kwargs: Any) -> Any:
        return getattr(self.s3, method)(**kwargs)

    def _transcribe_request(self, method: str, **kwargs: Any) -> Any:
        return getattr(self.transcribe, method)(**kwargs)

    async def _call(self, step: str, func: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        """Run a blocking SDK call in a worker thread, wrapping SDK errors.

        Clients are resolved inside func so construction errors are wrapped too.
        """
        try:
            return await asyncio.to_thread(func, *args, **kwargs)
        except (BotoCoreError, ClientError) as e:
            message = f"AWS {step} failed: {e}"
            logger.error(message)
            raise self._error(message) from e
