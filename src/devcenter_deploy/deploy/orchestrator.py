"""Submission lifecycle for publishing one package to the store.

The pipeline is strictly sequential: every call is awaited before the next
one starts, and each mutating call replaces the local submission record with
the copy the store returns.

Reference:
https://docs.microsoft.com/en-us/windows/uwp/monetize/create-and-manage-submissions-using-windows-store-services
"""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable, List, Mapping, Optional, Union

import httpx
import structlog

from devcenter_deploy.core.config import Settings
from devcenter_deploy.core.exceptions import StoreRequestError, SubmissionFailedError
from devcenter_deploy.deploy.client import DevCenterClient
from devcenter_deploy.deploy.models import (
    PACKAGE_FILE_NAME,
    RETRY_STATUSES,
    SUCCESS_STATUSES,
    DeploymentRequest,
    PackageEntry,
    SubmissionRecord,
    SubmissionStatusReport,
    SubmissionTarget,
)
from devcenter_deploy.deploy.packager import package_appx
from devcenter_deploy.deploy.validation import validate_request
from devcenter_deploy.utils.logging import deploy_log_context
from devcenter_deploy.utils.metrics import POLL_ATTEMPTS, StageTimings


logger = structlog.get_logger()

SleepFn = Callable[[float], Awaitable[Any]]


def build_package_list(existing: List[PackageEntry]) -> List[PackageEntry]:
    """New upload entry first, then every existing entry marked PendingDelete.

    Each publish supersedes all previously attached packages, whatever
    their current status.
    """
    return [PackageEntry.new_upload(PACKAGE_FILE_NAME)] + [
        entry.marked_for_deletion() for entry in existing
    ]


class SubmissionOrchestrator:
    """Runs one deployment: token, locate, replace, upload, commit, poll."""

    def __init__(
        self,
        client: DevCenterClient,
        settings: Optional[Settings] = None,
        sleep: SleepFn = asyncio.sleep,
    ):
        self.client = client
        self.settings = settings or client.settings
        self.sleep = sleep

    async def deploy(self, request: DeploymentRequest) -> None:
        validate_request(request)
        with deploy_log_context(request.appId, request.flightId):
            await self._run(request)

    async def _run(self, request: DeploymentRequest) -> None:
        target = request.target
        timings = StageTimings(record_metrics=self.settings.metrics_enabled)
        base = target.resource_url(self.settings.store_base_url)

        logger.info("Starting deployment", target=target.kind)

        timings.start_stage("token")
        token = await self.client.acquire_token(
            request.tenantId, request.clientId, request.clientSecret
        )
        timings.end_stage("token")

        timings.start_stage("locate")
        pending_id = await self._locate_pending(target, base, token)
        timings.end_stage("locate")

        if pending_id is not None:
            timings.start_stage("delete")
            await self._delete_submission(base, token, pending_id)
            timings.end_stage("delete")

        timings.start_stage("create")
        created = await self._create_submission(base, token)
        timings.end_stage("create")

        timings.start_stage("update")
        submission = await self._update_packages(target, base, token, created)
        timings.end_stage("update")

        timings.start_stage("upload")
        archive = await package_appx(request.appx, PACKAGE_FILE_NAME)
        # The upload URL is issued on create; the update reply may omit it.
        upload_url = submission.fileUploadUrl or created.fileUploadUrl
        if not upload_url:
            raise StoreRequestError("Failed to upload package", "no fileUploadUrl on submission")
        await self.client.upload_blob(upload_url, archive)
        logger.info("Uploaded package", submission_id=submission.id, bytes=len(archive))
        timings.end_stage("upload")

        timings.start_stage("commit")
        await self._commit_submission(base, token, submission)
        timings.end_stage("commit")

        timings.start_stage("poll")
        status = await self._poll_until_processed(base, token, submission)
        timings.end_stage("poll")

        timings.finish()
        logger.info(
            "Deployment complete",
            submission_id=submission.id,
            status=status,
            **timings.to_dict(),
        )

    async def _locate_pending(
        self, target: SubmissionTarget, base: str, token: str
    ) -> Optional[str]:
        """Return the id of an in-flight submission on the app or flight, if any."""
        # https://docs.microsoft.com/en-us/windows/uwp/monetize/get-an-app
        # https://docs.microsoft.com/en-us/windows/uwp/monetize/get-a-flight
        body = await self.client.authorized(
            "locate", f"Failed to fetch {target.kind}", "GET", base, token
        )
        pending = body.get(target.pending_submission_field)
        if not pending:
            logger.info("No pending submission")
            return None
        pending_id = pending.get("id") if isinstance(pending, dict) else pending
        if not pending_id:
            logger.warning(
                "Pending submission has no id, not deleting it",
                field=target.pending_submission_field,
            )
            return None
        logger.info("Found pending submission", submission_id=pending_id)
        return pending_id

    async def _delete_submission(self, base: str, token: str, submission_id: str) -> None:
        await self.client.authorized(
            "delete",
            "Failed to delete previous submission",
            "DELETE",
            f"{base}/submissions/{submission_id}",
            token,
        )
        logger.info("Deleted pending submission", submission_id=submission_id)

    async def _create_submission(self, base: str, token: str) -> SubmissionRecord:
        body = await self.client.authorized(
            "create", "Failed to create new submission", "POST", f"{base}/submissions", token
        )
        submission = SubmissionRecord.model_validate(body)
        logger.info("Created submission", submission_id=submission.id)
        return submission

    async def _update_packages(
        self,
        target: SubmissionTarget,
        base: str,
        token: str,
        submission: SubmissionRecord,
    ) -> SubmissionRecord:
        existing = submission.packages(target.packages_field)
        payload = submission.with_packages(target.packages_field, build_package_list(existing))
        body = await self.client.authorized(
            "update",
            "Failed to update submission",
            "PUT",
            f"{base}/submissions/{submission.id}",
            token,
            json=payload,
        )
        logger.info(
            "Updated submission packages",
            submission_id=submission.id,
            superseded=len(existing),
        )
        return SubmissionRecord.model_validate(body)

    async def _commit_submission(self, base: str, token: str, submission: SubmissionRecord) -> None:
        await self.client.authorized(
            "commit",
            "Failed to commit submission",
            "POST",
            f"{base}/submissions/{submission.id}/commit",
            token,
        )
        logger.info("Committed submission", submission_id=submission.id)

    async def _poll_until_processed(
        self, base: str, token: str, submission: SubmissionRecord
    ) -> str:
        """Poll commit status until the store has picked the submission up.

        PendingCommit/CommitStarted are retried indefinitely after a fixed
        delay. PreProcessing, Certification and Release all end the run: the
        deployment is done once processing has started without failing.
        """
        # https://github.com/Microsoft/StoreBroker/blob/master/Documentation/USAGE.md#status-progression
        url = f"{base}/submissions/{submission.id}/status"
        attempt = 0
        while True:
            attempt += 1
            body = await self.client.authorized(
                "poll", "Failed to poll for commit status", "GET", url, token
            )
            report = SubmissionStatusReport.model_validate(body)
            if self.settings.metrics_enabled:
                POLL_ATTEMPTS.labels(status=str(report.status)).inc()

            if report.status in RETRY_STATUSES:
                logger.info(
                    "Commit still processing",
                    status=report.status,
                    attempt=attempt,
                    retry_in_sec=self.settings.poll_interval_seconds,
                )
                await self.sleep(self.settings.poll_interval_seconds)
                continue

            if report.status in SUCCESS_STATUSES:
                return report.status

            logger.error("Commit failed", status=report.status, details=report.statusDetails)
            raise SubmissionFailedError(report.status, report.statusDetails)


async def deploy(
    options: Union[DeploymentRequest, Mapping[str, Any]],
    *,
    settings: Optional[Settings] = None,
    http_client: Optional[httpx.AsyncClient] = None,
    sleep: SleepFn = asyncio.sleep,
) -> None:
    """Publish ``options["appx"]`` to the app (or flight) in one call.

    ``options`` takes the keys tenantId, clientId, clientSecret, appId,
    flightId (optional) and appx.
    """
    if not isinstance(options, DeploymentRequest):
        options = DeploymentRequest.model_validate(dict(options))
    settings = settings or Settings()
    async with DevCenterClient(settings, http_client=http_client) as client:
        await SubmissionOrchestrator(client, settings, sleep=sleep).deploy(options)
