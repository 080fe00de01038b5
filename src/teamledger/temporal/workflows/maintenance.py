"""
Maintenance Cleanup Workflow.

Deletes stale one-time codes and refresh tokens and expires overdue invites.
Designed to run on a schedule (e.g. daily at 3am UTC via Temporal cron).
Every activity is idempotent.
"""

from datetime import timedelta

from temporalio import workflow
from temporalio.common import RetryPolicy

with workflow.unsafe.imports_passed_through():
    from src.teamledger.temporal.activities import (
        cleanup_otp_codes,
        cleanup_refresh_tokens,
        expire_overdue_invites,
    )

_RETRY = RetryPolicy(maximum_attempts=3, initial_interval=timedelta(seconds=2))


@workflow.defn
class MaintenanceCleanupWorkflow:
    @workflow.run
    async def run(self, retention_days: int = 30) -> dict[str, int]:
        """
        Returns:
            Counts by kind: {"refresh_tokens", "otp_codes", "expired_invites", "total"}
        """
        workflow.logger.info(f"Starting maintenance cleanup (retention: {retention_days} days)")

        refresh_task = workflow.execute_activity(
            cleanup_refresh_tokens,
            retention_days,
            start_to_close_timeout=timedelta(minutes=5),
            retry_policy=_RETRY,
        )
        otp_task = workflow.execute_activity(
            cleanup_otp_codes,
            retention_days,
            start_to_close_timeout=timedelta(minutes=5),
            retry_policy=_RETRY,
        )
        invite_task = workflow.execute_activity(
            expire_overdue_invites,
            start_to_close_timeout=timedelta(minutes=5),
            retry_policy=_RETRY,
        )

        refresh_count = await refresh_task
        otp_count = await otp_task
        invite_count = await invite_task

        result = {
            "refresh_tokens": refresh_count,
            "otp_codes": otp_count,
            "expired_invites": invite_count,
            "total": refresh_count + otp_count + invite_count,
        }
        workflow.logger.info(f"Maintenance cleanup complete: {result}")
        return result
