"""Email delivery workflow - retries a single email until it is accepted."""

from datetime import timedelta

from temporalio import workflow
from temporalio.common import RetryPolicy

with workflow.unsafe.imports_passed_through():
    from src.teamledger.temporal.activities import SendEmailInput, deliver_email


@workflow.defn
class EmailDeliveryWorkflow:
    @workflow.run
    async def run(self, input: SendEmailInput) -> bool:
        return await workflow.execute_activity(
            deliver_email,
            input,
            start_to_close_timeout=timedelta(seconds=30),
            retry_policy=RetryPolicy(
                maximum_attempts=5,
                initial_interval=timedelta(seconds=2),
                backoff_coefficient=2.0,
            ),
        )
