"""
Temporal Worker - separate process from the API.

Run with:
    python -m src.teamledger.temporal.worker
    python -m src.teamledger.temporal.worker --schedule-cleanup   # also register the cron job
"""

import argparse
import asyncio

import uvicorn
from fastapi import FastAPI
from temporalio.client import Client
from temporalio.worker import Worker

from src.teamledger.core.config import get_settings
from src.teamledger.core.db import dispose_engine
from src.teamledger.core.logging import get_logger, setup_logging
from src.teamledger.temporal.activities import (
    cleanup_otp_codes,
    cleanup_refresh_tokens,
    deliver_email,
    expire_overdue_invites,
)
from src.teamledger.temporal.workflows import EmailDeliveryWorkflow, MaintenanceCleanupWorkflow

logger = get_logger(__name__)

WORKER_HEALTH_PORT = 8001
CLEANUP_WORKFLOW_ID = "maintenance-cleanup"


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Temporal worker")
    parser.add_argument(
        "--schedule-cleanup",
        action="store_true",
        help="Start the cron maintenance workflow if CLEANUP_SCHEDULE is set",
    )
    return parser.parse_args()


def create_worker(client: Client, task_queue: str) -> Worker:
    """Create a worker polling every workflow and activity of this service."""
    return Worker(
        client,
        task_queue=task_queue,
        workflows=[EmailDeliveryWorkflow, MaintenanceCleanupWorkflow],
        activities=[
            deliver_email,
            cleanup_otp_codes,
            cleanup_refresh_tokens,
            expire_overdue_invites,
        ],
        max_concurrent_activities=50,
        max_concurrent_workflow_tasks=50,
    )


async def schedule_cleanup(client: Client) -> None:
    """Register the maintenance workflow as a cron job (no-op without a schedule)."""
    settings = get_settings()
    if not settings.cleanup_schedule:
        logger.info("CLEANUP_SCHEDULE not set - maintenance cleanup not scheduled")
        return
    await client.start_workflow(
        MaintenanceCleanupWorkflow.run,
        settings.cleanup_retention_days,
        id=CLEANUP_WORKFLOW_ID,
        task_queue=settings.temporal_task_queue,
        cron_schedule=settings.cleanup_schedule,
    )
    logger.info("Maintenance cleanup scheduled", cron=settings.cleanup_schedule)


async def run_health_server(task_queue: str, port: int = WORKER_HEALTH_PORT) -> None:
    """Run a lightweight health server for K8s probes."""
    health_app = FastAPI(title="Temporal Worker Health")

    @health_app.get("/health")
    async def health() -> dict[str, str]:
        return {
            "status": "healthy",
            "service": "temporal-worker",
            "task_queue": task_queue,
        }

    @health_app.get("/ready")
    async def ready() -> dict[str, str]:
        return {"status": "ready"}

    config = uvicorn.Config(health_app, host="0.0.0.0", port=port, log_level="warning")
    server = uvicorn.Server(config)
    logger.info(f"Starting health server on port {port}")
    await server.serve()


async def main() -> None:
    args = parse_args()
    settings = get_settings()
    setup_logging(settings.debug)

    client = await Client.connect(
        settings.temporal_host,
        namespace=settings.temporal_namespace,
    )

    if args.schedule_cleanup:
        await schedule_cleanup(client)

    worker = create_worker(client, settings.temporal_task_queue)
    logger.info(f"Polling task queue: {settings.temporal_task_queue}")

    try:
        await asyncio.gather(
            worker.run(),
            run_health_server(settings.temporal_task_queue),
        )
    finally:
        await dispose_engine()


if __name__ == "__main__":
    asyncio.run(main())
