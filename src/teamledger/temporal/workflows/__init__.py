"""Temporal workflows."""

from src.teamledger.temporal.workflows.email_delivery import EmailDeliveryWorkflow
from src.teamledger.temporal.workflows.maintenance import MaintenanceCleanupWorkflow

__all__ = [
    "EmailDeliveryWorkflow",
    "MaintenanceCleanupWorkflow",
]
