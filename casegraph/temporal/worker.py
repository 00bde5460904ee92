"""Temporal worker for case graph population."""

import asyncio

from temporalio.client import Client
from temporalio.worker import Worker

from casegraph.core.config import settings
from casegraph.database.session import init_database
from casegraph.temporal.activities import populate_case_graph
from casegraph.temporal.workflows import CaseGraphWorkflow
from casegraph.utils.logging import get_logger

LOGGER = get_logger(__name__)


async def main():
    """Start the Temporal worker."""
    temporal = settings.temporal
    LOGGER.info(f"Connecting to Temporal server at {temporal.address}")

    await init_database()

    client = await Client.connect(
        target_host=temporal.address,
        namespace=temporal.namespace,
    )

    worker = Worker(
        client,
        task_queue=temporal.task_queue,
        workflows=[CaseGraphWorkflow],
        activities=[populate_case_graph],
        max_concurrent_activities=5,
        max_concurrent_workflow_tasks=10,
    )

    LOGGER.info(
        "Temporal worker started",
        extra={"task_queue": temporal.task_queue, "namespace": temporal.namespace},
    )
    await worker.run()


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        LOGGER.info("Worker stopped by user")
    except Exception as e:
        LOGGER.error(f"Worker failed: {e}", exc_info=True)
        raise
