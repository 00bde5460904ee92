"""Case graph workflow."""

from datetime import timedelta
from typing import Dict, List

from temporalio import workflow
from temporalio.common import RetryPolicy


@workflow.defn
class CaseGraphWorkflow:
    """Runs the extraction pipeline for one batch of case documents.

    The activity is idempotent, so a retried attempt only fills in what an
    earlier attempt did not write.
    """

    @workflow.run
    async def run(self, case_id: str, documents: List[Dict]) -> Dict:
        workflow.logger.info(f"Starting case graph workflow for {case_id}")

        result = await workflow.execute_activity(
            "populate_case_graph",
            args=[case_id, documents],
            start_to_close_timeout=timedelta(minutes=10),
            retry_policy=RetryPolicy(
                initial_interval=timedelta(seconds=5),
                maximum_attempts=3,
                non_retryable_error_types=["ValidationError"],
            ),
        )

        workflow.logger.info(f"Case graph workflow complete for {case_id}")
        return result
