"""Temporal activity that runs the case extraction pipeline.

Workflows only pass plain dicts and strings; the activity rebuilds the
typed inputs, runs the pipeline against the SQL store and returns the
result as JSON-compatible data.
"""

from typing import Dict, List
from uuid import UUID

from temporalio import activity

from casegraph.models.case_models import DocumentInput
from casegraph.repositories.graph_store import GraphStore


def build_store() -> GraphStore:
    """Store used by the activity; tests patch this."""
    # Import inside function to keep the engine out of the workflow sandbox
    from casegraph.database.session import async_session_maker
    from casegraph.repositories.sql_store import SqlGraphStore

    return SqlGraphStore(async_session_maker)


@activity.defn
async def populate_case_graph(case_id: str, documents: List[Dict]) -> Dict:
    """
    Extract and persist knowledge-graph artifacts for a batch of documents.

    Args:
        case_id: UUID of the case
        documents: Serialized DocumentInput payloads

    Returns:
        Serialized PipelineResult
    """
    from casegraph.core.config import settings
    from casegraph.pipeline.case_pipeline import CaseExtractionPipeline, build_llm_source

    try:
        activity.logger.info(f"Populating case graph for {case_id} from {len(documents)} documents")

        inputs = [DocumentInput.model_validate(document) for document in documents]
        pipeline = CaseExtractionPipeline(
            build_store(),
            config=settings.extraction,
            llm_source=build_llm_source(settings.llm),
        )
        result = await pipeline.run(UUID(case_id), inputs)

        activity.logger.info(
            f"Case graph populated for {case_id}: "
            f"{result.total_created} artifacts created, {len(result.inconsistencies)} inconsistencies"
        )
        return result.model_dump(mode="json")

    except Exception as e:
        activity.logger.error(f"Case graph population failed for {case_id}: {e}")
        raise
