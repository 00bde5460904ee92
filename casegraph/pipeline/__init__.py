from casegraph.pipeline.case_pipeline import CaseExtractionPipeline, CaseLockRegistry, build_llm_source
from casegraph.pipeline.document_processor import DocumentProcessor
from casegraph.pipeline.persistence import PersistenceAdapter

__all__ = [
    "CaseExtractionPipeline",
    "CaseLockRegistry",
    "DocumentProcessor",
    "PersistenceAdapter",
    "build_llm_source",
]
