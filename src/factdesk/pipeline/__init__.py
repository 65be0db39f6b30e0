from factdesk.pipeline.orchestrator import IngestionOrchestrator, dedupe_by_url

__all__ = ["IngestionOrchestrator", "dedupe_by_url"]
