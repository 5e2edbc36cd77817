"""
Services — Analysis layer for deadref

- ContextBuilder: Prompt assembly with size budgets
- Providers: LLM backend providers
- Backends: Heuristic and LLM analysis strategies
- Deletion: Deletion safety orchestrator
- Review: Diff + workspace to report in one call
"""

from .context_builder import AIContextBuilder
from .providers import LLMProvider, LLMResponse, MockProvider, get_provider, get_provider_status
from .backends import (
    AnalysisBackend, HeuristicBackend, LLMBackend, LLMClient, ProviderDeletionClient,
)
from .deletion import DeletionAnalyzer
from .review import DeletionReview, ReviewReport

__all__ = [
    # Context
    "AIContextBuilder",
    # Providers
    "LLMProvider", "LLMResponse", "MockProvider", "get_provider", "get_provider_status",
    # Backends
    "AnalysisBackend", "HeuristicBackend", "LLMBackend", "LLMClient", "ProviderDeletionClient",
    # Orchestration
    "DeletionAnalyzer", "DeletionReview", "ReviewReport",
]
