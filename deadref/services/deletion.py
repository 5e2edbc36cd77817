"""
DeletionAnalyzer — Decides whether deleted code leaves dangling references.

Builds the AI analysis context for a request, then hands it to the backend
chosen at construction (heuristic or LLM). Errors carry a stage prefix so
callers can tell context assembly failures from backend failures.

Usage:
    from deadref.services.deletion import DeletionAnalyzer

    analyzer = DeletionAnalyzer()  # heuristic backend
    result = analyzer.analyze_deletions(
        DeletionAnalysisRequest(codebase=codebase, deleted_content=deleted)
    )
    print(result.summary, result.confidence)
"""

import logging
import threading
from typing import Optional

from ..config import Config
from ..core.models import DeletionAnalysisRequest, DeletionAnalysisResult
from ..core.parsing import HeuristicEntityParser, HeuristicReferenceScanner, TreeSitterEntityParser
from ..errors import BackendError, ContextAssemblyError
from .backends import AnalysisBackend, HeuristicBackend, LLMBackend, ProviderDeletionClient
from .context_builder import AIContextBuilder
from .providers import LLMProvider, MockProvider, get_provider, get_provider_status

logger = logging.getLogger(__name__)


class DeletionAnalyzer:
    """
    Top-level deletion safety orchestrator.

    Collaborators are fixed at construction and never mutated, so one
    instance may serve concurrent independent requests.
    """

    def __init__(self, backend: Optional[AnalysisBackend] = None,
                 context_builder: Optional[AIContextBuilder] = None):
        self.backend = backend or HeuristicBackend()
        self.context_builder = context_builder or AIContextBuilder()

    @classmethod
    def from_config(cls, config: Config, provider: Optional[LLMProvider] = None) -> 'DeletionAnalyzer':
        """
        Build an analyzer from application configuration.

        Args:
            config: Loaded Config (analysis.backend selects the strategy)
            provider: LLM provider override; defaults to get_provider(config)

        Raises:
            BackendError: If the llm backend is selected but no configured
                provider is available (the mock is only used when passed in)
        """
        analysis = config.analysis
        builder = AIContextBuilder(
            max_codebase_length=analysis.max_codebase_length,
            max_deletion_length=analysis.max_deletion_length,
        )

        if analysis.backend == "llm":
            if provider is None:
                provider = get_provider(config)
                if isinstance(provider, MockProvider) or not provider.is_available:
                    raise BackendError(f"LLM backend unavailable: {get_provider_status(config)}")
            client = ProviderDeletionClient(provider, max_tokens=config.llm.max_tokens)
            backend: AnalysisBackend = LLMBackend(client)
        else:
            if analysis.entity_parser == "tree-sitter":
                entity_parser = TreeSitterEntityParser()
            else:
                entity_parser = HeuristicEntityParser()
            backend = HeuristicBackend(entity_parser, HeuristicReferenceScanner())

        return cls(backend=backend, context_builder=builder)

    def analyze_deletions(self, request: DeletionAnalysisRequest,
                          cancel: Optional[threading.Event] = None) -> DeletionAnalysisResult:
        """
        Analyze deleted code for orphaned references.

        Args:
            request: Codebase snapshot, deleted sections and free-text context
            cancel: Optional event; when set, analysis stops with AnalysisCancelled

        Returns:
            DeletionAnalysisResult from the configured backend

        Raises:
            ContextAssemblyError: If the analysis context cannot be built
            BackendError: If the backend fails (including cancellation)
        """
        try:
            ai_context = self.context_builder.build_context(request)
        except ContextAssemblyError as e:
            raise ContextAssemblyError(f"failed to build AI context: {e}") from e

        logger.debug("Analyzing %d deleted sections with %s",
                     len(request.deleted_content), type(self.backend).__name__)
        return self.backend.analyze(request, ai_context, cancel)
