"""
Tests for DeletionAnalyzer — context assembly plus backend dispatch.
"""

import json
import threading

import pytest

from deadref.config import Config, AnalysisConfig, LLMConfig
from deadref.core.models import DeletionAnalysisRequest, DeletionAnalysisResult
from deadref.core.parsing import TreeSitterEntityParser, HeuristicEntityParser
from deadref.errors import AnalysisCancelled, BackendError, ContextAssemblyError
from deadref.services.backends import AnalysisBackend, HeuristicBackend, LLMBackend
from deadref.services.context_builder import AIContextBuilder
from deadref.services.deletion import DeletionAnalyzer
from deadref.services.providers import MockProvider
from tests.factories import make_codebase, make_deleted


@pytest.fixture
def calculate_sum_request():
    return DeletionAnalysisRequest(
        codebase=make_codebase({
            "main.go": "package main\n\nfunc main() {\n\tresult := CalculateSum(5, 3)\n\t_ = result\n}\n",
            "utils.go": "package main\n",
        }),
        deleted_content=[make_deleted("utils.go", "func CalculateSum(a, b int) int {\n\treturn a + b\n}",
                                      start_line=3)],
        context="Removing unused helpers",
    )


class RecordingBackend(AnalysisBackend):
    """Captures what the analyzer hands to its backend."""

    def __init__(self):
        self.calls = []

    def analyze(self, request, ai_context, cancel=None):
        self.calls.append((request, ai_context, cancel))
        return DeletionAnalysisResult(summary="recorded", confidence=0.3)


class TestDeletionAnalyzer:
    """Orchestration."""

    def test_default_is_heuristic(self):
        analyzer = DeletionAnalyzer()
        assert isinstance(analyzer.backend, HeuristicBackend)
        assert isinstance(analyzer.context_builder, AIContextBuilder)

    def test_orphaned_call_detected(self, calculate_sum_request):
        result = DeletionAnalyzer().analyze_deletions(calculate_sum_request)

        assert len(result.orphaned_references) == 1
        ref = result.orphaned_references[0]
        assert ref.deleted_entity == "CalculateSum"
        assert ref.referencing_file == "main.go"
        assert ref.referencing_lines == [4]
        assert ref.context == "result := CalculateSum(5, 3)"
        assert 0.1 <= result.confidence <= 1.0

    def test_safe_deletion(self):
        request = DeletionAnalysisRequest(
            codebase=make_codebase({"main.go": "package main\n\nfunc main() {}\n"}),
            deleted_content=[make_deleted("old.go", "func UnusedHelper() {}")],
        )
        result = DeletionAnalyzer().analyze_deletions(request)

        assert result.orphaned_references == []
        assert result.safe_deletions == ["UnusedHelper"]

    def test_nothing_deleted(self):
        request = DeletionAnalysisRequest(
            codebase=make_codebase({"main.go": "package main\n\nfunc main() {}\n"}),
            deleted_content=[],
        )
        result = DeletionAnalyzer().analyze_deletions(request)

        assert 0.1 <= result.confidence <= 1.0
        assert result.safe_deletions == []
        assert result.warnings == []
        assert result.orphaned_references == []

    def test_backend_receives_built_context(self, calculate_sum_request):
        backend = RecordingBackend()
        cancel = threading.Event()
        result = DeletionAnalyzer(backend=backend).analyze_deletions(calculate_sum_request, cancel)

        assert result.summary == "recorded"
        request, ai_context, seen_cancel = backend.calls[0]
        assert request is calculate_sum_request
        assert "Removing unused helpers" in ai_context.deletion_context
        assert seen_cancel is cancel

    def test_context_assembly_error(self):
        with pytest.raises(ContextAssemblyError) as exc_info:
            DeletionAnalyzer().analyze_deletions(DeletionAnalysisRequest(codebase=None))
        assert str(exc_info.value).startswith("failed to build AI context: ")

    def test_cancellation(self, calculate_sum_request):
        cancel = threading.Event()
        cancel.set()
        with pytest.raises(AnalysisCancelled):
            DeletionAnalyzer().analyze_deletions(calculate_sum_request, cancel)

    def test_cancellation_is_a_backend_error(self):
        assert issubclass(AnalysisCancelled, BackendError)


class TestFromConfig:
    """Backend selection from Config."""

    def test_heuristic_backend(self):
        analyzer = DeletionAnalyzer.from_config(Config())
        assert isinstance(analyzer.backend, HeuristicBackend)
        assert isinstance(analyzer.backend.entity_parser, HeuristicEntityParser)

    def test_tree_sitter_parser_selected(self):
        config = Config(analysis=AnalysisConfig(entity_parser="tree-sitter"))
        analyzer = DeletionAnalyzer.from_config(config)
        assert isinstance(analyzer.backend.entity_parser, TreeSitterEntityParser)

    def test_budgets_forwarded(self):
        config = Config(analysis=AnalysisConfig(max_codebase_length=123, max_deletion_length=45))
        builder = DeletionAnalyzer.from_config(config).context_builder
        assert builder.max_codebase_length == 123
        assert builder.max_deletion_length == 45

    def test_llm_backend_with_provider(self, calculate_sum_request):
        response = {
            "orphaned_references": [{
                "deleted_entity": "CalculateSum",
                "referencing_file": "main.go",
                "referencing_lines": [4],
                "reference_type": "function_call",
                "severity": "error",
            }],
            "safe_deletions": [],
            "warnings": [],
            "summary": "LLM found one call",
            "confidence": 0.95,
        }
        provider = MockProvider(json.dumps(response))
        config = Config(analysis=AnalysisConfig(backend="llm"), llm=LLMConfig(max_tokens=500))
        analyzer = DeletionAnalyzer.from_config(config, provider=provider)

        assert isinstance(analyzer.backend, LLMBackend)
        assert analyzer.backend.client.max_tokens == 500

        result = analyzer.analyze_deletions(calculate_sum_request)
        assert result.summary == "LLM found one call"
        assert result.orphaned_references[0].severity == "error"
        assert provider.calls == 1

    def test_llm_backend_without_credentials_raises(self):
        with pytest.raises(BackendError) as exc_info:
            DeletionAnalyzer.from_config(Config(analysis=AnalysisConfig(backend="llm")))
        assert str(exc_info.value).startswith("LLM backend unavailable: ")
        assert "ANTHROPIC_API_KEY" in str(exc_info.value)

    def test_llm_invalid_response_is_backend_error(self, calculate_sum_request):
        analyzer = DeletionAnalyzer.from_config(
            Config(analysis=AnalysisConfig(backend="llm")), provider=MockProvider("not json"))
        with pytest.raises(BackendError) as exc_info:
            analyzer.analyze_deletions(calculate_sum_request)
        assert str(exc_info.value).startswith("LLM backend failed: ")

    def test_llm_failure_does_not_fall_back(self, calculate_sum_request):
        analyzer = DeletionAnalyzer.from_config(
            Config(analysis=AnalysisConfig(backend="llm")), provider=MockProvider(""))
        with pytest.raises(BackendError):
            analyzer.analyze_deletions(calculate_sum_request)
