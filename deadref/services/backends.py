"""
Analysis backends — Strategies that turn an assembled context into a result.

Two strategies, chosen when the analyzer is constructed:
- HeuristicBackend: entity parser + reference scanner over the flattened
  codebase, deterministic, no network
- LLMBackend: hands the assembled context to an LLMClient and returns its
  result unchanged

The heuristic is never an automatic fallback for a failing LLM: a backend
failure propagates as BackendError.

ProviderDeletionClient is the LLMClient built on an LLMProvider. It
validates the context, sends one prompt, strips code fences from the reply
and checks the result contract before returning it.
"""

import json
import logging
import threading
from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Tuple

from ..core.models import (
    AIAnalysisContext, AnalysisWarning, CodeEntity, DeletedCode, DeletionAnalysisRequest,
    DeletionAnalysisResult, EntityType, OrphanedReference, SEVERITY_WARNING,
)
from ..core.parsing import (
    EntityParser, HeuristicEntityParser, HeuristicReferenceScanner, ReferenceScanner,
)
from ..errors import AnalysisCancelled, BackendError, InvalidResponseError
from .providers import LLMProvider

logger = logging.getLogger(__name__)


DEFAULT_MAX_TOKENS = 8000
MAX_CODEBASE_CONTEXT = 1_000_000
MAX_PROMPT_SECTION = 100_000

REFERENCE_TYPE = "potential_usage"

FUNCTION_SUGGESTION = ("Remove the call to '{name}' or replace with an alternative function. "
                       "Consider refactoring the code to handle the missing functionality.")
TYPE_SUGGESTION = ("Remove references to type '{name}' or replace with an alternative type. "
                   "Update variable declarations and type annotations.")
GENERIC_SUGGESTION = "Verify if '{name}' is still needed after deletion"
REFACTOR_NOTE = " This appears to be part of a refactoring effort."

WARNING_SUGGESTION = ("Review the identified references and either remove them "
                      "or provide alternative implementations")

WELL_SUPPORTED_TYPES = ("go", "javascript", "typescript")


def check_cancelled(cancel: Optional[threading.Event]) -> None:
    """Raise AnalysisCancelled if the event is set."""
    if cancel is not None and cancel.is_set():
        raise AnalysisCancelled("analysis cancelled")


# =============================================================================
# Strategy interfaces
# =============================================================================

class AnalysisBackend(ABC):
    """Produces a DeletionAnalysisResult from a request and its assembled context."""

    @abstractmethod
    def analyze(self, request: DeletionAnalysisRequest, ai_context: AIAnalysisContext,
                cancel: Optional[threading.Event] = None) -> DeletionAnalysisResult:
        pass


class LLMClient(ABC):
    """
    Anything that can answer a deletion analysis prompt.

    On success the result satisfies: confidence in [0, 1]; every orphaned
    reference names an entity and a file and lists at least one line.
    Implementations must honour the cancellation event.
    """

    @abstractmethod
    def analyze_deletions(self, ai_context: AIAnalysisContext,
                          cancel: Optional[threading.Event] = None) -> DeletionAnalysisResult:
        pass


# =============================================================================
# Heuristic backend
# =============================================================================

class HeuristicBackend(AnalysisBackend):
    """
    Textual reference search for every entity declared in deleted code.

    Each file except the one the code was deleted from is scanned. Matches
    are grouped into one OrphanedReference per (entity, referencing file).
    """

    def __init__(self, entity_parser: Optional[EntityParser] = None,
                 reference_scanner: Optional[ReferenceScanner] = None):
        self.entity_parser = entity_parser or HeuristicEntityParser()
        self.reference_scanner = reference_scanner or HeuristicReferenceScanner()

    def analyze(self, request: DeletionAnalysisRequest, ai_context: AIAnalysisContext,
                cancel: Optional[threading.Event] = None) -> DeletionAnalysisResult:
        codebase = request.codebase
        orphaned: List[OrphanedReference] = []
        declared: List[str] = []

        for deleted in request.deleted_content:
            check_cancelled(cancel)
            entities = self.entity_parser.parse_entities(deleted.content, deleted.file)
            declared.extend(e.name for e in entities)
            orphaned.extend(self._find_orphans(deleted, entities, codebase.files, ai_context))

        warnings: List[AnalysisWarning] = []
        if orphaned:
            warnings.append(AnalysisWarning(
                type="orphaned_references",
                message=f"Found {len(orphaned)} potential orphaned references",
                severity=SEVERITY_WARNING,
                suggestion=WARNING_SUGGESTION,
            ))

        referenced = {ref.deleted_entity for ref in orphaned}
        safe = [name for name in dict.fromkeys(declared) if name not in referenced]

        result = DeletionAnalysisResult(
            orphaned_references=orphaned,
            safe_deletions=safe,
            warnings=warnings,
            summary=(f"Heuristic analysis of {len(request.deleted_content)} deleted code sections "
                     f"across {len(codebase.files)} files. Found {len(orphaned)} potential issues."),
            confidence=self.calculate_confidence(request, len(orphaned), ai_context.total_length),
        )
        logger.info("Heuristic analysis: %d orphaned references, %d safe deletions",
                    len(orphaned), len(safe))
        return result

    def _find_orphans(self, deleted: DeletedCode, entities: List[CodeEntity], files,
                      ai_context: AIAnalysisContext) -> List[OrphanedReference]:
        if not entities:
            return []

        grouped: Dict[Tuple[str, str], OrphanedReference] = {}
        for file in files:
            if file.relative_path == deleted.file:
                continue
            for ref in self.reference_scanner.find_references(file.content, file.relative_path, entities):
                key = (ref.entity_name, file.relative_path)
                orphan = grouped.get(key)
                if orphan is None:
                    grouped[key] = OrphanedReference(
                        deleted_entity=ref.entity_name,
                        referencing_file=file.relative_path,
                        referencing_lines=[ref.line_number],
                        reference_type=REFERENCE_TYPE,
                        context=ref.context,
                        severity=SEVERITY_WARNING,
                        suggestion=self.suggestion(ref.entity_name, entities, ai_context),
                    )
                elif ref.line_number not in orphan.referencing_lines:
                    orphan.referencing_lines.append(ref.line_number)

        for orphan in grouped.values():
            orphan.referencing_lines.sort()
        return list(grouped.values())

    @staticmethod
    def suggestion(name: str, entities: List[CodeEntity], ai_context: AIAnalysisContext) -> str:
        """Suggestion text keyed on what the deleted snippet declared."""
        if any(e.type == EntityType.FUNCTION for e in entities):
            return FUNCTION_SUGGESTION.format(name=name)
        if any(e.type.is_type for e in entities):
            return TYPE_SUGGESTION.format(name=name)

        text = GENERIC_SUGGESTION.format(name=name)
        if "refactor" in ai_context.deletion_context.lower():
            text += REFACTOR_NOTE
        return text

    @staticmethod
    def calculate_confidence(request: DeletionAnalysisRequest, ref_count: int,
                             context_length: int) -> float:
        """Score in [0.1, 1.0] from context size, codebase size, project type and findings."""
        confidence = 0.6

        if context_length > 10000:
            confidence += 0.1
        if len(request.codebase.files) > 10:
            confidence += 0.1
        if request.codebase.project_info.type in WELL_SUPPORTED_TYPES:
            confidence += 0.1

        if ref_count == 0:
            confidence += 0.1
        elif ref_count > 10:
            confidence -= 0.1

        return round(min(1.0, max(0.1, confidence)), 2)


# =============================================================================
# LLM backend
# =============================================================================

class LLMBackend(AnalysisBackend):
    """Delegates to an LLMClient; its result is returned as-is."""

    def __init__(self, client: LLMClient):
        self.client = client

    def analyze(self, request: DeletionAnalysisRequest, ai_context: AIAnalysisContext,
                cancel: Optional[threading.Event] = None) -> DeletionAnalysisResult:
        try:
            return self.client.analyze_deletions(ai_context, cancel)
        except AnalysisCancelled:
            raise
        except Exception as e:
            raise BackendError(f"LLM backend failed: {e}") from e


def sanitize_input(text: str) -> str:
    """Drop control characters (keeping \\t \\n \\r) and cap the length."""
    cleaned = "".join(ch for ch in text if ord(ch) >= 32 or ch in "\t\n\r")
    if len(cleaned) > MAX_PROMPT_SECTION:
        cleaned = cleaned[:MAX_PROMPT_SECTION] + "... [truncated]"
    return cleaned


def strip_code_fences(text: str) -> str:
    """Remove a surrounding ```json or ``` fence if present."""
    clean = text.strip()
    for fence in ("```json", "```"):
        if clean.startswith(fence):
            clean = clean[len(fence):]
            if clean.endswith("```"):
                clean = clean[:-3]
            return clean.strip()
    return clean


class ProviderDeletionClient(LLMClient):
    """
    LLMClient over any LLMProvider (Claude, OpenAI, Mock).

    Usage:
        client = ProviderDeletionClient(get_provider(config), max_tokens=8000)
        result = client.analyze_deletions(ai_context)
    """

    def __init__(self, provider: LLMProvider, max_tokens: int = DEFAULT_MAX_TOKENS):
        self.provider = provider
        self.max_tokens = max_tokens

    def analyze_deletions(self, ai_context: AIAnalysisContext,
                          cancel: Optional[threading.Event] = None) -> DeletionAnalysisResult:
        self.validate_context(ai_context)
        check_cancelled(cancel)

        response = self.provider.complete(
            system=ai_context.system_prompt,
            user=self.build_user_prompt(ai_context),
            max_tokens=self.max_tokens,
        )
        logger.debug("LLM deletion analysis tokens: %s", response.format_tokens())
        check_cancelled(cancel)

        if not response.text:
            raise InvalidResponseError("no text content in response")
        return self.parse_response(response.text)

    @staticmethod
    def validate_context(ai_context: Optional[AIAnalysisContext]) -> None:
        if ai_context is None:
            raise ValueError("AI analysis context cannot be None")
        if not ai_context.codebase_context:
            raise ValueError("codebase context cannot be empty")
        if not ai_context.deletion_context:
            raise ValueError("deletion context cannot be empty")
        if len(ai_context.codebase_context) > MAX_CODEBASE_CONTEXT:
            raise ValueError(
                f"codebase context too large ({len(ai_context.codebase_context)} chars)"
            )

    @staticmethod
    def build_user_prompt(ai_context: AIAnalysisContext) -> str:
        """User prompt, codebase, deletions and rubric, then the expected JSON shape."""
        sections = [
            sanitize_input(ai_context.user_prompt),
            sanitize_input(ai_context.codebase_context),
            sanitize_input(ai_context.deletion_context),
            sanitize_input(ai_context.instructions),
        ]
        expected = json.dumps(ai_context.expected_format, indent=2)
        return ("\n\n".join(sections) + "\n\n"
                "Expected JSON Response Format:\n"
                f"```json\n{expected}\n```\n\n"
                "Please provide your analysis in the exact JSON format above.")

    def parse_response(self, text: str) -> DeletionAnalysisResult:
        """
        Decode and validate a JSON analysis.

        Raises:
            InvalidResponseError: If the text is not JSON or breaks the result contract
        """
        try:
            data = json.loads(strip_code_fences(text))
        except json.JSONDecodeError as e:
            raise InvalidResponseError(f"failed to parse JSON response: {e}") from e
        if not isinstance(data, dict):
            raise InvalidResponseError("response is not a JSON object")

        try:
            result = DeletionAnalysisResult.from_dict(data)
        except (AttributeError, TypeError, ValueError) as e:
            raise InvalidResponseError(f"invalid response structure: {e}") from e

        self.validate_result(result)
        return result

    @staticmethod
    def validate_result(result: DeletionAnalysisResult) -> None:
        if not 0.0 <= result.confidence <= 1.0:
            raise InvalidResponseError(
                f"confidence must be between 0 and 1, got {result.confidence}"
            )
        for i, ref in enumerate(result.orphaned_references):
            if not ref.deleted_entity:
                raise InvalidResponseError(f"orphaned reference {i}: missing deleted entity")
            if not ref.referencing_file:
                raise InvalidResponseError(f"orphaned reference {i}: missing referencing file")
            if not ref.referencing_lines:
                raise InvalidResponseError(f"orphaned reference {i}: missing referencing lines")
        for i, warning in enumerate(result.warnings):
            if not warning.type:
                raise InvalidResponseError(f"warning {i}: missing type")
            if not warning.message:
                raise InvalidResponseError(f"warning {i}: missing message")
