"""
DeletionReview — Raw diff plus workspace to a deletion safety report.

Runs the whole pipeline in one call:
    parse diff -> group context -> extract deleted code
    -> (nothing deleted: skipped report)
    -> flatten workspace -> analyze deletions

Each stage raises its own error type; nothing is caught here.

Usage:
    from deadref.config import get_config
    from deadref.services.review import DeletionReview

    report = DeletionReview(get_config()).review(raw_diff, "/path/to/checkout",
                                                 context="PR #42: Remove legacy helpers")
    if not report.skipped:
        print(report.result.summary)
"""

import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..config import Config
from ..core.context import ContextExtractor
from ..core.deleted import DeletedContentExtractor
from ..core.diff import DiffParser
from ..core.flattener import CodebaseFlattener
from ..core.models import (
    ContextualDiff, DeletedCode, DeletionAnalysisRequest, DeletionAnalysisResult,
    FlattenedCodebase, ParsedDiff,
)
from .deletion import DeletionAnalyzer
from .providers import LLMProvider

logger = logging.getLogger(__name__)


@dataclass
class ReviewReport:
    """Everything one review produced. `result` is None when nothing was deleted."""
    parsed_diff: ParsedDiff
    contextual_diff: ContextualDiff
    deleted_content: List[DeletedCode] = field(default_factory=list)
    codebase: Optional[FlattenedCodebase] = None
    result: Optional[DeletionAnalysisResult] = None

    @property
    def skipped(self) -> bool:
        return self.result is None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'skipped': self.skipped,
            'diff': {
                'total_files': self.parsed_diff.total_files,
                'total_added': self.parsed_diff.total_added,
                'total_removed': self.parsed_diff.total_removed,
                'files_with_changes': len(self.contextual_diff.files_with_context),
            },
            'deleted_sections': len(self.deleted_content),
            'codebase': {
                'total_files': self.codebase.total_files,
                'total_lines': self.codebase.total_lines,
                'summary': self.codebase.summary,
            } if self.codebase else None,
            'result': self.result.to_dict() if self.result else None,
        }


class DeletionReview:
    """
    Wires the pipeline stages together from a Config.

    Raises BackendError at construction when the llm backend is configured
    without an available provider.
    """

    def __init__(self, config: Optional[Config] = None, provider: Optional[LLMProvider] = None):
        self.config = config or Config()
        self.parser = DiffParser()
        self.context_extractor = ContextExtractor(self.config.analysis.context_lines)
        self.deleted_extractor = DeletedContentExtractor()
        self.flattener = CodebaseFlattener(self.config.flattener.to_flattener_config())
        self.analyzer = DeletionAnalyzer.from_config(self.config, provider=provider)

    def review(self, raw_diff: str, workspace_root, context: str = "",
               cancel: Optional[threading.Event] = None) -> ReviewReport:
        """
        Review a diff against the checked-out workspace it applies to.

        Args:
            raw_diff: Unified diff text
            workspace_root: Directory holding the post-change tree
            context: Free text describing the change (e.g. PR title)
            cancel: Optional cancellation event forwarded to the analyzer

        Raises:
            DiffParseError, WorkspaceError, ContextAssemblyError, BackendError
        """
        parsed = self.parser.parse_diff(raw_diff)
        contextual = self.context_extractor.extract_context(parsed)
        deleted = self.deleted_extractor.extract_deleted_content(parsed)

        report = ReviewReport(parsed_diff=parsed, contextual_diff=contextual, deleted_content=deleted)
        if not deleted:
            logger.info("No deletions found, skipping deletion analysis")
            return report

        logger.info("Found %d code deletions, performing safety analysis", len(deleted))
        report.codebase = self.flattener.flatten_workspace(workspace_root)
        logger.info("Flattened codebase: %d files, %d lines",
                    report.codebase.total_files, report.codebase.total_lines)

        report.result = self.analyzer.analyze_deletions(
            DeletionAnalysisRequest(codebase=report.codebase, deleted_content=deleted, context=context),
            cancel=cancel,
        )
        logger.info("Deletion analysis completed: %d orphaned references, %d safe deletions, "
                    "%d warnings, confidence %.2f",
                    len(report.result.orphaned_references), len(report.result.safe_deletions),
                    len(report.result.warnings), report.result.confidence)
        return report
