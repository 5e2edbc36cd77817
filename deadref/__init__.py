"""
deadref — Deletion safety analysis for code changes

Finds references left dangling when a change deletes functions, types,
constants or variables that other files still use.

Usage:
    from deadref import DeletionReview, get_config

    report = DeletionReview(get_config()).review(raw_diff, "/path/to/checkout")
    for ref in report.result.orphaned_references:
        print(ref.deleted_entity, ref.referencing_file, ref.referencing_lines)
"""

__version__ = "0.1.0"

# Core layer (text -> models)
from .core.models import (
    ParsedDiff, FileDiff, DiffHunk, DiffLine,
    ContextualDiff, FileWithContext, ContextBlock,
    FlattenedCodebase, FileContent, ProjectInfo,
    DeletedCode, CodeEntity, EntityType, EntityReference, ReferenceType,
    OrphanedReference, AnalysisWarning, DeletionAnalysisRequest,
    AIAnalysisContext, DeletionAnalysisResult,
)
from .core.diff import DiffParser, parse_diff
from .core.context import ContextExtractor, extract_context
from .core.deleted import DeletedContentExtractor, extract_deleted_content
from .core.flattener import CodebaseFlattener, FlattenerConfig
from .core.parsing import (
    EntityParser, HeuristicEntityParser, ReferenceScanner, HeuristicReferenceScanner,
    TreeSitterEntityParser,
)

# Services layer
from .services.context_builder import AIContextBuilder
from .services.backends import (
    AnalysisBackend, HeuristicBackend, LLMBackend, LLMClient, ProviderDeletionClient,
)
from .services.deletion import DeletionAnalyzer
from .services.review import DeletionReview, ReviewReport
from .services.providers import get_provider, MockProvider

# Config
from .config import Config, ConfigManager, get_config

# Errors
from .errors import (
    DeadrefError, DiffParseError, WorkspaceError, ContextAssemblyError,
    BackendError, InvalidResponseError, AnalysisCancelled,
)

__all__ = [
    # Models
    "ParsedDiff", "FileDiff", "DiffHunk", "DiffLine",
    "ContextualDiff", "FileWithContext", "ContextBlock",
    "FlattenedCodebase", "FileContent", "ProjectInfo",
    "DeletedCode", "CodeEntity", "EntityType", "EntityReference", "ReferenceType",
    "OrphanedReference", "AnalysisWarning", "DeletionAnalysisRequest",
    "AIAnalysisContext", "DeletionAnalysisResult",
    # Pipeline stages
    "DiffParser", "parse_diff", "ContextExtractor", "extract_context",
    "DeletedContentExtractor", "extract_deleted_content",
    "CodebaseFlattener", "FlattenerConfig",
    "EntityParser", "HeuristicEntityParser", "ReferenceScanner", "HeuristicReferenceScanner",
    "TreeSitterEntityParser",
    # Services
    "AIContextBuilder", "AnalysisBackend", "HeuristicBackend", "LLMBackend", "LLMClient",
    "ProviderDeletionClient", "DeletionAnalyzer", "DeletionReview", "ReviewReport",
    "get_provider", "MockProvider",
    # Config
    "Config", "ConfigManager", "get_config",
    # Errors
    "DeadrefError", "DiffParseError", "WorkspaceError", "ContextAssemblyError",
    "BackendError", "InvalidResponseError", "AnalysisCancelled",
]
