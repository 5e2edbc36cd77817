"""
Core — Text-to-model pipeline for deadref

Contains the pure, in-memory stages:
- Models: Diff, codebase and analysis data structures
- Diff: Unified diff parsing
- Context: Change grouping into context blocks
- Deleted: Removed source ranges
- Flattener: Workspace snapshot with project metadata
- Parsing: Entity and reference extraction
"""

from .models import (
    DiffLine, DiffHunk, FileDiff, ParsedDiff,
    ContextBlock, FileWithContext, ContextualDiff,
    FileContent, ProjectInfo, FlattenedCodebase,
    DeletedCode, CodeEntity, EntityReference, EntityType, ReferenceType,
    OrphanedReference, AnalysisWarning, DeletionAnalysisRequest,
    AIAnalysisContext, DeletionAnalysisResult,
)
from .diff import DiffParser, parse_diff, detect_language
from .context import ContextExtractor, extract_context
from .deleted import DeletedContentExtractor, extract_deleted_content
from .flattener import CodebaseFlattener, FlattenerConfig
