"""
Models — Data structures shared by every stage of the engine.

Diff side:      ParsedDiff > FileDiff > DiffHunk > DiffLine
Context side:   ContextualDiff > FileWithContext > ContextBlock
Codebase side:  FlattenedCodebase > FileContent, ProjectInfo
Analysis side:  DeletedCode, CodeEntity, EntityReference,
                OrphanedReference, AnalysisWarning, DeletionAnalysisResult

All values are created fresh per request and owned by the caller.
"""

from enum import Enum
from dataclasses import dataclass, field
from typing import List, Dict, Any, Set, Optional


# Line types
LINE_CONTEXT = "context"
LINE_ADDED = "added"
LINE_REMOVED = "removed"

# File statuses
STATUS_ADDED = "added"
STATUS_MODIFIED = "modified"
STATUS_DELETED = "deleted"
STATUS_RENAMED = "renamed"

# Severities
SEVERITY_ERROR = "error"
SEVERITY_WARNING = "warning"
SEVERITY_INFO = "info"


class EntityType(Enum):
    FUNCTION = "function"
    STRUCT = "struct"
    INTERFACE = "interface"
    TYPE_ALIAS = "type_alias"
    CONSTANT = "constant"
    VARIABLE = "variable"

    @property
    def is_type(self) -> bool:
        return self in (EntityType.STRUCT, EntityType.INTERFACE, EntityType.TYPE_ALIAS)


class ReferenceType(Enum):
    CALL = "call"
    TYPE_USAGE = "type_usage"


# =============================================================================
# Diff
# =============================================================================

@dataclass
class DiffLine:
    type: str
    content: str
    old_line_no: int = 0  # 0 for added lines
    new_line_no: int = 0  # 0 for removed lines

    def to_dict(self) -> Dict[str, Any]:
        return {
            'type': self.type,
            'content': self.content,
            'old_line_no': self.old_line_no,
            'new_line_no': self.new_line_no,
        }


@dataclass
class DiffHunk:
    old_start: int
    old_count: int
    new_start: int
    new_count: int
    lines: List[DiffLine] = field(default_factory=list)
    header: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            'old_start': self.old_start,
            'old_count': self.old_count,
            'new_start': self.new_start,
            'new_count': self.new_count,
            'header': self.header,
            'lines': [line.to_dict() for line in self.lines],
        }


@dataclass
class FileDiff:
    """Changes to a single file."""
    filename: str
    status: str = STATUS_MODIFIED
    language: str = "plaintext"
    additions: int = 0
    deletions: int = 0
    hunks: List[DiffHunk] = field(default_factory=list)
    old_filename: str = ""  # Set for renames

    def to_dict(self) -> Dict[str, Any]:
        return {
            'filename': self.filename,
            'status': self.status,
            'old_filename': self.old_filename,
            'language': self.language,
            'additions': self.additions,
            'deletions': self.deletions,
            'hunks': [hunk.to_dict() for hunk in self.hunks],
        }


@dataclass
class ParsedDiff:
    files: List[FileDiff] = field(default_factory=list)
    total_files: int = 0
    total_added: int = 0
    total_removed: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'files': [f.to_dict() for f in self.files],
            'total_files': self.total_files,
            'total_added': self.total_added,
            'total_removed': self.total_removed,
        }


@dataclass
class ContextBlock:
    """A run of changed lines plus its surrounding context window."""
    start_line: int = 0
    end_line: int = 0
    change_type: str = ""  # "addition" | "deletion" | "modification"
    description: str = ""
    lines: List[DiffLine] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'start_line': self.start_line,
            'end_line': self.end_line,
            'change_type': self.change_type,
            'description': self.description,
            'lines': [line.to_dict() for line in self.lines],
        }


@dataclass
class FileWithContext:
    file_diff: FileDiff
    context_blocks: List[ContextBlock] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        data = self.file_diff.to_dict()
        data['context_blocks'] = [b.to_dict() for b in self.context_blocks]
        return data


@dataclass
class ContextualDiff:
    parsed_diff: ParsedDiff
    files_with_context: List[FileWithContext] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        data = self.parsed_diff.to_dict()
        data['files_with_context'] = [f.to_dict() for f in self.files_with_context]
        return data


# =============================================================================
# Codebase
# =============================================================================

@dataclass
class FileContent:
    path: str
    relative_path: str
    language: str
    content: str
    line_count: int = 0
    size: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'path': self.path,
            'relative_path': self.relative_path,
            'language': self.language,
            'content': self.content,
            'line_count': self.line_count,
            'size': self.size,
        }


@dataclass
class ProjectInfo:
    name: str = ""
    type: str = ""  # "go", "node", "python", "rust" or "" when unknown
    main_files: List[str] = field(default_factory=list)
    config_files: List[str] = field(default_factory=list)
    structure: Dict[str, str] = field(default_factory=dict)  # dir -> purpose

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'type': self.type,
            'main_files': list(self.main_files),
            'config_files': list(self.config_files),
            'structure': dict(self.structure),
        }


@dataclass
class FlattenedCodebase:
    """Codebase snapshot in a form suitable for prompt assembly and scanning."""
    files: List[FileContent] = field(default_factory=list)
    summary: str = ""
    total_files: int = 0
    total_lines: int = 0
    languages: Set[str] = field(default_factory=set)
    project_info: ProjectInfo = field(default_factory=ProjectInfo)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'files': [f.to_dict() for f in self.files],
            'summary': self.summary,
            'total_files': self.total_files,
            'total_lines': self.total_lines,
            'languages': sorted(self.languages),
            'project_info': self.project_info.to_dict(),
        }


# =============================================================================
# Analysis
# =============================================================================

@dataclass
class DeletedCode:
    file: str
    content: str
    start_line: int
    end_line: int
    language: str
    change_type: str = "deleted"

    @property
    def range_label(self) -> str:
        """'line N' or 'lines A-B'."""
        if self.start_line == self.end_line:
            return f"line {self.start_line}"
        return f"lines {self.start_line}-{self.end_line}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            'file': self.file,
            'content': self.content,
            'start_line': self.start_line,
            'end_line': self.end_line,
            'language': self.language,
            'change_type': self.change_type,
        }


@dataclass
class CodeEntity:
    """A declaration found in source text."""
    type: EntityType
    name: str
    file: str = ""
    language: str = ""
    line_number: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'type': self.type.value,
            'name': self.name,
            'file': self.file,
            'language': self.language,
            'line_number': self.line_number,
        }


@dataclass
class EntityReference:
    """A textual use of a known entity name (scanner candidate)."""
    entity_name: str
    file: str
    line_number: int
    reference_type: ReferenceType
    context: str = ""


@dataclass
class OrphanedReference:
    deleted_entity: str
    referencing_file: str
    referencing_lines: List[int] = field(default_factory=list)
    reference_type: str = ""
    context: str = ""
    severity: str = SEVERITY_WARNING
    suggestion: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            'deleted_entity': self.deleted_entity,
            'referencing_file': self.referencing_file,
            'referencing_lines': list(self.referencing_lines),
            'reference_type': self.reference_type,
            'context': self.context,
            'severity': self.severity,
            'suggestion': self.suggestion,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'OrphanedReference':
        return cls(
            deleted_entity=str(data.get('deleted_entity') or ""),
            referencing_file=str(data.get('referencing_file') or ""),
            referencing_lines=[int(n) for n in data.get('referencing_lines') or []],
            reference_type=str(data.get('reference_type') or ""),
            context=str(data.get('context') or ""),
            severity=str(data.get('severity') or SEVERITY_WARNING),
            suggestion=str(data.get('suggestion') or ""),
        )


@dataclass
class AnalysisWarning:
    type: str
    message: str
    file: str = ""
    line_number: int = 0
    severity: str = SEVERITY_WARNING
    suggestion: str = ""

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            'type': self.type,
            'message': self.message,
            'severity': self.severity,
        }
        # Optional fields are omitted when unset
        if self.file:
            data['file'] = self.file
        if self.line_number:
            data['line_number'] = self.line_number
        if self.suggestion:
            data['suggestion'] = self.suggestion
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'AnalysisWarning':
        return cls(
            type=str(data.get('type') or ""),
            message=str(data.get('message') or ""),
            file=str(data.get('file') or ""),
            line_number=int(data.get('line_number') or 0),
            severity=str(data.get('severity') or SEVERITY_WARNING),
            suggestion=str(data.get('suggestion') or ""),
        )


@dataclass
class DeletionAnalysisRequest:
    codebase: Optional[FlattenedCodebase]
    deleted_content: List[DeletedCode] = field(default_factory=list)
    context: str = ""


@dataclass
class AIAnalysisContext:
    """Prompt material handed to an analysis backend."""
    system_prompt: str
    user_prompt: str
    codebase_context: str
    deletion_context: str
    instructions: str
    expected_format: Dict[str, Any] = field(default_factory=dict)

    @property
    def total_length(self) -> int:
        return (len(self.system_prompt) + len(self.user_prompt) +
                len(self.codebase_context) + len(self.deletion_context))

    def to_dict(self) -> Dict[str, Any]:
        return {
            'system_prompt': self.system_prompt,
            'user_prompt': self.user_prompt,
            'codebase_context': self.codebase_context,
            'deletion_context': self.deletion_context,
            'instructions': self.instructions,
            'expected_format': self.expected_format,
        }


@dataclass
class DeletionAnalysisResult:
    orphaned_references: List[OrphanedReference] = field(default_factory=list)
    safe_deletions: List[str] = field(default_factory=list)
    warnings: List[AnalysisWarning] = field(default_factory=list)
    summary: str = ""
    confidence: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'orphaned_references': [r.to_dict() for r in self.orphaned_references],
            'safe_deletions': list(self.safe_deletions),
            'warnings': [w.to_dict() for w in self.warnings],
            'summary': self.summary,
            'confidence': self.confidence,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'DeletionAnalysisResult':
        return cls(
            orphaned_references=[
                OrphanedReference.from_dict(r) for r in data.get('orphaned_references') or []
            ],
            safe_deletions=[str(s) for s in data.get('safe_deletions') or []],
            warnings=[AnalysisWarning.from_dict(w) for w in data.get('warnings') or []],
            summary=str(data.get('summary') or ""),
            confidence=float(data.get('confidence') or 0.0),
        )
