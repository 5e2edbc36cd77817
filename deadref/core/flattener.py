"""
CodebaseFlattener — Workspace directory to FlattenedCodebase.

Reads source files into memory together with inferred project metadata
(project type, marker files, top-level directory purposes) so later
stages can scan them and assemble prompts.

Exclusion lists live in an immutable FlattenerConfig injected at
construction, never in module globals that callers mutate.

Usage:
    from deadref.core.flattener import CodebaseFlattener, FlattenerConfig

    flattener = CodebaseFlattener(FlattenerConfig())
    codebase = flattener.flatten_workspace("/path/to/repo")
    print(codebase.summary)
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, FrozenSet, Iterable, List, Optional

from ..errors import WorkspaceError
from .diff import detect_language
from .models import FileContent, FlattenedCodebase, ParsedDiff, ProjectInfo

logger = logging.getLogger(__name__)


DEFAULT_EXCLUDED_DIRS: FrozenSet[str] = frozenset({
    'node_modules', 'vendor', '.git', 'dist', 'build', 'target', '.next',
    '.nuxt', 'coverage', '.nyc_output', 'tmp', 'temp', 'logs', '.cache',
    '__pycache__', '.pytest_cache', '.venv', 'venv', 'env',
})

DEFAULT_INCLUDED_EXTENSIONS: FrozenSet[str] = frozenset({
    '.go', '.js', '.ts', '.tsx', '.jsx', '.py', '.java', '.cpp', '.c', '.h', '.hpp',
    '.rs', '.rb', '.php', '.cs', '.swift', '.kt', '.scala', '.sh', '.sql',
    '.json', '.yaml', '.yml', '.toml', '.md', '.txt',
})

DEFAULT_MAX_FILE_SIZE = 1024 * 1024  # 1MB


# Marker file -> project type. Go markers are main files, the rest config files.
MAIN_MARKERS: Dict[str, str] = {
    'go.mod': 'go',
    'main.go': 'go',
}

CONFIG_MARKERS: Dict[str, str] = {
    'package.json': 'node',
    'tsconfig.json': 'node',
    'webpack.config.js': 'node',
    'requirements.txt': 'python',
    'setup.py': 'python',
    'pyproject.toml': 'python',
    'Cargo.toml': 'rust',
}

DIRECTORY_PURPOSES: Dict[str, str] = {
    'src': 'source code',
    'lib': 'source code',
    'test': 'tests',
    'tests': 'tests',
    '__tests__': 'tests',
    'docs': 'documentation',
    'documentation': 'documentation',
    'examples': 'examples',
    'example': 'examples',
    'cmd': 'command line tools',
    'pkg': 'packages/libraries',
    'internal': 'internal packages',
}


@dataclass(frozen=True)
class FlattenerConfig:
    """
    Which files a workspace walk keeps.

    Attributes:
        excluded_dirs: Directory base names that are never descended into.
            Also matched as substrings of each relative path.
        included_extensions: Lowercase extensions (with dot) that are read
        max_file_size: Files larger than this (bytes) are skipped
    """
    excluded_dirs: FrozenSet[str] = field(default=DEFAULT_EXCLUDED_DIRS)
    included_extensions: FrozenSet[str] = field(default=DEFAULT_INCLUDED_EXTENSIONS)
    max_file_size: int = DEFAULT_MAX_FILE_SIZE

    @classmethod
    def from_lists(cls, excluded_dirs: Optional[Iterable[str]] = None,
                   included_extensions: Optional[Iterable[str]] = None,
                   max_file_size: Optional[int] = None) -> 'FlattenerConfig':
        """Build from plain lists (e.g. YAML values); None keeps the default."""
        return cls(
            excluded_dirs=frozenset(excluded_dirs) if excluded_dirs is not None else DEFAULT_EXCLUDED_DIRS,
            included_extensions=(
                frozenset(e.lower() for e in included_extensions)
                if included_extensions is not None else DEFAULT_INCLUDED_EXTENSIONS
            ),
            max_file_size=max_file_size if max_file_size is not None else DEFAULT_MAX_FILE_SIZE,
        )

    def is_excluded_path(self, rel_path: str) -> bool:
        return any(excluded in rel_path for excluded in self.excluded_dirs)


def _count_lines(content: str) -> int:
    return content.count('\n') + 1


def _read_text(path: Path) -> str:
    return path.read_bytes().decode('utf-8', errors='replace')


class CodebaseFlattener:
    """
    Flattens a workspace (or just a diff's files) into memory.

    Read-only: never writes to the workspace.
    """

    def __init__(self, config: Optional[FlattenerConfig] = None):
        self.config = config or FlattenerConfig()

    # =========================================================================
    # Public API
    # =========================================================================

    def flatten_workspace(self, root) -> FlattenedCodebase:
        """
        Read every relevant file under `root`.

        Args:
            root: Workspace directory (str or Path)

        Returns:
            FlattenedCodebase with files in sorted path order

        Raises:
            WorkspaceError: If the root is missing or cannot be listed
        """
        root_path = Path(root)
        if not root_path.is_dir():
            raise WorkspaceError(f"failed to walk workspace: {root} is not a directory")
        try:
            os.listdir(root_path)
        except OSError as e:
            raise WorkspaceError(f"failed to walk workspace: {e}") from e

        files: List[FileContent] = []
        for dirpath, dirnames, filenames in os.walk(root_path):
            # Prune in place so excluded trees are never descended
            dirnames[:] = sorted(d for d in dirnames if d not in self.config.excluded_dirs)

            for filename in sorted(filenames):
                path = Path(dirpath) / filename
                file_content = self._read_candidate(root_path, path)
                if file_content is not None:
                    files.append(file_content)

        # os.walk yields a directory's files before its subdirectories'
        files.sort(key=lambda f: f.relative_path)
        codebase = self._build(root_path, files)
        logger.debug("Flattened workspace %s: %d files, %d lines",
                     root_path, codebase.total_files, codebase.total_lines)
        return codebase

    def flatten_diff(self, root, parsed_diff: ParsedDiff) -> FlattenedCodebase:
        """
        Read exactly the files named in a diff.

        Files that no longer exist or cannot be read are skipped, as are
        paths that resolve outside the root. Size and extension filters are
        not applied here.
        """
        root_path = Path(root)
        resolved_root = root_path.resolve()
        files: List[FileContent] = []

        for file_diff in parsed_diff.files:
            path = root_path / file_diff.filename
            try:
                path.resolve().relative_to(resolved_root)
            except ValueError:
                logger.warning("Skipping %s: outside workspace %s", file_diff.filename, root_path)
                continue
            if not path.is_file():
                continue
            try:
                content = _read_text(path)
            except OSError as e:
                logger.warning("Skipping unreadable file %s: %s", path, e)
                continue
            files.append(FileContent(
                path=str(path),
                relative_path=file_diff.filename,
                language=detect_language(file_diff.filename),
                content=content,
                line_count=_count_lines(content),
                size=len(content.encode('utf-8')),
            ))

        codebase = self._build(root_path, files)
        logger.debug("Flattened %d of %d diff files", codebase.total_files, len(parsed_diff.files))
        return codebase

    # =========================================================================
    # Internals
    # =========================================================================

    def _read_candidate(self, root: Path, path: Path) -> Optional[FileContent]:
        """Apply size/extension/path filters and read the file, or return None."""
        try:
            size = path.stat().st_size
        except OSError as e:
            logger.warning("Skipping %s: %s", path, e)
            return None

        if size > self.config.max_file_size:
            return None
        if path.suffix.lower() not in self.config.included_extensions:
            return None

        rel_path = path.relative_to(root).as_posix()
        if self.config.is_excluded_path(rel_path):
            return None

        try:
            content = _read_text(path)
        except OSError as e:
            logger.warning("Skipping unreadable file %s: %s", path, e)
            return None

        return FileContent(
            path=str(path),
            relative_path=rel_path,
            language=detect_language(path.name),
            content=content,
            line_count=_count_lines(content),
            size=size,
        )

    def _build(self, root: Path, files: List[FileContent]) -> FlattenedCodebase:
        languages = {f.language for f in files}
        return FlattenedCodebase(
            files=files,
            summary=self.generate_summary(files, languages),
            total_files=len(files),
            total_lines=sum(f.line_count for f in files),
            languages=languages,
            project_info=self.detect_project_info(root, files),
        )

    @staticmethod
    def detect_project_info(root: Path, files: List[FileContent]) -> ProjectInfo:
        """Infer project type, marker files and directory purposes."""
        info = ProjectInfo(name=Path(root).resolve().name)

        for file in files:
            rel = file.relative_path.replace('\\', '/')
            parts = rel.split('/')
            basename = parts[-1]

            if basename in MAIN_MARKERS:
                info.type = info.type or MAIN_MARKERS[basename]
                info.main_files.append(rel)
            elif basename in CONFIG_MARKERS:
                info.type = info.type or CONFIG_MARKERS[basename]
                info.config_files.append(rel)

            if len(parts) > 1:
                purpose = DIRECTORY_PURPOSES.get(parts[0])
                if purpose:
                    info.structure[parts[0]] = purpose

        return info

    @staticmethod
    def generate_summary(files: List[FileContent], languages) -> str:
        if not files:
            return "Empty codebase"
        ordered = sorted(languages)
        return f"Codebase with {len(files)} files in {len(ordered)} languages: {', '.join(ordered)}"
