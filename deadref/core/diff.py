"""
DiffParser — Unified diff text to structured ParsedDiff.

Understands the git flavour of unified diff:
    diff --git a/<path> b/<path>
    new file mode / deleted file mode / rename from / rename to
    --- a/<path>
    +++ b/<path>
    @@ -oldStart[,oldCount] +newStart[,newCount] @@ [label]
    ' ' context, '+' added, '-' removed

Only an undecomposable `diff --git` header or a malformed `@@` header is
fatal. Everything else degrades gracefully.

Usage:
    from deadref.core.diff import DiffParser

    parsed = DiffParser().parse_diff(raw_diff)
    print(parsed.total_added, parsed.total_removed)
"""

import logging
import re
from pathlib import PurePosixPath
from typing import Dict, List, Optional, Tuple

from ..errors import DiffParseError
from .models import (
    ParsedDiff, FileDiff, DiffHunk, DiffLine,
    LINE_CONTEXT, LINE_ADDED, LINE_REMOVED,
    STATUS_ADDED, STATUS_MODIFIED, STATUS_DELETED, STATUS_RENAMED,
)

logger = logging.getLogger(__name__)


# Extension -> language name. Unknown extensions map to "plaintext".
LANGUAGE_BY_EXTENSION: Dict[str, str] = {
    '.go': 'go',
    '.js': 'javascript',
    '.jsx': 'javascript',
    '.ts': 'typescript',
    '.tsx': 'typescript',
    '.py': 'python',
    '.java': 'java',
    '.cpp': 'cpp',
    '.hpp': 'cpp',
    '.c': 'c',
    '.h': 'c',
    '.rs': 'rust',
    '.rb': 'ruby',
    '.php': 'php',
    '.cs': 'csharp',
    '.swift': 'swift',
    '.kt': 'kotlin',
    '.scala': 'scala',
    '.sh': 'bash',
    '.sql': 'sql',
    '.md': 'markdown',
    '.yaml': 'yaml',
    '.yml': 'yaml',
    '.json': 'json',
    '.xml': 'xml',
    '.html': 'html',
    '.css': 'css',
    '.scss': 'scss',
    '.sass': 'sass',
}

DEFAULT_LANGUAGE = "plaintext"

HUNK_HEADER_RE = re.compile(r'^@@ -(\d+)(?:,(\d+))? \+(\d+)(?:,(\d+))? @@(.*)$')


def detect_language(filename: str) -> str:
    """Detect programming language from a filename's extension."""
    ext = PurePosixPath(filename).suffix.lower()
    return LANGUAGE_BY_EXTENSION.get(ext, DEFAULT_LANGUAGE)


def extract_paths(line: str) -> Tuple[str, str]:
    """
    Extract (old_path, new_path) from a `diff --git a/<p> b/<p>` line.

    Raises:
        DiffParseError: If the header does not carry two paths
    """
    parts = line.split()
    if len(parts) < 4:
        raise DiffParseError(f"invalid diff header format: {line!r}")

    old_path, new_path = parts[2], parts[3]
    if old_path.startswith('a/'):
        old_path = old_path[2:]
    if new_path.startswith('b/'):
        new_path = new_path[2:]

    if not old_path or not new_path:
        raise DiffParseError(f"missing path in diff header: {line!r}")
    return old_path, new_path


def parse_hunk_header(line: str) -> DiffHunk:
    """
    Parse a `@@ -a[,b] +c[,d] @@ [label]` line into an empty DiffHunk.

    Omitted counts default to 1.

    Raises:
        DiffParseError: If the line does not match the hunk header grammar
    """
    match = HUNK_HEADER_RE.match(line)
    if not match:
        raise DiffParseError(f"invalid hunk header format: {line!r}")

    old_start, old_count, new_start, new_count, _label = match.groups()
    return DiffHunk(
        old_start=int(old_start),
        old_count=int(old_count) if old_count is not None else 1,
        new_start=int(new_start),
        new_count=int(new_count) if new_count is not None else 1,
        header=line,
    )


class DiffParser:
    """
    Parses raw unified diff text.

    Stateless: one instance can parse any number of diffs, from any
    number of threads.
    """

    def parse_diff(self, raw_diff: str) -> ParsedDiff:
        """
        Parse a unified diff string into structured data.

        Args:
            raw_diff: Diff text (may be empty)

        Returns:
            ParsedDiff with per-file hunks and totals

        Raises:
            DiffParseError: On a malformed `diff --git` or `@@` header
        """
        if not raw_diff:
            return ParsedDiff()

        files: List[FileDiff] = []
        current_file: Optional[FileDiff] = None
        current_hunk: Optional[DiffHunk] = None
        old_line_no = new_line_no = 0

        for index, line in enumerate(raw_diff.split('\n'), start=1):
            if line.endswith('\r'):
                line = line[:-1]

            if line.startswith('diff --git'):
                try:
                    _old_path, new_path = extract_paths(line)
                except DiffParseError as e:
                    raise DiffParseError(
                        f"failed to extract filename: {e}", line_number=index
                    ) from e
                current_file = FileDiff(
                    filename=new_path,
                    status=STATUS_MODIFIED,
                    language=detect_language(new_path),
                )
                files.append(current_file)
                current_hunk = None
                continue

            if current_file is None:
                # Preamble before the first file (e.g. commit message)
                continue

            if line.startswith('@@'):
                try:
                    current_hunk = parse_hunk_header(line)
                except DiffParseError as e:
                    raise DiffParseError(
                        f"failed to parse hunk header: {e}", line_number=index
                    ) from e
                current_file.hunks.append(current_hunk)
                old_line_no = current_hunk.old_start
                new_line_no = current_hunk.new_start
                continue

            if current_hunk is None:
                self._apply_header_line(current_file, line)
                continue

            if line.startswith('\\'):
                # "\ No newline at end of file"
                continue

            marker = line[:1]
            if marker == '+':
                current_hunk.lines.append(DiffLine(
                    type=LINE_ADDED, content=line[1:], new_line_no=new_line_no,
                ))
                new_line_no += 1
                current_file.additions += 1
            elif marker == '-':
                current_hunk.lines.append(DiffLine(
                    type=LINE_REMOVED, content=line[1:], old_line_no=old_line_no,
                ))
                old_line_no += 1
                current_file.deletions += 1
            elif marker == ' ' or (line == '' and self._hunk_expects_more(current_hunk, old_line_no, new_line_no)):
                current_hunk.lines.append(DiffLine(
                    type=LINE_CONTEXT, content=line[1:],
                    old_line_no=old_line_no, new_line_no=new_line_no,
                ))
                old_line_no += 1
                new_line_no += 1
            # Any other line inside a hunk is not diff content; ignore it

        parsed = ParsedDiff(
            files=files,
            total_files=len(files),
            total_added=sum(f.additions for f in files),
            total_removed=sum(f.deletions for f in files),
        )
        logger.debug("Parsed diff: %d files, +%d -%d",
                     parsed.total_files, parsed.total_added, parsed.total_removed)
        return parsed

    def _apply_header_line(self, file_diff: FileDiff, line: str) -> None:
        """Apply an extended header line (between `diff --git` and the first hunk)."""
        if line.startswith('new file mode'):
            file_diff.status = STATUS_ADDED
        elif line.startswith('deleted file mode'):
            file_diff.status = STATUS_DELETED
        elif line.startswith('rename from '):
            file_diff.status = STATUS_RENAMED
            file_diff.old_filename = line[len('rename from '):]
        elif line.startswith('rename to '):
            file_diff.status = STATUS_RENAMED
        # '--- ', '+++ ', index/mode/similarity lines: ignored

    @staticmethod
    def _hunk_expects_more(hunk: DiffHunk, old_line_no: int, new_line_no: int) -> bool:
        """True while the hunk has not yet received all lines its header announced."""
        # The line counters advance from the start lines, so they measure what was seen
        return (old_line_no < hunk.old_start + hunk.old_count or
                new_line_no < hunk.new_start + hunk.new_count)


def parse_diff(raw_diff: str) -> ParsedDiff:
    """Convenience wrapper around DiffParser().parse_diff()."""
    return DiffParser().parse_diff(raw_diff)
