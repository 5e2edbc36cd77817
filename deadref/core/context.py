"""
ContextExtractor — Groups diff changes into context blocks.

A context block is a maximal run of changed lines plus up to N lines of
unchanged context on either side, trimmed at hunk boundaries. Two runs
separated by no more than N context lines share one block.

Files that produce no blocks (no changes in any hunk) are omitted.
"""

import logging
from typing import List, Optional, Tuple

from .models import (
    ParsedDiff, DiffHunk, DiffLine, ContextBlock, ContextualDiff, FileWithContext,
    LINE_ADDED, LINE_REMOVED,
)

logger = logging.getLogger(__name__)


DEFAULT_CONTEXT_LINES = 5

CHANGE_ADDITION = "addition"
CHANGE_DELETION = "deletion"
CHANGE_MODIFICATION = "modification"


def _is_change(line: DiffLine) -> bool:
    return line.type in (LINE_ADDED, LINE_REMOVED)


def change_runs(lines: List[DiffLine], max_gap: int) -> List[Tuple[int, int]]:
    """
    Find runs of changed lines as inclusive (first, last) index pairs.

    Runs separated by at most `max_gap` context lines are merged.
    """
    runs: List[Tuple[int, int]] = []
    for i, line in enumerate(lines):
        if not _is_change(line):
            continue
        if runs and i - runs[-1][1] - 1 <= max_gap:
            runs[-1] = (runs[-1][0], i)
        else:
            runs.append((i, i))
    return runs


class ContextExtractor:
    """Builds a ContextualDiff from a ParsedDiff."""

    def __init__(self, context_lines: int = DEFAULT_CONTEXT_LINES):
        self.context_lines = context_lines

    def extract_context(self, parsed_diff: ParsedDiff,
                        context_lines: Optional[int] = None) -> ContextualDiff:
        """
        Add surrounding context to every change in a parsed diff.

        Args:
            parsed_diff: Output of DiffParser.parse_diff()
            context_lines: Window size; None uses the instance default,
                negative values fall back to DEFAULT_CONTEXT_LINES

        Returns:
            ContextualDiff listing only files with at least one block
        """
        window = self.context_lines if context_lines is None else context_lines
        if window < 0:
            window = DEFAULT_CONTEXT_LINES

        files_with_context: List[FileWithContext] = []
        for file_diff in parsed_diff.files:
            blocks: List[ContextBlock] = []
            for hunk in file_diff.hunks:
                blocks.extend(self.extract_blocks(hunk, window))
            if blocks:
                files_with_context.append(FileWithContext(file_diff=file_diff, context_blocks=blocks))

        logger.debug("Extracted context for %d of %d files",
                     len(files_with_context), len(parsed_diff.files))
        return ContextualDiff(parsed_diff=parsed_diff, files_with_context=files_with_context)

    def extract_blocks(self, hunk: DiffHunk, context_lines: int) -> List[ContextBlock]:
        """Create context blocks from a single hunk."""
        lines = hunk.lines
        blocks: List[ContextBlock] = []

        for first, last in change_runs(lines, context_lines):
            start = max(0, first - context_lines)
            end = min(len(lines), last + context_lines + 1)
            block = ContextBlock(lines=list(lines[start:end]))
            for line in lines[first:last + 1]:
                if _is_change(line):
                    block.change_type = self._merge_change_type(block.change_type, line)
            blocks.append(self._finalize(block))

        return blocks

    @staticmethod
    def _merge_change_type(current: str, line: DiffLine) -> str:
        kind = CHANGE_ADDITION if line.type == LINE_ADDED else CHANGE_DELETION
        if not current:
            return kind
        if current != kind:
            return CHANGE_MODIFICATION
        return current

    @staticmethod
    def _finalize(block: ContextBlock) -> ContextBlock:
        """Compute line range and description."""
        numbers = [n for line in block.lines for n in (line.old_line_no, line.new_line_no) if n > 0]
        if numbers:
            block.start_line = min(numbers)
            block.end_line = max(numbers)

        added = sum(1 for line in block.lines if line.type == LINE_ADDED)
        removed = sum(1 for line in block.lines if line.type == LINE_REMOVED)
        if block.change_type == CHANGE_ADDITION:
            block.description = f"Added {added} line(s)"
        elif block.change_type == CHANGE_DELETION:
            block.description = f"Removed {removed} line(s)"
        elif block.change_type == CHANGE_MODIFICATION:
            block.description = f"Modified code: +{added} -{removed} lines"
        else:
            block.description = "Code change"
        return block


def extract_context(parsed_diff: ParsedDiff, context_lines: int = DEFAULT_CONTEXT_LINES) -> ContextualDiff:
    """Convenience wrapper around ContextExtractor().extract_context()."""
    return ContextExtractor(context_lines).extract_context(parsed_diff)
