"""
DeletedContentExtractor — Collects removed source ranges from a parsed diff.

A deleted file yields one DeletedCode spanning every removed line.
Any other file yields one DeletedCode per hunk that removes something.
"""

import logging
from typing import List

from .models import ParsedDiff, FileDiff, DiffLine, DeletedCode, LINE_REMOVED, STATUS_DELETED

logger = logging.getLogger(__name__)


def _deleted_code(file_diff: FileDiff, removed: List[DiffLine]) -> DeletedCode:
    return DeletedCode(
        file=file_diff.filename,
        content="\n".join(line.content for line in removed),
        start_line=removed[0].old_line_no,
        end_line=removed[-1].old_line_no,
        language=file_diff.language,
        change_type="deleted",
    )


class DeletedContentExtractor:
    """Turns removed lines into DeletedCode entries, old-file line numbers preserved."""

    def extract_deleted_content(self, parsed_diff: ParsedDiff) -> List[DeletedCode]:
        deleted: List[DeletedCode] = []

        for file_diff in parsed_diff.files:
            if file_diff.status == STATUS_DELETED:
                removed = [line for hunk in file_diff.hunks for line in hunk.lines
                           if line.type == LINE_REMOVED]
                if removed:
                    deleted.append(_deleted_code(file_diff, removed))
                continue

            for hunk in file_diff.hunks:
                removed = [line for line in hunk.lines if line.type == LINE_REMOVED]
                if removed:
                    deleted.append(_deleted_code(file_diff, removed))

        logger.debug("Extracted %d deleted code sections", len(deleted))
        return deleted


def extract_deleted_content(parsed_diff: ParsedDiff) -> List[DeletedCode]:
    """Convenience wrapper around DeletedContentExtractor().extract_deleted_content()."""
    return DeletedContentExtractor().extract_deleted_content(parsed_diff)
