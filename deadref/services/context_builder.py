"""
AIContextBuilder — Assembles the prompt material for deletion analysis.

Turns a DeletionAnalysisRequest into an AIAnalysisContext: a fixed system
persona, a user prompt carrying the change context, a Markdown rendering
of the codebase and of the deleted sections, an analysis rubric and the
expected JSON shape.

Codebase and deletion renderings each have a character budget. Once a
section would push the running total past its budget it is replaced by a
short placeholder; the file or section is still listed.
"""

import copy
import logging
from typing import Any, Dict, List

from ..core.models import (
    AIAnalysisContext, DeletedCode, DeletionAnalysisRequest, FlattenedCodebase,
)
from ..errors import ContextAssemblyError

logger = logging.getLogger(__name__)


DEFAULT_MAX_CODEBASE_LENGTH = 50000
DEFAULT_MAX_DELETION_LENGTH = 10000


# =============================================================================
# Prompts
# =============================================================================

SYSTEM_PROMPT = """You are an expert code analyst specializing in detecting orphaned references and analyzing code deletion safety.

Your task is to analyze a codebase and identify any references to deleted code that may cause compilation errors, runtime issues, or broken functionality.

You have expertise in multiple programming languages and can identify:
- Function calls to deleted functions
- Imports of deleted modules/packages
- Usage of deleted types, classes, interfaces
- References to deleted constants, variables
- Inheritance from deleted base classes
- Implementation of deleted interfaces
- Usage of deleted decorators, annotations
- References in comments that may indicate dependencies

You should consider the context of the deletion and provide actionable suggestions for resolving any issues found."""

USER_PROMPT = "Please analyze the provided codebase and deleted code to identify any orphaned references that may cause issues."

USER_PROMPT_CONTEXT = "\n\nContext of the changes: {context}"

USER_PROMPT_FOOTER = "\n\nProvide your analysis in the specified JSON format, focusing on actionable issues and suggestions for resolution."

INSTRUCTIONS = """## Analysis Instructions

1. **Scan the codebase** for any references to the deleted entities (functions, classes, types, variables, etc.)

2. **Identify orphaned references** that would cause issues:
   - Function calls to deleted functions
   - Imports/requires of deleted modules
   - Type references to deleted types/classes/interfaces
   - Variable/constant references
   - Inheritance or interface implementation
   - Generic type parameters
   - Decorator/annotation usage

3. **Assess severity**:
   - **error**: Will cause compilation/runtime errors
   - **warning**: May cause issues or indicate needed cleanup
   - **info**: Low-impact references that may need attention

4. **Provide suggestions** for each issue:
   - Remove the reference if no longer needed
   - Replace with alternative implementation
   - Update import statements
   - Refactor code to handle missing dependency

5. **Calculate confidence** (0.0-1.0) based on:
   - Completeness of analysis
   - Clarity of references found
   - Ambiguity in identifier matching

6. **Respond in valid JSON** format matching the expected structure exactly."""

EXPECTED_FORMAT: Dict[str, Any] = {
    "orphaned_references": [
        {
            "deleted_entity": "string - name of the deleted function/class/type",
            "referencing_file": "string - file containing the reference",
            "referencing_lines": [0],
            "reference_type": "string - type of reference (function_call, import, type_usage, etc.)",
            "context": "string - surrounding code context",
            "severity": "string - error|warning|info",
            "suggestion": "string - recommended action to resolve the issue",
        }
    ],
    "safe_deletions": [
        "string - entities that appear safe to delete",
    ],
    "warnings": [
        {
            "type": "string - warning type",
            "message": "string - warning message",
            "file": "string - file path (optional)",
            "line_number": 0,
            "severity": "string - warning|error|info",
            "suggestion": "string - recommended action (optional)",
        }
    ],
    "summary": "string - brief summary of the analysis",
    "confidence": 0.0,
}

FILE_TRUNCATED = "[File content truncated - too large for analysis]"
CONTENT_TRUNCATED = "[Content truncated - too large for analysis]"


class AIContextBuilder:
    """
    Builds bounded AIAnalysisContext values.

    Stateless apart from its budgets; safe to share between threads.
    """

    def __init__(self, max_codebase_length: int = DEFAULT_MAX_CODEBASE_LENGTH,
                 max_deletion_length: int = DEFAULT_MAX_DELETION_LENGTH):
        self.max_codebase_length = max_codebase_length
        self.max_deletion_length = max_deletion_length

    def build_context(self, request: DeletionAnalysisRequest) -> AIAnalysisContext:
        """
        Assemble prompt material for one analysis request.

        Raises:
            ContextAssemblyError: If the request carries no codebase
        """
        if request is None or request.codebase is None:
            raise ContextAssemblyError("request has no codebase")

        context = AIAnalysisContext(
            system_prompt=SYSTEM_PROMPT,
            user_prompt=self.create_user_prompt(request.context),
            codebase_context=self.format_codebase_context(request.codebase),
            deletion_context=self.format_deletion_context(request.deleted_content, request.context),
            instructions=INSTRUCTIONS,
            expected_format=copy.deepcopy(EXPECTED_FORMAT),
        )
        logger.debug("Built AI context: %d chars for %d files, %d deletions",
                     context.total_length, len(request.codebase.files), len(request.deleted_content))
        return context

    @staticmethod
    def create_user_prompt(context: str) -> str:
        prompt = USER_PROMPT
        if context:
            prompt += USER_PROMPT_CONTEXT.format(context=context)
        return prompt + USER_PROMPT_FOOTER

    def format_codebase_context(self, codebase: FlattenedCodebase) -> str:
        """Markdown overview, directory purposes, then one fenced block per file."""
        info = codebase.project_info
        parts: List[str] = [
            "# Codebase Analysis\n\n",
            "## Project Overview\n",
            f"- **Type**: {info.type}\n",
            f"- **Name**: {info.name}\n",
            f"- **Total Files**: {codebase.total_files}\n",
            f"- **Total Lines**: {codebase.total_lines}\n",
            f"- **Languages**: {', '.join(sorted(codebase.languages))}\n",
            f"- **Summary**: {codebase.summary}\n\n",
        ]

        if info.structure:
            parts.append("## Directory Structure\n")
            for directory in sorted(info.structure):
                parts.append(f"- **{directory}/**: {info.structure[directory]}\n")
            parts.append("\n")

        parts.append("## Files\n\n")

        # The header counts toward the budget; placeholders do not
        length = sum(len(p) for p in parts)
        for file in codebase.files:
            section = (f"### {file.relative_path} ({file.language})\n"
                       f"```{file.language}\n{file.content}\n```\n\n")
            if length + len(section) > self.max_codebase_length:
                parts.append(f"### {file.relative_path} ({file.language})\n{FILE_TRUNCATED}\n\n")
            else:
                parts.append(section)
                length += len(section)

        return "".join(parts)

    def format_deletion_context(self, deleted_content: List[DeletedCode], context: str) -> str:
        """Numbered deleted sections with location and fenced content."""
        parts: List[str] = ["# Deleted Code Analysis\n\n"]
        if context:
            parts.append(f"## Context\n{context}\n\n")
        parts.append("## Deleted Code Sections\n\n")

        length = sum(len(p) for p in parts)
        for index, deleted in enumerate(deleted_content, start=1):
            location = deleted.range_label
            heading = f"### {index}. {deleted.file} ({deleted.language}, {location})\n"
            section = (f"{heading}**Type**: {deleted.change_type}\n**Location**: {location}\n\n"
                       f"```{deleted.language}\n{deleted.content}\n```\n\n")
            if length + len(section) > self.max_deletion_length:
                parts.append(f"{heading}{CONTENT_TRUNCATED}\n\n")
            else:
                parts.append(section)
                length += len(section)

        return "".join(parts)
