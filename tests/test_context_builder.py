"""
Tests for AIContextBuilder — prompt assembly with character budgets.
"""

import pytest

from deadref.core.models import DeletionAnalysisRequest
from deadref.errors import ContextAssemblyError
from deadref.services.context_builder import (
    AIContextBuilder, SYSTEM_PROMPT, INSTRUCTIONS, EXPECTED_FORMAT,
    FILE_TRUNCATED, CONTENT_TRUNCATED,
)
from tests.factories import make_codebase, make_deleted


@pytest.fixture
def request_with_context():
    codebase = make_codebase({
        "main.go": "package main\n\nfunc main() {\n\tCalculateSum(1, 2)\n}\n",
        "utils.go": "package main\n",
    })
    codebase.project_info.structure = {"pkg": "packages/libraries", "cmd": "command line tools"}
    return DeletionAnalysisRequest(
        codebase=codebase,
        deleted_content=[make_deleted("utils.go", "func CalculateSum(a, b int) int {\n\treturn a + b\n}",
                                      start_line=3)],
        context="Removing unused helpers",
    )


class TestUserPrompt:
    """User prompt text."""

    def test_without_context(self):
        prompt = AIContextBuilder.create_user_prompt("")
        assert prompt.startswith("Please analyze the provided codebase")
        assert "Context of the changes" not in prompt
        assert prompt.endswith("focusing on actionable issues and suggestions for resolution.")

    def test_with_context(self):
        prompt = AIContextBuilder.create_user_prompt("PR #7")
        assert "\n\nContext of the changes: PR #7\n\n" in prompt


class TestBuildContext:
    """Full context assembly."""

    def test_fixed_sections(self, request_with_context):
        context = AIContextBuilder().build_context(request_with_context)

        assert context.system_prompt == SYSTEM_PROMPT
        assert context.instructions == INSTRUCTIONS
        assert context.instructions.startswith("## Analysis Instructions")
        assert context.expected_format == EXPECTED_FORMAT

    def test_expected_format_is_a_copy(self, request_with_context):
        context = AIContextBuilder().build_context(request_with_context)
        context.expected_format["orphaned_references"].clear()
        assert EXPECTED_FORMAT["orphaned_references"]

    def test_codebase_context(self, request_with_context):
        text = AIContextBuilder().build_context(request_with_context).codebase_context

        assert text.startswith("# Codebase Analysis\n\n## Project Overview\n")
        assert "- **Type**: go\n" in text
        assert "- **Total Files**: 2\n" in text
        assert "- **Languages**: go\n" in text
        assert "## Directory Structure\n- **cmd/**: command line tools\n- **pkg/**: packages/libraries\n" in text
        assert "### main.go (go)\n```go\npackage main\n" in text
        assert "### utils.go (go)\n" in text

    def test_no_structure_section_when_empty(self):
        request = DeletionAnalysisRequest(codebase=make_codebase({"a.go": "package a\n"}))
        text = AIContextBuilder().build_context(request).codebase_context
        assert "## Directory Structure" not in text

    def test_deletion_context(self, request_with_context):
        text = AIContextBuilder().build_context(request_with_context).deletion_context

        assert text.startswith("# Deleted Code Analysis\n\n## Context\nRemoving unused helpers\n\n")
        assert "## Deleted Code Sections\n\n" in text
        assert "### 1. utils.go (go, lines 3-5)\n**Type**: deleted\n**Location**: lines 3-5\n\n" in text
        assert "```go\nfunc CalculateSum(a, b int) int {" in text

    def test_single_line_location(self):
        request = DeletionAnalysisRequest(
            codebase=make_codebase({}),
            deleted_content=[make_deleted("a.go", "var x int", start_line=9)],
        )
        text = AIContextBuilder().build_context(request).deletion_context
        assert "### 1. a.go (go, line 9)\n" in text
        assert "## Context" not in text

    def test_missing_codebase(self):
        with pytest.raises(ContextAssemblyError):
            AIContextBuilder().build_context(DeletionAnalysisRequest(codebase=None))

    def test_total_length(self, request_with_context):
        context = AIContextBuilder().build_context(request_with_context)
        assert context.total_length == (len(context.system_prompt) + len(context.user_prompt) +
                                        len(context.codebase_context) + len(context.deletion_context))


class TestBudgets:
    """Truncation placeholders once a budget is exhausted."""

    def test_codebase_truncation(self):
        codebase = make_codebase({
            "small.go": "package a\n",
            "big.go": "x" * 5000,
        })
        text = AIContextBuilder(max_codebase_length=1000).format_codebase_context(codebase)

        assert "### small.go (go)\n```go\npackage a\n" in text
        assert f"### big.go (go)\n{FILE_TRUNCATED}\n\n" in text
        assert "x" * 100 not in text

    def test_later_small_file_still_fits(self):
        codebase = make_codebase({
            "big.go": "x" * 5000,
            "small.go": "package a\n",
        })
        text = AIContextBuilder(max_codebase_length=1000).format_codebase_context(codebase)
        assert FILE_TRUNCATED in text
        assert "```go\npackage a\n" in text

    def test_deletion_truncation(self):
        deleted = [
            make_deleted("a.go", "func A() {}", start_line=1),
            make_deleted("b.go", "y" * 500, start_line=1),
        ]
        text = AIContextBuilder(max_deletion_length=300).format_deletion_context(deleted, "")

        assert "### 1. a.go (go, line 1)\n**Type**: deleted" in text
        assert f"### 2. b.go (go, line 1)\n{CONTENT_TRUNCATED}\n\n" in text
