"""
Shared pytest fixtures for the deadref test suite.

Provides sample diffs, on-disk workspaces and in-memory codebases.
No network: LLM paths use MockProvider or stub clients.

Usage in tests:
    def test_parse(calculate_sum_diff):
        parsed = DiffParser().parse_diff(calculate_sum_diff)

    def test_walk(workspace):
        workspace.write("src/app.go", "package app\\n")
"""

import pytest

from deadref.config import ConfigManager
from tests.factories import WorkspaceFactory, git_diff


@pytest.fixture(autouse=True)
def isolated_user_config(tmp_path, monkeypatch):
    """Keep a real ~/.deadref/config.yaml, DEADREF_* env and API keys out of every test."""
    monkeypatch.setattr(ConfigManager, "USER_CONFIG_FILE", tmp_path / "home" / ".deadref" / "config.yaml")
    for var in ("DEADREF_BACKEND", "DEADREF_LLM_PROVIDER", "DEADREF_LLM_MODEL",
                "ANTHROPIC_API_KEY", "OPENAI_API_KEY"):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def workspace(tmp_path):
    """Empty workspace directory named `repo`."""
    return WorkspaceFactory(tmp_path / "repo")


@pytest.fixture
def simple_diff():
    """One modified Go file: 1 line removed, 2 added, inside context."""
    return git_diff("main.go", "\n".join([
        "@@ -1,4 +1,5 @@",
        " package main",
        "-import \"fmt\"",
        "+import (",
        "+\t\"fmt\"",
        " ",
        " func main() {",
        "",
    ]))


@pytest.fixture
def calculate_sum_diff():
    """Removes CalculateSum from utils.go; main.go (not in diff) still calls it."""
    return git_diff("utils.go", "\n".join([
        "@@ -1,9 +1,4 @@",
        " package main",
        " ",
        "-func CalculateSum(a, b int) int {",
        "-\treturn a + b",
        "-}",
        "-",
        "-",
        " func Other() int {",
        " \treturn 1",
        "",
    ]))


@pytest.fixture
def multi_file_diff():
    """A modified file, an added file and a deleted file."""
    modified = git_diff("pkg/service.go", "\n".join([
        "@@ -10,3 +10,3 @@ func Serve() {",
        " \tstart()",
        "-\tlegacyHandler()",
        "+\thandler()",
        " \tstop()",
    ]))
    added = git_diff("web/app.ts", "\n".join([
        "@@ -0,0 +1,2 @@",
        "+export const A = 1;",
        "+export const B = 2;",
    ]), status="added")
    deleted = git_diff("old.py", "\n".join([
        "@@ -1,2 +0,0 @@",
        "-def legacy():",
        "-    return None",
    ]), status="deleted")
    return "\n".join([modified, added, deleted]) + "\n"
