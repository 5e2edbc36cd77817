"""
Tests for CodebaseFlattener — workspace walk, filters and project metadata.
"""

import dataclasses

import pytest

from deadref.core.diff import parse_diff
from deadref.core.flattener import (
    CodebaseFlattener, FlattenerConfig, DEFAULT_EXCLUDED_DIRS, DEFAULT_MAX_FILE_SIZE,
)
from deadref.errors import WorkspaceError
from tests.factories import git_diff


@pytest.fixture
def go_workspace(workspace):
    """Small Go project with one excluded directory and one non-source file."""
    workspace.write("go.mod", "module example.com/app\n")
    workspace.write("main.go", "package main\n\nfunc main() {\n\tCalculateSum(1, 2)\n}\n")
    workspace.write("pkg/utils.go", "package pkg\n")
    workspace.write("docs/guide.md", "# Guide\n")
    workspace.write("node_modules/lib/index.js", "module.exports = {}\n")
    workspace.write("assets/logo.png", "not really a png")
    return workspace


class TestFlattenerConfig:
    """Immutable filter settings."""

    def test_defaults(self):
        config = FlattenerConfig()
        assert config.excluded_dirs == DEFAULT_EXCLUDED_DIRS
        assert config.max_file_size == DEFAULT_MAX_FILE_SIZE
        assert ".go" in config.included_extensions

    def test_from_lists_lowercases_extensions(self):
        config = FlattenerConfig.from_lists(included_extensions=[".GO", ".Py"])
        assert config.included_extensions == frozenset({".go", ".py"})
        assert config.excluded_dirs == DEFAULT_EXCLUDED_DIRS

    def test_frozen(self):
        config = FlattenerConfig()
        with pytest.raises(dataclasses.FrozenInstanceError):
            config.max_file_size = 1

    def test_substring_exclusion(self):
        config = FlattenerConfig.from_lists(excluded_dirs=["vendor"])
        assert config.is_excluded_path("third_party/vendored/x.go")
        assert not config.is_excluded_path("pkg/x.go")


class TestFlattenWorkspace:
    """Full workspace walks."""

    def test_reads_included_files_in_sorted_order(self, go_workspace):
        codebase = CodebaseFlattener().flatten_workspace(go_workspace.root)
        paths = [f.relative_path for f in codebase.files]

        assert paths == ["docs/guide.md", "main.go", "pkg/utils.go"]
        assert codebase.total_files == 3

    def test_excluded_dirs_and_extensions_are_skipped(self, go_workspace):
        codebase = CodebaseFlattener().flatten_workspace(go_workspace.root)
        paths = [f.relative_path for f in codebase.files]
        assert not any("node_modules" in p for p in paths)
        assert "go.mod" not in paths
        assert "assets/logo.png" not in paths

    def test_file_content_fields(self, go_workspace):
        codebase = CodebaseFlattener().flatten_workspace(str(go_workspace.root))
        main = next(f for f in codebase.files if f.relative_path == "main.go")

        assert main.language == "go"
        assert "CalculateSum(1, 2)" in main.content
        assert main.line_count == main.content.count("\n") + 1
        assert main.size == len(main.content.encode("utf-8"))

    def test_totals_and_languages(self, go_workspace):
        codebase = CodebaseFlattener().flatten_workspace(go_workspace.root)
        assert codebase.languages == {"go", "markdown"}
        assert codebase.total_lines == sum(f.line_count for f in codebase.files)
        assert codebase.summary == (
            "Codebase with 3 files in 2 languages: go, markdown"
        )

    def test_project_info(self, go_workspace):
        info = CodebaseFlattener().flatten_workspace(go_workspace.root).project_info

        assert info.name == "repo"
        assert info.type == "go"
        assert info.main_files == ["main.go"]
        assert info.config_files == []
        assert info.structure == {"docs": "documentation", "pkg": "packages/libraries"}

    def test_first_marker_sets_type(self, workspace):
        workspace.write("package.json", "{}")
        workspace.write("pyproject.toml", "[project]\n")
        info = CodebaseFlattener().flatten_workspace(workspace.root).project_info

        assert info.type == "node"
        assert info.config_files == ["package.json", "pyproject.toml"]

    def test_nested_files_sort_before_later_root_files(self, workspace):
        workspace.write("zz.go", "package a\n")
        workspace.write("aa/b.go", "package aa\n")
        codebase = CodebaseFlattener().flatten_workspace(workspace.root)

        assert [f.relative_path for f in codebase.files] == ["aa/b.go", "zz.go"]

    def test_nested_marker_sorted_first_sets_type(self, workspace):
        workspace.write("pyproject.toml", "[project]\n")
        workspace.write("aa/package.json", "{}")
        info = CodebaseFlattener().flatten_workspace(workspace.root).project_info

        assert info.type == "node"
        assert info.config_files == ["aa/package.json", "pyproject.toml"]

    def test_large_files_skipped(self, workspace):
        workspace.write("small.go", "package a\n")
        workspace.write("large.go", "x" * 200)
        config = FlattenerConfig.from_lists(max_file_size=100)
        codebase = CodebaseFlattener(config).flatten_workspace(workspace.root)

        assert [f.relative_path for f in codebase.files] == ["small.go"]

    def test_invalid_utf8_is_replaced(self, workspace):
        workspace.write_bytes("bad.go", b"package a\n// \xff\xfe\n")
        codebase = CodebaseFlattener().flatten_workspace(workspace.root)
        assert "�" in codebase.files[0].content

    def test_empty_workspace(self, workspace):
        codebase = CodebaseFlattener().flatten_workspace(workspace.root)
        assert codebase.files == []
        assert codebase.summary == "Empty codebase"
        assert codebase.project_info.type == ""

    def test_missing_root_raises(self, tmp_path):
        with pytest.raises(WorkspaceError):
            CodebaseFlattener().flatten_workspace(tmp_path / "missing")

    def test_file_root_raises(self, workspace):
        path = workspace.write("main.go", "package main\n")
        with pytest.raises(WorkspaceError):
            CodebaseFlattener().flatten_workspace(path)


class TestFlattenDiff:
    """Reading only the files a diff touches."""

    def test_reads_existing_diff_files(self, go_workspace):
        parsed = parse_diff(git_diff("main.go", "@@ -1 +1 @@\n-a\n+b\n") +
                            git_diff("removed.go", "@@ -1 +0,0 @@\n-x\n", status="deleted"))
        codebase = CodebaseFlattener().flatten_diff(go_workspace.root, parsed)

        assert [f.relative_path for f in codebase.files] == ["main.go"]
        assert codebase.project_info.type == "go"

    def test_filters_not_applied(self, go_workspace):
        parsed = parse_diff(git_diff("assets/logo.png", "@@ -1 +1 @@\n-a\n+b\n"))
        codebase = CodebaseFlattener().flatten_diff(go_workspace.root, parsed)
        assert [f.relative_path for f in codebase.files] == ["assets/logo.png"]

    def test_paths_outside_root_are_skipped(self, workspace, tmp_path):
        (tmp_path / "secret.go").write_text("package secret\n")
        parsed = parse_diff(git_diff("../secret.go", "@@ -1 +1 @@\n-a\n+b\n"))
        codebase = CodebaseFlattener().flatten_diff(workspace.root, parsed)

        assert codebase.files == []
        assert codebase.total_files == 0
