"""
Test Data Factory — Workspaces, diffs and codebases for deadref tests

Provides declarative test data creation on top of pytest's tmp_path:
real files for flattener/review tests, in-memory FlattenedCodebase and
DeletedCode values for analyzer tests.

Usage:
    @pytest.fixture
    def workspace(tmp_path):
        factory = WorkspaceFactory(tmp_path / "repo")
        factory.write("main.go", "package main\\n")
        return factory

    def test_something(workspace):
        codebase = CodebaseFlattener().flatten_workspace(workspace.root)
"""

from pathlib import Path
from typing import Dict, List, Optional

from deadref.core.diff import detect_language
from deadref.core.models import DeletedCode, FileContent, FlattenedCodebase, ProjectInfo


class WorkspaceFactory:
    """
    Builds a real directory tree for tests.

    All paths are relative to `root`, created on demand.
    """

    def __init__(self, root: Path):
        self.root = Path(root)
        self.root.mkdir(parents=True, exist_ok=True)

    def write(self, rel_path: str, content: str = "") -> Path:
        """Create a text file (and its parent directories)."""
        path = self.root / rel_path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
        return path

    def write_bytes(self, rel_path: str, data: bytes) -> Path:
        path = self.root / rel_path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
        return path


def make_codebase(files: Dict[str, str], project_type: str = "go",
                  name: str = "project") -> FlattenedCodebase:
    """In-memory codebase from {relative_path: content}."""
    contents: List[FileContent] = []
    for rel_path, content in files.items():
        contents.append(FileContent(
            path=f"/workspace/{rel_path}",
            relative_path=rel_path,
            language=detect_language(rel_path),
            content=content,
            line_count=content.count('\n') + 1,
            size=len(content),
        ))
    languages = {f.language for f in contents}
    return FlattenedCodebase(
        files=contents,
        summary=f"Codebase with {len(contents)} files",
        total_files=len(contents),
        total_lines=sum(f.line_count for f in contents),
        languages=languages,
        project_info=ProjectInfo(name=name, type=project_type),
    )


def make_deleted(file: str, content: str, start_line: int = 1,
                 end_line: Optional[int] = None) -> DeletedCode:
    """DeletedCode spanning the given content's lines."""
    if end_line is None:
        end_line = start_line + content.count('\n')
    return DeletedCode(
        file=file,
        content=content,
        start_line=start_line,
        end_line=end_line,
        language=detect_language(file),
    )


def git_diff(filename: str, hunks: str, status: str = "modified") -> str:
    """Wrap hunk text in git file headers."""
    header = [f"diff --git a/{filename} b/{filename}"]
    if status == "added":
        header.append("new file mode 100644")
        header.append("--- /dev/null")
        header.append(f"+++ b/{filename}")
    elif status == "deleted":
        header.append("deleted file mode 100644")
        header.append(f"--- a/{filename}")
        header.append("+++ /dev/null")
    else:
        header.append("index 1234567..89abcde 100644")
        header.append(f"--- a/{filename}")
        header.append(f"+++ b/{filename}")
    return "\n".join(header) + "\n" + hunks
