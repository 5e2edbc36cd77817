"""
Parsing configuration data structures.

Defines LanguageConfig and EntityPattern — the per-language rules the
heuristic entity parser and reference scanner are driven by.

New languages are added via config, not code changes.
"""

import re
from dataclasses import dataclass, field
from typing import List, Optional, Pattern, Set, Tuple

from ..models import EntityType


@dataclass
class EntityPattern:
    """
    One line-anchored declaration pattern.

    Attributes:
        regex: Compiled pattern with a named group `name`
        entity_type: What a match declares
    """
    regex: Pattern
    entity_type: EntityType

    def match(self, line: str) -> Optional[str]:
        """Return the declared name if the line matches, else None."""
        m = self.regex.match(line)
        return m.group('name') if m else None


def pattern(expr: str, entity_type: EntityType) -> EntityPattern:
    """Compile a declaration pattern."""
    return EntityPattern(regex=re.compile(expr), entity_type=entity_type)


@dataclass
class GroupRule:
    """
    A grouped declaration block such as Go's `const ( ... )`.

    Each member line at brace depth zero is re-read as `<keyword> <line>`
    through the language's entity patterns.

    Attributes:
        opener: Pattern for the opening line, with a named group `keyword`
        closer: Pattern for the closing line
    """
    opener: Pattern
    closer: Pattern


@dataclass
class LanguageConfig:
    """
    Configuration for scanning a specific programming language.

    Attributes:
        name: Language name as produced by detect_language() (e.g. "go")
        extensions: File extensions this config handles (e.g. {'.go'})
        entity_patterns: Ordered; the first pattern matching a line wins
        comment_prefixes: A stripped line starting with one of these is skipped
        group_rule: Optional grouped-declaration block handling
        identifier_chars: Extra characters (beyond \\w) allowed in identifiers
        tree_sitter_name: Grammar name for the AST parser, "" if unsupported
    """
    name: str
    extensions: Set[str]
    entity_patterns: List[EntityPattern] = field(default_factory=list)
    comment_prefixes: Tuple[str, ...] = ('//',)
    group_rule: Optional[GroupRule] = None
    identifier_chars: str = ""
    tree_sitter_name: str = ""

    def matches_extension(self, ext: str) -> bool:
        """Check if this config handles the given extension."""
        return ext.lower() in self.extensions

    def is_comment(self, line: str) -> bool:
        """Check if a line is a whole-line comment."""
        return line.strip().startswith(self.comment_prefixes)

    def identifier_regex(self, name: str) -> Pattern:
        """Pattern matching `name` as a whole identifier."""
        chars = r'\w' + re.escape(self.identifier_chars)
        return re.compile(rf'(?<![{chars}]){re.escape(name)}(?![{chars}])')
