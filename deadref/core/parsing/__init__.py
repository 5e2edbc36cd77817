"""
Parsing module — Language-aware entity and reference extraction.

- LanguageConfig / EntityPattern: Per-language declaration rules
- ParserRegistry: Extension-based routing with a default fallback
- EntityParser / HeuristicEntityParser: Declared entities in source text
- ReferenceScanner / HeuristicReferenceScanner: Textual uses of entity names
- TreeSitterEntityParser: Optional AST-backed EntityParser (Go)

Usage:
    from deadref.core.parsing import HeuristicEntityParser, HeuristicReferenceScanner

    entities = HeuristicEntityParser().parse_entities(deleted_source, "utils.go")
    refs = HeuristicReferenceScanner().find_references(other_source, "main.go", entities)
"""

from .config import LanguageConfig, EntityPattern, GroupRule
from .registry import ParserRegistry
from .languages import default_registry
from .entities import EntityParser, HeuristicEntityParser
from .references import ReferenceScanner, HeuristicReferenceScanner
from .treesitter import TreeSitterEntityParser, tree_sitter_available

__all__ = [
    'LanguageConfig',
    'EntityPattern',
    'GroupRule',
    'ParserRegistry',
    'default_registry',
    'EntityParser',
    'HeuristicEntityParser',
    'ReferenceScanner',
    'HeuristicReferenceScanner',
    'TreeSitterEntityParser',
    'tree_sitter_available',
]
