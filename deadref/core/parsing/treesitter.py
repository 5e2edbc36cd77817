"""
TreeSitterEntityParser — AST-backed EntityParser for Go.

Drop-in replacement for HeuristicEntityParser that walks a tree-sitter
syntax tree instead of matching lines. Uses tree-sitter-language-pack for
the Go grammar; the package is optional and only needed when this parser
is selected (`analysis.entity_parser: tree-sitter`).

Function bodies are not descended, so local declarations are ignored.
"""

import logging
from typing import Dict, List, Optional, TYPE_CHECKING

from ..diff import detect_language
from ..models import CodeEntity, EntityType
from .entities import EntityParser

if TYPE_CHECKING:
    from tree_sitter import Node, Parser

logger = logging.getLogger(__name__)


# Node type -> entity type for declarations whose name is a direct field
DECLARATION_NODES: Dict[str, EntityType] = {
    'function_declaration': EntityType.FUNCTION,
    'method_declaration': EntityType.FUNCTION,
    'const_spec': EntityType.CONSTANT,
    'var_spec': EntityType.VARIABLE,
    'type_alias': EntityType.TYPE_ALIAS,
}

# type_spec is classified by its `type` field
TYPE_SPEC_KINDS: Dict[str, EntityType] = {
    'struct_type': EntityType.STRUCT,
    'interface_type': EntityType.INTERFACE,
}

SKIPPED_NODES = {'block', 'func_literal'}


def tree_sitter_available() -> bool:
    """Check if tree-sitter-language-pack is installed."""
    try:
        import tree_sitter_language_pack  # noqa: F401
    except ImportError:
        return False
    return True


class TreeSitterEntityParser(EntityParser):
    """
    Extracts Go declarations from a tree-sitter AST.

    Non-Go files return no entities.
    """

    LANGUAGE = "go"

    def __init__(self):
        self._parser: Optional['Parser'] = None

    def _get_parser(self) -> 'Parser':
        """Load the Go grammar on first use."""
        if self._parser is None:
            try:
                from tree_sitter_language_pack import get_parser
            except ImportError as e:
                raise RuntimeError(
                    "tree-sitter entity parser requires tree-sitter-language-pack. "
                    "Install with: pip install 'deadref[ast]'"
                ) from e
            self._parser = get_parser(self.LANGUAGE)
        return self._parser

    def parse_entities(self, content: str, filename: str) -> List[CodeEntity]:
        if detect_language(filename) != self.LANGUAGE or not content:
            return []

        tree = self._get_parser().parse(content.encode('utf-8'))
        entities: List[CodeEntity] = []
        self._walk(tree.root_node, content.encode('utf-8'), filename, entities)
        entities.sort(key=lambda e: e.line_number)
        logger.debug("tree-sitter found %d entities in %s", len(entities), filename)
        return entities

    def _walk(self, node: 'Node', source: bytes, filename: str,
              entities: List[CodeEntity]) -> None:
        entity_type = DECLARATION_NODES.get(node.type)
        if node.type == 'type_spec':
            type_node = node.child_by_field_name('type')
            kind = type_node.type if type_node is not None else ''
            entity_type = TYPE_SPEC_KINDS.get(kind, EntityType.TYPE_ALIAS)

        if entity_type is not None:
            # const/var specs may declare several names: `const A, B = 1, 2`
            for name_node in node.children_by_field_name('name'):
                entities.append(CodeEntity(
                    type=entity_type,
                    name=source[name_node.start_byte:name_node.end_byte].decode('utf-8'),
                    file=filename,
                    language=self.LANGUAGE,
                    line_number=name_node.start_point[0] + 1,
                ))

        for child in node.children:
            if child.type in SKIPPED_NODES:
                continue
            self._walk(child, source, filename, entities)
