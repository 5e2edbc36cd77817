"""
EntityParser — Finds declared entities in source text.

A line-anchored pattern scanner, not a full parser: each non-comment line
is tried against the language's declaration patterns and the first match
wins. Language comes from the filename's extension; unrecognised files
use the registry's default config.

The EntityParser ABC is the seam for replacing the heuristic with an AST
parser (see treesitter.py) without touching the rest of the pipeline.

Usage:
    from deadref.core.parsing.entities import HeuristicEntityParser

    parser = HeuristicEntityParser()
    for entity in parser.parse_entities(source, "utils.go"):
        print(entity.type.value, entity.name, entity.line_number)
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from ..diff import detect_language
from ..models import CodeEntity
from .config import LanguageConfig
from .languages import default_registry
from .registry import ParserRegistry


class EntityParser(ABC):
    """Abstract base for declaration extractors."""

    @abstractmethod
    def parse_entities(self, content: str, filename: str) -> List[CodeEntity]:
        """
        Extract declared entities from source text.

        Args:
            content: Source text (whole file or a deleted snippet)
            filename: Used for language routing and recorded on each entity

        Returns:
            Entities in source order, line numbers 1-based
        """
        pass


class HeuristicEntityParser(EntityParser):
    """Regex-driven entity parser backed by a ParserRegistry."""

    def __init__(self, registry: Optional[ParserRegistry] = None):
        self.registry = registry or default_registry()

    def parse_entities(self, content: str, filename: str) -> List[CodeEntity]:
        config = self.registry.resolve(filename)
        if config is None or not content:
            return []

        language = detect_language(filename)
        entities: List[CodeEntity] = []

        group_keyword = ""  # Non-empty while inside `const (` etc.
        depth = 0  # Brace depth inside a group

        for line_number, line in enumerate(content.split('\n'), start=1):
            if config.is_comment(line):
                continue

            rule = config.group_rule
            if rule is not None:
                if not group_keyword:
                    opener = rule.opener.match(line)
                    if opener:
                        group_keyword = opener.group('keyword')
                        depth = 0
                        continue
                else:
                    if depth == 0 and rule.closer.match(line):
                        group_keyword = ""
                        continue
                    if depth == 0 and line.strip():
                        entity = self._match(config, f"{group_keyword} {line.strip()}")
                        if entity:
                            entities.append(self._entity(entity, filename, language, line_number))
                    depth = max(0, depth + line.count('{') - line.count('}'))
                    continue

            entity = self._match(config, line)
            if entity:
                entities.append(self._entity(entity, filename, language, line_number))

        return entities

    @staticmethod
    def _match(config: LanguageConfig, line: str):
        for entity_pattern in config.entity_patterns:
            name = entity_pattern.match(line)
            if name:
                return entity_pattern.entity_type, name
        return None

    @staticmethod
    def _entity(match, filename: str, language: str, line_number: int) -> CodeEntity:
        entity_type, name = match
        return CodeEntity(
            type=entity_type,
            name=name,
            file=filename,
            language=language,
            line_number=line_number,
        )
