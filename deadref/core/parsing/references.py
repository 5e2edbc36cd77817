"""
ReferenceScanner — Finds textual uses of known entity names.

For every non-comment line, each entity name that appears as a whole
identifier is reported once per occurrence. An occurrence followed by
optional whitespace and `(` is a call; any other occurrence is a type
usage. References within a line are ordered by column.

Over-matching (shadowed or duplicate names) and under-matching (aliased
imports) are accepted: this is a textual heuristic.
"""

import re
from abc import ABC, abstractmethod
from typing import List, Optional, Tuple

from ..models import CodeEntity, EntityReference, ReferenceType
from .config import LanguageConfig
from .languages import default_registry
from .registry import ParserRegistry

CALL_SUFFIX = re.compile(r'\s*\(')


class ReferenceScanner(ABC):
    """Abstract base for reference finders."""

    @abstractmethod
    def find_references(self, content: str, filename: str,
                        entities: List[CodeEntity]) -> List[EntityReference]:
        pass


class HeuristicReferenceScanner(ReferenceScanner):
    """Whole-identifier text matcher."""

    def __init__(self, registry: Optional[ParserRegistry] = None):
        self.registry = registry or default_registry()

    def find_references(self, content: str, filename: str,
                        entities: List[CodeEntity]) -> List[EntityReference]:
        config = self.registry.resolve(filename)
        if config is None or not content or not entities:
            return []

        # One pattern per distinct name, in first-seen order
        names = list(dict.fromkeys(e.name for e in entities if e.name))
        patterns = [(name, config.identifier_regex(name)) for name in names]

        references: List[EntityReference] = []
        for line_number, line in enumerate(content.split('\n'), start=1):
            references.extend(self.find_references_in_line(config, line, filename,
                                                           line_number, patterns))
        return references

    @staticmethod
    def find_references_in_line(config: LanguageConfig, line: str, filename: str,
                                line_number: int, patterns) -> List[EntityReference]:
        """Scan a single line; returns references ordered by column."""
        if config.is_comment(line):
            return []

        found: List[Tuple[int, EntityReference]] = []
        context = line.strip()
        for name, regex in patterns:
            for m in regex.finditer(line):
                ref_type = (ReferenceType.CALL if CALL_SUFFIX.match(line, m.end())
                            else ReferenceType.TYPE_USAGE)
                found.append((m.start(), EntityReference(
                    entity_name=name,
                    file=filename,
                    line_number=line_number,
                    reference_type=ref_type,
                    context=context,
                )))

        found.sort(key=lambda item: item[0])
        return [ref for _, ref in found]
