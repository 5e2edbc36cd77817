"""
Go language configuration for entity extraction.

Entity kinds recognised:
- function: `func Name(`, `func (recv) Name(`, generic `func Name[T any](`
- struct / interface: `type Name struct`, `type Name interface`
- type_alias: any other `type Name ...`, including `type Name = X`
- constant / variable: `const Name`, `var Name` (typed or untyped)

Grouped `const (`, `var (` and `type (` blocks are expanded member by member.
"""

import re

from ...models import EntityType
from ..config import LanguageConfig, GroupRule, pattern

IDENT = r'[A-Za-z_]\w*'
TYPE_PARAMS = r'(?:\[[^\]]*\])?'


# =============================================================================
# Entity Patterns
# =============================================================================

GO_PATTERNS = [
    # func Name(  /  func (r *Recv) Name(  /  func Name[T any](
    pattern(rf'^\s*func\s+(?:\([^)]*\)\s*)?(?P<name>{IDENT})\s*{TYPE_PARAMS}\s*\(',
            EntityType.FUNCTION),
    pattern(rf'^\s*type\s+(?P<name>{IDENT})\s*{TYPE_PARAMS}\s+struct\b', EntityType.STRUCT),
    pattern(rf'^\s*type\s+(?P<name>{IDENT})\s*{TYPE_PARAMS}\s+interface\b', EntityType.INTERFACE),
    pattern(rf'^\s*type\s+(?P<name>{IDENT})\b', EntityType.TYPE_ALIAS),
    pattern(rf'^\s*const\s+(?P<name>{IDENT})\b', EntityType.CONSTANT),
    pattern(rf'^\s*var\s+(?P<name>{IDENT})\b', EntityType.VARIABLE),
]

GO_GROUP_RULE = GroupRule(
    opener=re.compile(r'^\s*(?P<keyword>const|var|type)\s*\(\s*$'),
    closer=re.compile(r'^\s*\)'),
)


GO_CONFIG = LanguageConfig(
    name="go",
    extensions={'.go'},
    entity_patterns=GO_PATTERNS,
    comment_prefixes=('//',),
    group_rule=GO_GROUP_RULE,
    tree_sitter_name="go",
)
