"""
JavaScript language configuration for entity extraction.

Entity kinds recognised:
- function: `function name(`, optionally `export`, `default`, `async`, generator `*`
- struct: `class Name`
- constant: `const name =`
- variable: `let name =` / `var name =`

Identifiers may contain `$`.
"""

from ...models import EntityType
from ..config import LanguageConfig, pattern

IDENT = r'[A-Za-z_$][\w$]*'
EXPORT = r'(?:export\s+)?(?:default\s+)?'


JAVASCRIPT_PATTERNS = [
    pattern(rf'^\s*{EXPORT}(?:async\s+)?function\s*\*?\s*(?P<name>{IDENT})\s*\(',
            EntityType.FUNCTION),
    pattern(rf'^\s*{EXPORT}class\s+(?P<name>{IDENT})', EntityType.STRUCT),
    pattern(rf'^\s*{EXPORT}const\s+(?P<name>{IDENT})\s*=', EntityType.CONSTANT),
    pattern(rf'^\s*{EXPORT}(?:let|var)\s+(?P<name>{IDENT})\s*=', EntityType.VARIABLE),
]


JAVASCRIPT_CONFIG = LanguageConfig(
    name="javascript",
    extensions={'.js', '.jsx'},
    entity_patterns=JAVASCRIPT_PATTERNS,
    comment_prefixes=('//', '/*', '*'),
    identifier_chars='$',
)
