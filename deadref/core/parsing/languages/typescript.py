"""
TypeScript language configuration for entity extraction.

Extends the JavaScript patterns with TypeScript-specific declarations:
- interface: `interface Name`
- type_alias: `type Name =` (generics stripped)
- struct: `abstract class Name`
- constant / variable: type-annotated `const name: T =` / `let name: T =`
"""

from ...models import EntityType
from ..config import LanguageConfig, pattern
from .javascript import IDENT, EXPORT, JAVASCRIPT_PATTERNS


TYPESCRIPT_SPECIFIC_PATTERNS = [
    pattern(rf'^\s*{EXPORT}(?:declare\s+)?interface\s+(?P<name>{IDENT})', EntityType.INTERFACE),
    pattern(rf'^\s*{EXPORT}(?:declare\s+)?type\s+(?P<name>{IDENT})\s*(?:<[^=]*>)?\s*=',
            EntityType.TYPE_ALIAS),
    pattern(rf'^\s*{EXPORT}abstract\s+class\s+(?P<name>{IDENT})', EntityType.STRUCT),
    pattern(rf'^\s*{EXPORT}const\s+(?P<name>{IDENT})\s*:[^=]+=', EntityType.CONSTANT),
    pattern(rf'^\s*{EXPORT}(?:let|var)\s+(?P<name>{IDENT})\s*:[^=]+=', EntityType.VARIABLE),
]


TYPESCRIPT_CONFIG = LanguageConfig(
    name="typescript",
    extensions={'.ts', '.tsx'},
    entity_patterns=TYPESCRIPT_SPECIFIC_PATTERNS + JAVASCRIPT_PATTERNS,
    comment_prefixes=('//', '/*', '*'),
    identifier_chars='$',
)
