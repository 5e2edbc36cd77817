"""
Python language configuration for entity extraction.

Entity kinds recognised:
- function: `def name(` and `async def name(`, at any indentation
- struct: `class Name`
- constant: module-level `UPPER_CASE = ...` (annotations allowed)
"""

from ...models import EntityType
from ..config import LanguageConfig, pattern


PYTHON_PATTERNS = [
    pattern(r'^\s*(?:async\s+)?def\s+(?P<name>[A-Za-z_]\w*)\s*\(', EntityType.FUNCTION),
    pattern(r'^\s*class\s+(?P<name>[A-Za-z_]\w*)', EntityType.STRUCT),
    # Module level only: no leading whitespace
    pattern(r'^(?P<name>[A-Z][A-Z0-9_]*)\s*(?::[^=]*)?=(?!=)', EntityType.CONSTANT),
]


PYTHON_CONFIG = LanguageConfig(
    name="python",
    extensions={'.py'},
    entity_patterns=PYTHON_PATTERNS,
    comment_prefixes=('#',),
)
