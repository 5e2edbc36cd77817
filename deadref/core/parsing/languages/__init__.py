"""
Language configurations for entity extraction.

Each language has its own module defining its declaration patterns and
comment markers:
- go.py: Go (.go), also the fallback for unrecognised files
- python.py: Python (.py)
- javascript.py: JavaScript (.js, .jsx)
- typescript.py: TypeScript (.ts, .tsx)
"""

from ..registry import ParserRegistry
from .go import GO_CONFIG
from .python import PYTHON_CONFIG
from .javascript import JAVASCRIPT_CONFIG
from .typescript import TYPESCRIPT_CONFIG


def default_registry() -> ParserRegistry:
    """Registry with every built-in language; Go is the fallback."""
    registry = ParserRegistry(default=GO_CONFIG.name)
    for config in (GO_CONFIG, PYTHON_CONFIG, JAVASCRIPT_CONFIG, TYPESCRIPT_CONFIG):
        registry.register(config)
    return registry


__all__ = [
    'GO_CONFIG',
    'PYTHON_CONFIG',
    'JAVASCRIPT_CONFIG',
    'TYPESCRIPT_CONFIG',
    'default_registry',
]
