"""
Parser Registry — Routes files to language-specific configurations.

Central registry that maps language names and file extensions to
LanguageConfig instances. Files nothing claims fall back to the
registry's default config.

Usage:
    registry = ParserRegistry(default="go")
    registry.register(GO_CONFIG)
    registry.register(PYTHON_CONFIG)

    config = registry.resolve("src/app.py")
    # Returns PYTHON_CONFIG
"""

from pathlib import PurePosixPath
from typing import Dict, List, Optional, Set

from .config import LanguageConfig


class ParserRegistry:
    """
    Registry of language configurations.

    Maps file extensions to LanguageConfig instances for routing.
    """

    def __init__(self, default: str = ""):
        """
        Initialize empty registry.

        Args:
            default: Name of the config used when no extension matches
        """
        self._configs: Dict[str, LanguageConfig] = {}  # name -> config
        self._extension_map: Dict[str, str] = {}  # ext -> config name
        self.default_name = default

    def register(self, config: LanguageConfig) -> None:
        """
        Register a language configuration.

        Raises:
            ValueError: If extension already registered to different config
        """
        for ext in config.extensions:
            existing = self._extension_map.get(ext.lower())
            if existing and existing != config.name:
                raise ValueError(
                    f"Extension {ext} already registered to {existing}, "
                    f"cannot register to {config.name}"
                )

        self._configs[config.name] = config
        for ext in config.extensions:
            self._extension_map[ext.lower()] = config.name

    def unregister(self, name: str) -> bool:
        """Unregister a configuration by name. Returns True if removed."""
        config = self._configs.pop(name, None)
        if config is None:
            return False
        for ext in config.extensions:
            if self._extension_map.get(ext.lower()) == name:
                del self._extension_map[ext.lower()]
        return True

    def get_config(self, filename: str) -> Optional[LanguageConfig]:
        """Get language config for a file based on extension, or None."""
        ext = PurePosixPath(filename).suffix.lower()
        config_name = self._extension_map.get(ext)
        return self._configs.get(config_name) if config_name else None

    @property
    def default(self) -> Optional[LanguageConfig]:
        return self._configs.get(self.default_name)

    def resolve(self, filename: str) -> Optional[LanguageConfig]:
        """Config for a file, falling back to the default config."""
        return self.get_config(filename) or self.default

    def supported_extensions(self) -> Set[str]:
        return set(self._extension_map.keys())

    def supported_languages(self) -> List[str]:
        return list(self._configs.keys())

    def __len__(self) -> int:
        return len(self._configs)

    def __contains__(self, name: str) -> bool:
        return name in self._configs
