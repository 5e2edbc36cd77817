"""
Configuration — Centralized settings management

Config hierarchy (highest to lowest priority):
  1. Environment variables (DEADREF_BACKEND, DEADREF_LLM_PROVIDER, DEADREF_LLM_MODEL)
  2. Project config (.deadref/config.yaml)
  3. User config (~/.deadref/config.yaml)
  4. Defaults

API keys are NEVER stored in config files.
They must be provided via environment variables.
"""

import logging
import os
import yaml
from pathlib import Path
from dataclasses import dataclass, field
from typing import Optional, Dict, Any, List

from .core.flattener import (
    FlattenerConfig, DEFAULT_EXCLUDED_DIRS, DEFAULT_INCLUDED_EXTENSIONS, DEFAULT_MAX_FILE_SIZE,
)
from .core.context import DEFAULT_CONTEXT_LINES

logger = logging.getLogger(__name__)


# Supported providers and their defaults
PROVIDERS = {
    "claude": {
        "env_key": "ANTHROPIC_API_KEY",
        "default_model": "claude-sonnet-4-20250514",
        "models": [
            "claude-opus-4-1-20250414",
            "claude-opus-4-20250514",
            "claude-sonnet-4-20250514",
            "claude-3-7-sonnet-20250219",
            "claude-3-5-haiku-20241022"
        ]
    },
    "openai": {
        "env_key": "OPENAI_API_KEY",
        "default_model": "gpt-5-mini",
        "models": [
            "gpt-5.2",
            "gpt-5.2-pro",
            "gpt-5-mini",
            "gpt-5-nano",
            "gpt-4o"
        ]
    }
}

DEFAULT_PROVIDER = "claude"
DEFAULT_MAX_TOKENS = 8000

BACKENDS = ("heuristic", "llm")
ENTITY_PARSERS = ("heuristic", "tree-sitter")

DEFAULT_MAX_CODEBASE_LENGTH = 50000
DEFAULT_MAX_DELETION_LENGTH = 10000


@dataclass
class LLMConfig:
    """LLM provider configuration."""
    provider: str = DEFAULT_PROVIDER
    model: Optional[str] = None  # None = use provider default
    max_tokens: int = DEFAULT_MAX_TOKENS

    @property
    def effective_model(self) -> str:
        """Get model, falling back to provider default."""
        if self.model:
            return self.model
        return PROVIDERS.get(self.provider, {}).get("default_model", "")

    @property
    def api_key_env(self) -> str:
        """Get environment variable name for API key."""
        return PROVIDERS.get(self.provider, {}).get("env_key", "")

    @property
    def api_key(self) -> Optional[str]:
        """Get API key from environment. Never stored."""
        return os.environ.get(self.api_key_env)

    @property
    def is_available(self) -> bool:
        return bool(self.api_key)

    def validate(self) -> Optional[str]:
        """Validate config. Returns error message or None if valid."""
        if self.provider not in PROVIDERS:
            valid = ", ".join(PROVIDERS.keys())
            return f"Unknown provider '{self.provider}'. Valid: {valid}"

        if self.model:
            valid_models = PROVIDERS[self.provider]["models"]
            if self.model not in valid_models:
                return f"Unknown model '{self.model}' for {self.provider}. Valid: {', '.join(valid_models)}"

        if self.max_tokens <= 0:
            return f"max_tokens must be positive, got {self.max_tokens}"

        return None


@dataclass
class AnalysisConfig:
    """Deletion analysis settings."""
    backend: str = "heuristic"  # "heuristic" | "llm"
    entity_parser: str = "heuristic"  # "heuristic" | "tree-sitter"
    context_lines: int = DEFAULT_CONTEXT_LINES
    max_codebase_length: int = DEFAULT_MAX_CODEBASE_LENGTH
    max_deletion_length: int = DEFAULT_MAX_DELETION_LENGTH

    def validate(self) -> Optional[str]:
        """Validate config. Returns error message or None if valid."""
        if self.backend not in BACKENDS:
            return f"Unknown backend '{self.backend}'. Valid: {', '.join(BACKENDS)}"
        if self.entity_parser not in ENTITY_PARSERS:
            return f"Unknown entity parser '{self.entity_parser}'. Valid: {', '.join(ENTITY_PARSERS)}"
        if self.context_lines < 0:
            return f"context_lines must not be negative, got {self.context_lines}"
        if self.max_codebase_length <= 0 or self.max_deletion_length <= 0:
            return "Context budgets must be positive"
        return None


@dataclass
class FlattenerSettings:
    """Workspace walk settings; None keeps the built-in list."""
    excluded_dirs: Optional[List[str]] = None
    included_extensions: Optional[List[str]] = None
    max_file_size: int = DEFAULT_MAX_FILE_SIZE

    def validate(self) -> Optional[str]:
        if self.max_file_size <= 0:
            return f"max_file_size must be positive, got {self.max_file_size}"
        for ext in self.included_extensions or []:
            if not ext.startswith('.'):
                return f"Extension '{ext}' must start with '.'"
        return None

    def to_flattener_config(self) -> FlattenerConfig:
        """Freeze into the immutable config the flattener takes."""
        return FlattenerConfig.from_lists(
            excluded_dirs=self.excluded_dirs,
            included_extensions=self.included_extensions,
            max_file_size=self.max_file_size,
        )


@dataclass
class Config:
    """Application configuration."""
    llm: LLMConfig = field(default_factory=LLMConfig)
    analysis: AnalysisConfig = field(default_factory=AnalysisConfig)
    flattener: FlattenerSettings = field(default_factory=FlattenerSettings)

    def validate(self) -> Optional[str]:
        """First validation error across all sections, or None."""
        for section in (self.llm, self.analysis, self.flattener):
            error = section.validate()
            if error:
                return error
        return None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        flattener: Dict[str, Any] = {"max_file_size": self.flattener.max_file_size}
        if self.flattener.excluded_dirs is not None:
            flattener["excluded_dirs"] = list(self.flattener.excluded_dirs)
        if self.flattener.included_extensions is not None:
            flattener["included_extensions"] = list(self.flattener.included_extensions)

        return {
            "llm": {
                "provider": self.llm.provider,
                "model": self.llm.model,
                "max_tokens": self.llm.max_tokens
            },
            "analysis": {
                "backend": self.analysis.backend,
                "entity_parser": self.analysis.entity_parser,
                "context_lines": self.analysis.context_lines,
                "max_codebase_length": self.analysis.max_codebase_length,
                "max_deletion_length": self.analysis.max_deletion_length
            },
            "flattener": flattener
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Config':
        """Create from dictionary."""
        llm_data = data.get("llm") or {}
        analysis_data = data.get("analysis") or {}
        flattener_data = data.get("flattener") or {}

        return cls(
            llm=LLMConfig(
                provider=llm_data.get("provider", DEFAULT_PROVIDER),
                model=llm_data.get("model"),
                max_tokens=int(llm_data.get("max_tokens", DEFAULT_MAX_TOKENS))
            ),
            analysis=AnalysisConfig(
                backend=analysis_data.get("backend", "heuristic"),
                entity_parser=analysis_data.get("entity_parser", "heuristic"),
                context_lines=int(analysis_data.get("context_lines", DEFAULT_CONTEXT_LINES)),
                max_codebase_length=int(analysis_data.get("max_codebase_length", DEFAULT_MAX_CODEBASE_LENGTH)),
                max_deletion_length=int(analysis_data.get("max_deletion_length", DEFAULT_MAX_DELETION_LENGTH))
            ),
            flattener=FlattenerSettings(
                excluded_dirs=flattener_data.get("excluded_dirs"),
                included_extensions=flattener_data.get("included_extensions"),
                max_file_size=int(flattener_data.get("max_file_size", DEFAULT_MAX_FILE_SIZE))
            )
        )


# section -> setting -> parser for string values given to ConfigManager.set()
SETTABLE: Dict[str, Dict[str, Any]] = {
    "llm": {"provider": str, "model": str, "max_tokens": int},
    "analysis": {
        "backend": str,
        "entity_parser": str,
        "context_lines": int,
        "max_codebase_length": int,
        "max_deletion_length": int,
    },
    "flattener": {"max_file_size": int},
}


class ConfigManager:
    """
    Manages configuration loading and persistence.

    Hierarchy:
      1. Environment variables
      2. Project config (.deadref/config.yaml)
      3. User config (~/.deadref/config.yaml)
      4. Defaults
    """

    USER_CONFIG_DIR = Path.home() / ".deadref"
    USER_CONFIG_FILE = USER_CONFIG_DIR / "config.yaml"
    PROJECT_CONFIG_DIR = ".deadref"
    PROJECT_CONFIG_FILE = "config.yaml"

    def __init__(self, project_dir: Optional[Path] = None):
        self.project_dir = Path(project_dir) if project_dir else Path.cwd()
        self._config: Optional[Config] = None

    @property
    def project_config_path(self) -> Path:
        return self.project_dir / self.PROJECT_CONFIG_DIR / self.PROJECT_CONFIG_FILE

    @property
    def user_config_path(self) -> Path:
        return self.USER_CONFIG_FILE

    def load(self) -> Config:
        """Load configuration from all sources."""
        if self._config is not None:
            return self._config

        config_data: Dict[str, Any] = {}

        # Layer 1: User config, then project config (higher priority)
        for path in (self.user_config_path, self.project_config_path):
            config_data = self._merge(config_data, self._read_yaml(path))

        # Layer 2: Environment overrides
        if os.environ.get("DEADREF_BACKEND"):
            config_data.setdefault("analysis", {})["backend"] = os.environ["DEADREF_BACKEND"]
        if os.environ.get("DEADREF_LLM_PROVIDER"):
            config_data.setdefault("llm", {})["provider"] = os.environ["DEADREF_LLM_PROVIDER"]
        if os.environ.get("DEADREF_LLM_MODEL"):
            config_data.setdefault("llm", {})["model"] = os.environ["DEADREF_LLM_MODEL"]

        self._config = Config.from_dict(config_data)
        return self._config

    def _read_yaml(self, path: Path) -> Dict[str, Any]:
        """Read one config file; malformed or unreadable files are skipped."""
        if not path.exists():
            return {}
        try:
            with open(path) as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            logger.warning("Ignoring config file %s: %s", path, e)
            return {}
        if not isinstance(data, dict):
            logger.warning("Ignoring config file %s: expected a mapping", path)
            return {}
        return data

    def save_project(self, config: Config):
        """Save configuration to project config file."""
        self._write(self.project_config_path, config)

    def save_user(self, config: Config):
        """Save configuration to user config file."""
        self._write(self.user_config_path, config)

    def _write(self, path: Path, config: Config):
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, 'w') as f:
            yaml.dump(config.to_dict(), f, default_flow_style=False)
        self._config = config

    def set(self, key: str, value: str, scope: str = "project") -> Optional[str]:
        """
        Set a configuration value.

        Args:
            key: Dot-separated key (e.g., "analysis.backend")
            value: Value to set
            scope: "project" or "user"

        Returns:
            Error message or None if successful
        """
        config = self.load()

        parts = key.split(".")
        if len(parts) != 2:
            return f"Invalid key format: {key}. Use 'section.setting' (e.g., 'llm.provider')"

        section, setting = parts
        if section not in SETTABLE:
            return f"Unknown section: {section}. Valid: {', '.join(SETTABLE)}"
        settings = SETTABLE[section]
        if setting not in settings:
            return f"Unknown {section} setting: {setting}. Valid: {', '.join(settings)}"

        try:
            parsed = settings[setting](value)
        except ValueError:
            return f"Invalid value for {key}: {value!r}"

        target = getattr(config, section)
        previous = getattr(target, setting)
        setattr(target, setting, parsed)
        error = target.validate()
        if error:
            setattr(target, setting, previous)
            return error

        if scope == "project":
            self.save_project(config)
        else:
            self.save_user(config)

        return None

    def get(self, key: str) -> Optional[str]:
        """Get a configuration value."""
        config = self.load()

        parts = key.split(".")
        if len(parts) != 2:
            return None

        section, setting = parts
        if setting not in SETTABLE.get(section, {}):
            return None

        if section == "llm" and setting == "model":
            return config.llm.effective_model
        return str(getattr(getattr(config, section), setting))

    def _merge(self, base: Dict, override: Dict) -> Dict:
        """Deep merge two dicts, override wins."""
        result = base.copy()
        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._merge(result[key], value)
            else:
                result[key] = value
        return result


# Convenience function
def get_config(project_dir: Optional[Path] = None) -> Config:
    """Load configuration for a project."""
    return ConfigManager(project_dir).load()
