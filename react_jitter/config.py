"""Configuration management for react-jitter.

Two layers:

- ``Settings`` reads process environment (and a ``.env`` file) for the CLI.
- ``JitterConfig`` validates the plugin options a host passes in, and
  ``TransformOptions`` is the immutable, compiled form handed to the
  transformer for one invocation.
"""
import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, FrozenSet, List, Pattern, Tuple

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictStr, ValidationError

from .analyzer.exclusion import compile_patterns
from .errors import ConfigurationError

# Version - keep in sync with pyproject.toml
__version__ = "0.4.0"

# Runtime contract: the generated code imports this symbol from this module
RUNTIME_SYMBOL = "useJitterScope"
RUNTIME_MODULE = "react-jitter/runtime"

DEFAULT_IGNORED_HOOKS = (
    RUNTIME_SYMBOL,

    # Basic React hooks (useContext and useReducer stay instrumented)
    "useState",
    "useEffect",
    "useCallback",
    "useMemo",
    "useRef",
    "useImperativeHandle",
    "useLayoutEffect",
    "useDebugValue",
    "useId",

    # Concurrent rendering
    "useDeferredValue",
    "useTransition",

    # Cache / external store
    "useCacheRefresh",
    "useInsertionEffect",
    "useSyncExternalStore",
)

DEFAULT_EXCLUDE_PATTERNS = (
    "**/node_modules/**",
)


class JitterConfig(BaseModel):
    """Plugin options as supplied by the host (camelCase JSON keys)."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True, frozen=True)

    enabled: StrictBool = True
    ignore_hooks: List[StrictStr] = Field(
        default_factory=lambda: list(DEFAULT_IGNORED_HOOKS), alias="ignoreHooks"
    )
    exclude: List[StrictStr] = Field(default_factory=lambda: list(DEFAULT_EXCLUDE_PATTERNS))
    include_arguments: StrictBool = Field(False, alias="includeArguments")


def load_config(raw: Any = None) -> JitterConfig:
    """Validate plugin options, failing fast on anything malformed.

    Accepted shapes:
        None            -> defaults
        bool            -> ``False`` disables the pass, ``True`` means defaults
        Mapping         -> option object
        str             -> JSON text of any of the above
        pathlib.Path    -> JSON file

    Raises:
        ConfigurationError: If the options cannot be parsed or validated
    """
    if isinstance(raw, Path):
        try:
            raw = raw.read_text(encoding="utf-8")
        except OSError as exc:
            raise ConfigurationError(f"Cannot read config file {raw}: {exc}") from exc

    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise ConfigurationError(f"Config is not valid JSON: {exc}") from exc

    if raw is None:
        return JitterConfig()
    if isinstance(raw, bool):
        return JitterConfig(enabled=raw)
    if not isinstance(raw, dict):
        raise ConfigurationError(
            f"Config must be a boolean or an object, got {type(raw).__name__}"
        )

    try:
        return JitterConfig.model_validate(raw)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid react-jitter config: {exc}") from exc


def _default_patterns() -> Tuple[Pattern[str], ...]:
    return compile_patterns(DEFAULT_EXCLUDE_PATTERNS)


@dataclass(frozen=True)
class TransformOptions:
    """Compiled options for one transform invocation."""

    ignored_hooks: FrozenSet[str] = frozenset(DEFAULT_IGNORED_HOOKS)
    exclude_patterns: Tuple[Pattern[str], ...] = field(default_factory=_default_patterns)
    include_arguments: bool = False
    enabled: bool = True

    def __post_init__(self):
        # The initializer is never rewritten, whatever the user ignore list says
        object.__setattr__(
            self, "ignored_hooks", frozenset(self.ignored_hooks) | {RUNTIME_SYMBOL}
        )
        object.__setattr__(self, "exclude_patterns", tuple(self.exclude_patterns))

    @classmethod
    def from_config(cls, config: JitterConfig) -> "TransformOptions":
        return cls(
            ignored_hooks=frozenset(config.ignore_hooks),
            exclude_patterns=compile_patterns(config.exclude),
            include_arguments=config.include_arguments,
            enabled=config.enabled,
        )


class Settings:
    """Environment-backed settings for the command line."""

    def __init__(self, env_file: str | Path | None = None):
        """Load ``.env`` from the working directory (or ``env_file``)."""
        load_dotenv(Path(env_file) if env_file else Path.cwd() / ".env")

    @property
    def config_path(self) -> Path:
        """Plugin option file used when ``--config`` is not given.

        Returns:
            Path from REACT_JITTER_CONFIG, default ``jitter.config.json``
        """
        return Path(os.getenv("REACT_JITTER_CONFIG", "jitter.config.json"))

    @property
    def project_root(self) -> Path:
        """Root that embedded file paths are made relative to."""
        return Path(os.getenv("REACT_JITTER_ROOT", os.getcwd()))

    @property
    def log_level(self) -> str:
        return os.getenv("REACT_JITTER_LOG_LEVEL", "WARNING").upper()


# Singleton instance
_settings = None


def get_settings() -> Settings:
    """Get or create singleton Settings instance.

    Returns:
        Settings instance
    """
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
