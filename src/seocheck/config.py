from dotenv import load_dotenv
from dataclasses import dataclass, field, fields
from typing import Dict, Optional, Tuple
from pathlib import Path
import json
import logging
import os
import re

from seocheck.constants import (
    DEFAULT_MAX_CONCURRENT_DOCUMENTS,
    DEFAULT_MAX_CONCURRENT_PROBES,
    DEFAULT_REPORT_FILE,
    DEFAULT_REQUEST_TIMEOUT_SECONDS,
    PHASE_ORDER,
)
from seocheck.exceptions import ConfigError

load_dotenv()  # Loads variables from .env file

logger = logging.getLogger(__name__)


class Settings:
    """
    Manages application settings loaded from environment variables.
    """
    USER_AGENT = os.getenv("SEOCHECK_USER_AGENT", "seocheck/0.1 (+static site checker)")
    LOG_LEVEL = os.getenv("SEOCHECK_LOG_LEVEL", "INFO")


settings = Settings()


def _default_phases() -> Dict[str, bool]:
    return {phase_id: True for phase_id in PHASE_ORDER}


def _camel_to_snake(name: str) -> str:
    return re.sub(r'(?<!^)(?=[A-Z])', '_', name).lower()


# Legacy option names accepted in config files
_ALIASES = {
    "log_file_path": "report_file_path",
}


@dataclass(frozen=True)
class CheckerConfig:
    """Run configuration for one scan.

    Built once before the scan starts and never mutated afterwards. Phase
    toggles are merged over the defaults at construction so every phase id
    has an explicit value.
    """

    # Report
    report_file_path: str = DEFAULT_REPORT_FILE
    report_format: Optional[str] = None  # inferred from extension when None
    verbose: bool = False

    # Links
    check_external_links: bool = False
    redirects: Dict[str, object] = field(default_factory=dict)
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT_SECONDS
    max_concurrent_probes: int = DEFAULT_MAX_CONCURRENT_PROBES
    max_concurrent_documents: int = DEFAULT_MAX_CONCURRENT_DOCUMENTS
    user_agent: str = settings.USER_AGENT

    # Phases
    phases: Dict[str, bool] = field(default_factory=_default_phases)

    # Foundation & privacy
    email_allowlist: Tuple[str, ...] = ()

    # Metadata
    check_canonical: bool = True

    # Accessibility
    ignore_empty_alt: bool = False

    # Performance (sizes in KB)
    check_resource_sizes: bool = False
    image_size_threshold: float = 200
    inline_script_threshold: float = 2
    inline_style_threshold: float = 1

    # Crawlability & linking
    min_internal_links: int = 3
    max_internal_links: int = 100

    # AI content detection
    ai_detection_threshold: int = 60
    ai_detection_exclude_paths: Tuple[str, ...] = ()

    def __post_init__(self):
        merged = _default_phases()
        for phase_id, enabled in (self.phases or {}).items():
            if phase_id not in merged:
                logger.debug(f"Ignoring unknown phase '{phase_id}' in configuration")
                continue
            merged[phase_id] = bool(enabled)
        object.__setattr__(self, "phases", merged)
        object.__setattr__(self, "email_allowlist", tuple(self.email_allowlist or ()))
        object.__setattr__(
            self, "ai_detection_exclude_paths", tuple(self.ai_detection_exclude_paths or ())
        )
        object.__setattr__(self, "redirects", dict(self.redirects or {}))

        for name in sorted(_INT_FIELDS | _FLOAT_FIELDS):
            value = getattr(self, name)
            allowed = int if name in _INT_FIELDS else (int, float)
            if isinstance(value, bool) or not isinstance(value, allowed):
                raise ConfigError(f"{name} must be a number, got {value!r}")

        if not 0 <= self.ai_detection_threshold <= 100:
            raise ConfigError(
                f"ai_detection_threshold must be between 0 and 100, got {self.ai_detection_threshold}"
            )
        if self.min_internal_links > self.max_internal_links:
            raise ConfigError(
                f"min_internal_links ({self.min_internal_links}) exceeds "
                f"max_internal_links ({self.max_internal_links})"
            )

    def enabled_phase_ids(self) -> Tuple[str, ...]:
        """Phase ids switched on for this run, in execution order."""
        return tuple(phase_id for phase_id in PHASE_ORDER if self.phases.get(phase_id))

    @classmethod
    def from_dict(cls, data: dict) -> "CheckerConfig":
        """Build a configuration from a mapping of options.

        Keys may be snake_case or camelCase (``checkExternalLinks``); unknown
        keys are ignored.

        Args:
            data: Option mapping

        Returns:
            CheckerConfig with defaults applied for missing options
        """
        known = {f.name for f in fields(cls)}
        kwargs = {}

        for key, value in data.items():
            name = _camel_to_snake(key)
            if name in _ALIASES:
                # The current name wins over a legacy alias
                kwargs.setdefault(_ALIASES[name], value)
                continue
            if name not in known:
                logger.debug(f"Ignoring unknown configuration option '{key}'")
                continue
            if isinstance(value, str) and name in _TYPED_FIELDS:
                try:
                    value = _coerce(name, value)
                except ValueError as e:
                    raise ConfigError(f"Invalid value for {key}: {value!r} ({e})") from e
            kwargs[name] = value

        return cls(**kwargs)

    @classmethod
    def from_file(cls, path: str) -> "CheckerConfig":
        """Load configuration from a JSON file.

        Args:
            path: Path to JSON configuration file

        Returns:
            CheckerConfig with values from file

        Raises:
            ConfigError: If the file cannot be read or is not a JSON object
        """
        file_path = Path(path)

        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                config = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigError(f"Could not load configuration from {path}: {e}") from e

        if not isinstance(config, dict):
            raise ConfigError(f"Configuration in {path} must be a JSON object")

        return cls.from_dict(config)

    @classmethod
    def from_env(cls) -> "CheckerConfig":
        """Load configuration from environment variables.

        Environment variables are prefixed with SEOCHECK_
        e.g., SEOCHECK_CHECK_EXTERNAL_LINKS=true, SEOCHECK_PHASES_AI_DETECTION=false

        Returns:
            CheckerConfig with values from environment
        """
        prefix = "SEOCHECK_"
        kwargs = {}
        phases = {}

        for f in fields(cls):
            if f.name == "phases":
                continue
            env_value = os.getenv(f"{prefix}{f.name.upper()}")
            if env_value is None:
                continue
            try:
                kwargs[f.name] = _coerce(f.name, env_value)
            except ValueError:
                logger.warning(f"Ignoring invalid value for {prefix}{f.name.upper()}: {env_value!r}")

        for phase_id in PHASE_ORDER:
            env_value = os.getenv(f"{prefix}PHASES_{phase_id.upper()}")
            if env_value is not None:
                phases[phase_id] = _parse_bool(env_value)

        if phases:
            kwargs["phases"] = phases

        return cls(**kwargs)

    def to_dict(self) -> dict:
        """Convert configuration to a dictionary.

        Returns:
            Dictionary of all option values
        """
        result = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, tuple):
                value = list(value)
            elif isinstance(value, dict):
                value = dict(value)
            result[f.name] = value
        return result


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


_BOOL_FIELDS = {
    "verbose", "check_external_links", "check_canonical",
    "ignore_empty_alt", "check_resource_sizes",
}
_INT_FIELDS = {
    "max_concurrent_probes", "max_concurrent_documents",
    "min_internal_links", "max_internal_links", "ai_detection_threshold",
}
_FLOAT_FIELDS = {
    "request_timeout", "image_size_threshold",
    "inline_script_threshold", "inline_style_threshold",
}
_LIST_FIELDS = {"email_allowlist", "ai_detection_exclude_paths"}
_TYPED_FIELDS = _BOOL_FIELDS | _INT_FIELDS | _FLOAT_FIELDS | _LIST_FIELDS | {"redirects"}


def _coerce(name: str, value: str):
    """Convert a raw string option to the option's type."""
    if name in _BOOL_FIELDS:
        return _parse_bool(value)
    if name in _INT_FIELDS:
        return int(value)
    if name in _FLOAT_FIELDS:
        return float(value)
    if name in _LIST_FIELDS:
        return tuple(item.strip() for item in value.split(",") if item.strip())
    if name == "redirects":
        redirects = json.loads(value)
        if not isinstance(redirects, dict):
            raise ValueError("redirects must be a JSON object")
        return redirects
    return value
