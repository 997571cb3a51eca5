"""Configuration management using Pydantic settings."""

import json
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from docconform.models import Severity


class RuleSettings(BaseModel):
    """Settings for one rule.

    Numeric thresholds are passed as extra keys, e.g.
    ``{"enabled": true, "threshold_chars": 300}``.
    """

    model_config = ConfigDict(frozen=True, extra="allow")

    enabled: bool = True
    severity: Optional[Severity] = None

    def param(self, name: str, default: float) -> float:
        """Get a threshold parameter, falling back to the rule's default."""
        extra = self.model_extra or {}
        value = extra.get(name, default)
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValueError(f"Threshold {name!r} must be numeric, got {value!r}")
        return value


class PatternSettings(BaseModel):
    """Lexical patterns used by the heuristic matchers.

    ``{name}`` in the argument templates is replaced by the escaped
    argument name before compiling.
    """

    model_config = ConfigDict(frozen=True)

    block_given: list[str] = Field(
        default=[
            r"\bwith (?:a|the) block\b",
            r"\b(?:if|when) (?:a|the) block is (?:given|supplied|provided)\b",
            r"\bgiven a block\b",
            r"\bblock given\b",
        ],
        description="Phrases stating behavior when a block is given",
    )
    block_absent: list[str] = Field(
        default=[
            r"\bwith no block\b",
            r"\bwithout a block\b",
            r"\b(?:if|when) no block is (?:given|supplied|provided)\b",
            r"\bno block given\b",
            r"\breturns an? (?:new )?Enumerator\b",
        ],
        description="Phrases stating behavior when no block is given",
    )
    argument_omitted: list[str] = Field(
        default=[
            r"\bwith no (?:argument )?{name}\b",
            r"\bwithout (?:argument )?{name}\b",
            r"\b(?:if|when) {name} is (?:not given|omitted|not specified|not provided)\b",
            r"\b{name} (?:is )?omitted\b",
        ],
        description="Templates stating behavior when an argument is omitted",
    )
    argument_given: list[str] = Field(
        default=[
            r"\bwith (?:an? )?(?:argument )?{name} given\b",
            r"\b(?:if|when) {name} is (?:given|specified|provided)\b",
            r"\bwith (?:an? )?(?:argument )?{name}\b(?! (?:omitted|not given))",
            r"\bgiven {name}\b",
        ],
        description="Templates stating behavior when an argument is given",
    )
    type_like: list[str] = Field(
        default=[
            r"\b(?:Integer|Float|Numeric|Rational|Complex|String|Symbol|Array|Hash"
            r"|Range|Proc|Regexp|IO|Object|Enumerator|Time|Class|Module)\b",
            r"\b(?:[Aa]n?|[Tt]he)\s+[A-Z][A-Za-z]+(?:::[A-Z]\w*)*\b",
            r"\b(?:true|false|nil)\b",
            r"\b(?:integer|string|array|hash|symbol|numeric|boolean)(?:-like)?\b",
        ],
        description="Patterns marking a definition description as type-like",
    )
    type_constraint: list[str] = Field(
        default=[
            r"\b(?:must|should) be (?:an? )?(?:[A-Z]\w*|integer|string|array|hash|symbol|numeric)\b",
            r"\bis (?:an? )?(?:Integer|String|Array|Hash|Symbol|Numeric)\b",
            r"\bconvertible to (?:an? )?[A-Z]\w*\b",
        ],
        description="Patterns stating an argument-type constraint",
    )
    corner_case: list[str] = Field(
        default=[
            r"^Raises?\b",
            r"^Returns (?:nil|\+nil\+|<tt>nil</tt>|`nil`) (?:if|when|unless)\b",
            r"\b[Rr]aises (?:an? )?\+?[A-Z]\w*(?:Error|Exception)\b",
            r"^(?:If|When) .*\b(?:negative|out of range|nil|empty|zero|frozen)\b",
        ],
        description="Patterns marking a trailing paragraph as a corner case",
    )
    obvious_exceptions: list[str] = Field(
        default=["TypeError", "NoMethodError"],
        description="Exceptions that follow directly from argument-type constraints",
    )


class Config(BaseSettings):
    """Engine configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="DOCCONFORM_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Rules
    rules: dict[str, RuleSettings] = Field(
        default_factory=dict,
        description="Per-rule overrides keyed by rule id",
    )
    rules_file: Optional[Path] = Field(
        default=None,
        description="JSON file with per-rule overrides",
    )
    patterns: PatternSettings = Field(
        default_factory=PatternSettings,
        description="Heuristic lexical patterns",
    )

    # Parser
    max_nesting_depth: int = Field(
        default=8,
        description="Maximum list nesting depth before a block fails",
    )
    default_markup: str = Field(
        default="rdoc",
        description="Markup dialect for blocks that do not declare one",
    )

    # Batch execution
    workers: int = Field(
        default=4,
        description="Worker threads for batch evaluation",
    )

    # Logging
    log_level: str = Field(
        default="WARNING",
        description="Logging level",
    )
    log_file: Optional[Path] = Field(
        default=None,
        description="Log file path",
    )
    json_logs: bool = Field(
        default=False,
        description="Use JSON formatting for file logs",
    )

    def __init__(self, **kwargs):
        """Initialize config and merge rule overrides from rules_file."""
        super().__init__(**kwargs)

        if self.rules_file is not None:
            merged = load_rule_config(self.rules_file)
            merged.update(self.rules)
            self.rules = merged

    def rule(self, rule_id: str) -> RuleSettings:
        """Settings for a rule, defaulting to enabled with no overrides."""
        return self.rules.get(rule_id) or RuleSettings()


def load_rule_config(path: Path) -> dict[str, RuleSettings]:
    """Load per-rule settings from a JSON file.

    Args:
        path: JSON file mapping rule ids to settings, optionally nested
            under a top-level "rules" key

    Returns:
        Mapping of rule id to RuleSettings

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If the file is not a JSON object
    """
    if not path.exists():
        raise FileNotFoundError(f"Rule config not found: {path}")

    data: Any = json.loads(path.read_text(encoding="utf-8"))
    if isinstance(data, dict) and isinstance(data.get("rules"), dict):
        data = data["rules"]
    if not isinstance(data, dict):
        raise ValueError(f"Rule config must be a JSON object: {path}")

    return {
        rule_id: RuleSettings.model_validate(settings or {})
        for rule_id, settings in data.items()
    }


# Global config instance
_config: Optional[Config] = None


def get_config() -> Config:
    """Get or create global config instance."""
    global _config
    if _config is None:
        _config = Config()
    return _config


def reset_config() -> None:
    """Reset global config (mainly for testing)."""
    global _config
    _config = None
