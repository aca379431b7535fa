"""Configuration models using Pydantic for validation."""
from typing import Any, Tuple
import os
import time
import unicodedata

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from labelgen.errors import InvalidConfig

INT32_MIN = -(1 << 31)
INT32_MAX = (1 << 31) - 1
INT64_MIN = -(1 << 63)
INT64_MAX = (1 << 63) - 1
UINT64_MAX = (1 << 64) - 1

DEFAULT_DELIMITERS = (" = ",)
DEFAULT_SEPARATORS = ("; ",)

SEED_ENV_VAR = "LABELGEN_SEED"

# Latin-1 white space; beyond Latin-1 only the Z categories count
LATIN1_SPACES = frozenset("\t\n\v\f\r \x85\xa0")


def is_space(ch: str) -> bool:
    """Whether a character is Unicode white space (C0 separators excluded)."""
    if ord(ch) <= 0xFF:
        return ch in LATIN1_SPACES
    return unicodedata.category(ch) in ("Zs", "Zl", "Zp")


def _check_tokens(kind: str, tokens: Tuple[str, ...]) -> Tuple[str, ...]:
    """Reject empty and duplicate delimiter/separator strings."""
    seen = set()
    for i, token in enumerate(tokens):
        if token == "":
            raise ValueError(f"invalid {kind} (empty) at index {i}")
        if token in seen:
            raise ValueError(f"duplicate {kind} ({token!r}) at index {i}")
        seen.add(token)
    return tokens


class GeneratorConfig(BaseModel):
    """Validated, immutable generation parameters."""
    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="forbid")

    time_seed: bool = Field(False, alias="time-seed", strict=True)
    seed: int = Field(0, alias="random-seed", strict=True, ge=INT64_MIN, le=INT64_MAX)
    labels: Tuple[str, ...]
    min_values: int = Field(alias="min-values", strict=True, ge=1, le=UINT64_MAX)
    max_values: int = Field(alias="max-values", strict=True, ge=1, le=UINT64_MAX)
    min_val: int = Field(0, alias="min-val", strict=True, ge=INT32_MIN, le=INT32_MAX)
    max_val: int = Field(0, alias="max-val", strict=True, ge=INT32_MIN, le=INT32_MAX)
    delimiters: Tuple[str, ...] = DEFAULT_DELIMITERS
    separators: Tuple[str, ...] = DEFAULT_SEPARATORS

    @field_validator('labels')
    @classmethod
    def validate_labels(cls, v):
        """Labels must be non-empty, unique and free of whitespace."""
        if not v:
            raise ValueError("missing labels")

        seen = set()
        for i, label in enumerate(v):
            if label == "":
                raise ValueError(f"invalid label (empty) at index {i}")
            if label in seen:
                raise ValueError(f"duplicate label ({label!r}) at index {i}")
            if any(is_space(ch) for ch in label):
                raise ValueError(f"label at index {i} contains spaces")
            seen.add(label)

        return v

    @field_validator('delimiters', 'separators', mode='before')
    @classmethod
    def default_when_empty(cls, v, info):
        """Fall back to the default token when the list is missing or empty."""
        if v is None or (isinstance(v, (list, tuple)) and len(v) == 0):
            return DEFAULT_DELIMITERS if info.field_name == 'delimiters' else DEFAULT_SEPARATORS
        return v

    @field_validator('delimiters', 'separators')
    @classmethod
    def validate_tokens(cls, v, info):
        return _check_tokens(info.field_name[:-1], v)

    @model_validator(mode='after')
    def validate_ranges(self):
        """Check that both inclusive ranges are ordered."""
        if self.max_values < self.min_values:
            raise ValueError(
                f"max-values ({self.max_values}) smaller than min-values ({self.min_values})"
            )
        if self.max_val < self.min_val:
            raise ValueError(
                f"max-val ({self.max_val}) smaller than min-val ({self.min_val})"
            )
        return self

    def resolve_seed(self) -> int:
        """Return the seed for a run, deriving it from the clock if requested."""
        if self.time_seed:
            return int(time.time())
        return self.seed


def build_config(raw: Any) -> GeneratorConfig:
    """Validate a raw mapping into a GeneratorConfig.

    Raises InvalidConfig naming every rule that failed.
    """
    if not isinstance(raw, dict):
        raise InvalidConfig(
            f"configuration must be a mapping, got {type(raw).__name__}"
        )

    try:
        return GeneratorConfig.model_validate(raw)
    except ValidationError as e:
        problems = []
        for err in e.errors():
            loc = ".".join(str(part) for part in err["loc"]) or "config"
            problems.append(f"{loc}: {err['msg']}")
        raise InvalidConfig(
            "Configuration validation failed: " + "; ".join(problems),
            errors=e.errors(include_url=False),
        ) from e


def load_config(config_path: str) -> GeneratorConfig:
    """Load and validate configuration from YAML file."""
    import yaml

    if not os.path.exists(config_path):
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path, 'r') as f:
        try:
            raw_config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise InvalidConfig(f"parsing {config_path}: {e}") from e

    if raw_config is None:
        raw_config = {}

    # Apply environment variable overrides
    if (env_seed := os.getenv(SEED_ENV_VAR)) is not None and isinstance(raw_config, dict):
        try:
            seed = int(env_seed)
        except ValueError as e:
            raise InvalidConfig(f"{SEED_ENV_VAR} must be an integer, got {env_seed!r}") from e
        for key in ('seed', 'random-seed', 'time_seed', 'time-seed'):
            raw_config.pop(key, None)
        raw_config['random-seed'] = seed
        raw_config['time-seed'] = False

    return build_config(raw_config)
