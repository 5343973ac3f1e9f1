"""Decay and retention configuration.

``HippocampusConfig`` is a frozen Pydantic v2 model.  It is validated once
at construction time, so every component downstream can rely on the
invariants below without re-checking them:

- every decay rate is strictly positive
- ``0 <= sparse_threshold < compress_threshold <= 1``
- every retention floor lies in [0, 1]
- ``max_sparse_index_tokens`` is positive

The two per-type tables are exposed as read-only mappings.

The original camelCase keys (``decayRates``, ``sparseThreshold``, ...) are
accepted as aliases so host configuration files can be passed through
unchanged.

Classes
-------
- ConfigError        — raised for invalid configuration values
- HippocampusConfig  — the resolved, immutable configuration
"""
from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_serializer,
    field_validator,
    model_validator,
)

from hippocampus.classify.classifier import EntryType

DEFAULT_DECAY_RATES: dict[str, float] = {
    EntryType.DECISION.value: 0.03,
    EntryType.USER_INTENT.value: 0.05,
    EntryType.CONTEXT.value: 0.12,
    EntryType.TOOL_RESULT.value: 0.20,
    EntryType.EPHEMERAL.value: 0.35,
    EntryType.UNKNOWN.value: 0.15,
}

DEFAULT_RETENTION_FLOOR: dict[str, float] = {
    EntryType.DECISION.value: 0.50,
    EntryType.USER_INTENT.value: 0.35,
}

_ENTRY_TYPE_VALUES: frozenset[str] = frozenset(t.value for t in EntryType)

# Fields whose values are merged key-by-key by ``with_overrides``.
_NESTED_FIELDS: frozenset[str] = frozenset({"decay_rates", "retention_floor"})


class ConfigError(ValueError):
    """Raised when configuration values violate the documented ranges."""


def _type_key(entry_type: EntryType | str) -> str:
    return entry_type.value if isinstance(entry_type, EntryType) else str(entry_type)


class HippocampusConfig(BaseModel):
    """Resolved configuration for one scoring pass.

    Parameters
    ----------
    decay_rates:
        Per-type exponential decay rate λ.  Larger values forget faster.
    default_decay_rate:
        λ used for any type missing from ``decay_rates``.
    sparse_threshold:
        Retention below this value reduces an entry to a pointer line.
    compress_threshold:
        Retention below this value (and at or above ``sparse_threshold``)
        reduces an entry to a summary line.
    retention_floor:
        Minimum retention per type.  Types not listed have a floor of 0.
    max_sparse_index_tokens:
        Token cap for the rendered sparse-index section.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, validate_default=True)

    decay_rates: Mapping[str, float] = Field(
        default_factory=lambda: dict(DEFAULT_DECAY_RATES), alias="decayRates"
    )
    default_decay_rate: float = Field(default=0.12, alias="decayLambda")
    sparse_threshold: float = Field(default=0.25, alias="sparseThreshold")
    compress_threshold: float = Field(default=0.65, alias="compressThreshold")
    retention_floor: Mapping[str, float] = Field(
        default_factory=lambda: dict(DEFAULT_RETENTION_FLOOR), alias="retentionFloor"
    )
    max_sparse_index_tokens: int = Field(default=2500, alias="maxSparseIndexTokens")

    @field_validator("decay_rates", "retention_floor", mode="after")
    @classmethod
    def _read_only(cls, value: Mapping[str, float]) -> Mapping[str, float]:
        return MappingProxyType(dict(value))

    @field_serializer("decay_rates", "retention_floor")
    def _plain_dict(self, value: Mapping[str, float]) -> dict[str, float]:
        return dict(value)

    @model_validator(mode="after")
    def _check_ranges(self) -> HippocampusConfig:
        for key, rate in self.decay_rates.items():
            if key not in _ENTRY_TYPE_VALUES:
                raise ValueError(f"Unknown entry type in decay_rates: {key!r}")
            if rate <= 0:
                raise ValueError(f"Decay rate for {key!r} must be positive, got {rate!r}")
        if self.default_decay_rate <= 0:
            raise ValueError(
                f"default_decay_rate must be positive, got {self.default_decay_rate!r}"
            )
        for name in ("sparse_threshold", "compress_threshold"):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"{name} must be in [0.0, 1.0], got {value!r}")
        if self.compress_threshold <= self.sparse_threshold:
            raise ValueError(
                "compress_threshold must be greater than sparse_threshold "
                f"({self.compress_threshold!r} <= {self.sparse_threshold!r})"
            )
        for key, floor in self.retention_floor.items():
            if key not in _ENTRY_TYPE_VALUES:
                raise ValueError(f"Unknown entry type in retention_floor: {key!r}")
            if not 0.0 <= floor <= 1.0:
                raise ValueError(f"Retention floor for {key!r} must be in [0.0, 1.0]")
        if self.max_sparse_index_tokens <= 0:
            raise ValueError(
                "max_sparse_index_tokens must be positive, "
                f"got {self.max_sparse_index_tokens!r}"
            )
        return self

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def from_mapping(cls, data: Mapping[str, object]) -> HippocampusConfig:
        """Validate ``data`` into a config, raising ``ConfigError`` on failure.

        Keys may use either the snake_case field names or the camelCase
        aliases.  Missing keys take their defaults.
        """
        try:
            return cls.model_validate(dict(data))
        except ValidationError as exc:
            raise ConfigError(str(exc)) from exc

    def with_overrides(self, overrides: Mapping[str, object]) -> HippocampusConfig:
        """Return a new config with ``overrides`` deep-merged onto this one.

        ``decay_rates`` and ``retention_floor`` are merged per key, so a
        partial override leaves the other types untouched.
        """
        data = self.model_dump()
        aliases = {
            info.alias: name
            for name, info in type(self).model_fields.items()
            if info.alias
        }
        for raw_key, value in overrides.items():
            key = aliases.get(raw_key, raw_key)
            if key in _NESTED_FIELDS and isinstance(value, Mapping):
                data[key] = {**data[key], **{str(k): v for k, v in value.items()}}
            else:
                data[key] = value
        return type(self).from_mapping(data)

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def decay_rate(self, entry_type: EntryType | str) -> float:
        """λ for ``entry_type``, falling back to ``default_decay_rate``."""
        return self.decay_rates.get(_type_key(entry_type), self.default_decay_rate)

    def floor(self, entry_type: EntryType | str) -> float:
        """Retention floor for ``entry_type`` (0.0 when unmapped)."""
        return self.retention_floor.get(_type_key(entry_type), 0.0)
