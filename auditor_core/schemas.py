from __future__ import annotations

from collections.abc import Mapping
from typing import TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator


DEFAULT_AUTOLOAD_TOP_LIMIT = 50
DEFAULT_LARGEST_LIMIT = 50
DEFAULT_ORPHAN_LIMIT = 80
DEFAULT_TRANSIENT_LIMIT = 80
DEFAULT_BIG_OPTION_THRESHOLD_BYTES = 256 * 1024
MIN_BIG_OPTION_THRESHOLD_BYTES = 1024


TBaseSchema = TypeVar("TBaseSchema", bound="BaseSchema")


class BaseSchema(BaseModel):
    def to_json(self) -> str:
        return self.model_dump_json()

    def to_dict(self) -> dict[str, object]:
        return self.model_dump()

    @classmethod
    def from_json(cls: type[TBaseSchema], data: str) -> TBaseSchema:
        return cls.model_validate_json(data)

    @classmethod
    def from_dict(cls: type[TBaseSchema], data: Mapping[str, object]) -> TBaseSchema:
        return cls.model_validate(data)


class OptionRow(BaseSchema):
    model_config = ConfigDict(frozen=True)

    key: str
    size_bytes: int = Field(ge=0)
    preload_flag: str = ""

    @property
    def is_preloaded(self) -> bool:
        return self.preload_flag == "yes"


class OrphanCandidate(BaseSchema):
    model_config = ConfigDict(frozen=True)

    key: str
    prefix_guess: str
    size_bytes: int = Field(ge=0)
    preload_flag: str = ""


class TransientPair(BaseSchema):
    model_config = ConfigDict(frozen=True)

    timeout_key: str
    value_key: str = ""
    timeout_epoch: int = 0
    timeout_human: str = ""
    size_bytes: int = Field(default=0, ge=0)


class TransientScan(BaseSchema):
    expired_transients_sample: list[TransientPair] = Field(default_factory=list)
    expired_site_transients_sample: list[TransientPair] = Field(default_factory=list)
    expired_transients_count_estimate: int = 0
    expired_site_transients_count_estimate: int = 0


class AuditThresholds(BaseSchema):
    big_option_bytes: int


class AuditCounts(BaseSchema):
    total_options: int = 0
    autoload_options: int = 0
    autoload_total_bytes: int = 0


class AuditReport(BaseSchema):
    thresholds: AuditThresholds
    counts: AuditCounts
    autoload_top: list[OptionRow] = Field(default_factory=list)
    largest_overall: list[OptionRow] = Field(default_factory=list)
    big_autoload: list[OptionRow] = Field(default_factory=list)
    orphans: list[OrphanCandidate] = Field(default_factory=list)
    transients: TransientScan = Field(default_factory=TransientScan)


def _positive_or(value: object, default: int) -> object:
    if value is None:
        return default
    try:
        number = int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        # Let pydantic report the bad type.
        return value
    return number if number > 0 else default


class AuditConfig(BaseSchema):
    """Tunables for one audit pass.

    Out-of-range values are clamped instead of rejected: a limit <= 0 falls
    back to its default and a threshold below 1 KiB is raised to 1 KiB.
    """

    autoload_top_limit: int = DEFAULT_AUTOLOAD_TOP_LIMIT
    largest_limit: int = DEFAULT_LARGEST_LIMIT
    orphan_limit: int = DEFAULT_ORPHAN_LIMIT
    transient_limit: int = DEFAULT_TRANSIENT_LIMIT
    big_option_threshold_bytes: int = DEFAULT_BIG_OPTION_THRESHOLD_BYTES

    @field_validator("autoload_top_limit", mode="before")
    @classmethod
    def autoload_top_limit_positive(cls, value: object) -> object:
        return _positive_or(value, DEFAULT_AUTOLOAD_TOP_LIMIT)

    @field_validator("largest_limit", mode="before")
    @classmethod
    def largest_limit_positive(cls, value: object) -> object:
        return _positive_or(value, DEFAULT_LARGEST_LIMIT)

    @field_validator("orphan_limit", mode="before")
    @classmethod
    def orphan_limit_positive(cls, value: object) -> object:
        return _positive_or(value, DEFAULT_ORPHAN_LIMIT)

    @field_validator("transient_limit", mode="before")
    @classmethod
    def transient_limit_positive(cls, value: object) -> object:
        return _positive_or(value, DEFAULT_TRANSIENT_LIMIT)

    @field_validator("big_option_threshold_bytes", mode="before")
    @classmethod
    def threshold_floor(cls, value: object) -> object:
        if value is None:
            return DEFAULT_BIG_OPTION_THRESHOLD_BYTES
        try:
            number = int(value)  # type: ignore[arg-type]
        except (TypeError, ValueError):
            return value
        return max(number, MIN_BIG_OPTION_THRESHOLD_BYTES)
