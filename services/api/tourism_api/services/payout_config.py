"""Payout settings: typed configuration over the `payout_settings` key/JSON table.

Each row of `payout_settings` holds one section of the configuration as JSON.
Sections are validated once when loaded; anything missing falls back to the
defaults below, so callers never null-check individual values.

Sections (key -> shape):
- point_definitions:   {"B": {"base_points": 10, "label": "..."}, ...}
- contribution_limits: {"B_monthly_per_store": 1}
- founder_max_stores:  {"max": 200}
- rank_thresholds:     {"S": 80, "A": 50, "B": 20, "C": 0}
- rank_multipliers:    {"S": 1.30, "A": 1.15, "B": 1.00, "C": 0.85}
- rank_weights:        {"monthly_weight": 0.6, "avg3_weight": 0.4}
- payout_amounts:      {"perpetual_per_store": 1000, "contribution_per_store": 4000}
"""

from __future__ import annotations

import json
import logging
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from tourism_api.models import PayoutSetting
from tourism_api.services.errors import PayoutValidationError

logger = logging.getLogger("uvicorn.error")


class PointDefinition(BaseModel):
    model_config = ConfigDict(extra="allow")

    base_points: float = Field(default=0, ge=0)
    label: str | None = None


class ContributionLimits(BaseModel):
    B_monthly_per_store: int = Field(default=1, ge=0)


class FounderLimits(BaseModel):
    max: int = Field(default=200, ge=0)


class RankThresholds(BaseModel):
    S: float = 80
    A: float = 50
    B: float = 20
    C: float = 0


class RankMultipliers(BaseModel):
    S: float = Field(default=1.30, ge=0)
    A: float = Field(default=1.15, ge=0)
    B: float = Field(default=1.00, ge=0)
    C: float = Field(default=0.85, ge=0)


class RankWeights(BaseModel):
    monthly_weight: float = Field(default=0.6, ge=0)
    avg3_weight: float = Field(default=0.4, ge=0)


class PayoutAmounts(BaseModel):
    perpetual_per_store: int = Field(default=1000, ge=0)
    contribution_per_store: int = Field(default=4000, ge=0)


class PayoutConfig(BaseModel):
    """All payout settings, with defaults applied."""

    point_definitions: dict[str, PointDefinition] = Field(default_factory=dict)
    contribution_limits: ContributionLimits = Field(default_factory=ContributionLimits)
    founder_max_stores: FounderLimits = Field(default_factory=FounderLimits)
    rank_thresholds: RankThresholds = Field(default_factory=RankThresholds)
    rank_multipliers: RankMultipliers = Field(default_factory=RankMultipliers)
    rank_weights: RankWeights = Field(default_factory=RankWeights)
    payout_amounts: PayoutAmounts = Field(default_factory=PayoutAmounts)

    @field_validator("point_definitions", mode="before")
    @classmethod
    def _coerce_point_definitions(cls, v: object) -> object:
        # Allow the short form {"B": 10} next to {"B": {"base_points": 10}}.
        # Keys are upper-cased to match how contribution types are stored.
        if isinstance(v, dict):
            return {
                str(k).strip().upper(): {"base_points": d} if isinstance(d, (int, float)) else d
                for k, d in v.items()
            }
        return v

    def base_points_for(self, contribution_type: str) -> float:
        """Points for a contribution type; unknown types are worth 0."""
        definition = self.point_definitions.get(contribution_type.strip().upper())
        return definition.base_points if definition else 0.0


SETTING_KEYS: tuple[str, ...] = tuple(PayoutConfig.model_fields.keys())


def _decode(key: str, value_json: str | None) -> Any:
    if value_json is None:
        return None
    try:
        return json.loads(value_json)
    except json.JSONDecodeError as e:
        raise PayoutValidationError(
            f"Stored payout setting {key!r} is not valid JSON",
            detail={"key": key},
        ) from e


def build_payout_config(raw: dict[str, Any]) -> PayoutConfig:
    """Validate raw section values (as decoded from the table) into a PayoutConfig."""
    sections = {k: v for k, v in raw.items() if k in SETTING_KEYS and v is not None}
    try:
        return PayoutConfig.model_validate(sections)
    except ValidationError as e:
        raise PayoutValidationError(
            "Invalid payout settings",
            detail={"errors": e.errors(include_url=False, include_context=False)},
        ) from e


async def load_raw_settings(session: AsyncSession) -> dict[str, Any]:
    """All rows of `payout_settings`, decoded, including unknown keys."""
    result = await session.execute(select(PayoutSetting))
    return {row.key: _decode(row.key, row.value_json) for row in result.scalars().all()}


async def load_payout_config(session: AsyncSession) -> PayoutConfig:
    """Read current settings. A run always uses whatever is stored right now."""
    raw = await load_raw_settings(session)
    unknown = sorted(k for k in raw if k not in SETTING_KEYS)
    if unknown:
        logger.debug(f"[payout-settings] ignoring unknown keys: {unknown}")
    return build_payout_config(raw)


async def update_payout_setting(session: AsyncSession, key: str, value: Any) -> PayoutConfig:
    """Validate and upsert one settings section; returns the resulting config."""
    if key not in SETTING_KEYS:
        raise PayoutValidationError(
            f"Unknown payout setting: {key}",
            detail={"allowed": list(SETTING_KEYS)},
        )

    raw = await load_raw_settings(session)
    raw[key] = value
    config = build_payout_config(raw)

    # Persist the normalised section so later reads see the validated shape.
    section = getattr(config, key)
    if isinstance(section, BaseModel):
        normalised = section.model_dump()
    else:
        normalised = {k: d.model_dump(exclude_none=True) for k, d in section.items()}

    row = await session.get(PayoutSetting, key)
    if row is None:
        session.add(PayoutSetting(key=key, value_json=json.dumps(normalised)))
    else:
        row.value_json = json.dumps(normalised)
    await session.flush()

    logger.info(f"[payout-settings] updated key={key}")
    return config
