import json

import pytest

from tourism_api.models import PayoutSetting
from tourism_api.services.errors import PayoutValidationError
from tourism_api.services.payout_config import (
    SETTING_KEYS,
    build_payout_config,
    load_payout_config,
    update_payout_setting,
)


def test_defaults_when_nothing_is_stored():
    config = build_payout_config({})
    assert config.point_definitions == {}
    assert config.contribution_limits.B_monthly_per_store == 1
    assert config.founder_max_stores.max == 200
    assert config.rank_thresholds.S == 80
    assert config.rank_multipliers.C == pytest.approx(0.85)
    assert config.rank_weights.monthly_weight == pytest.approx(0.6)
    assert config.payout_amounts.perpetual_per_store == 1000
    assert config.payout_amounts.contribution_per_store == 4000


def test_point_definitions_short_and_long_form():
    config = build_payout_config(
        {"point_definitions": {"B": 10, "A": {"base_points": 30, "label": "Article"}}}
    )
    assert config.base_points_for("B") == 10
    assert config.base_points_for("A") == 30
    assert config.point_definitions["A"].label == "Article"
    # Unknown types are worth nothing
    assert config.base_points_for("Z") == 0


def test_partial_section_keeps_other_defaults():
    config = build_payout_config({"rank_thresholds": {"S": 100}})
    assert config.rank_thresholds.S == 100
    assert config.rank_thresholds.A == 50


def test_invalid_section_raises_validation_error():
    with pytest.raises(PayoutValidationError) as exc:
        build_payout_config({"payout_amounts": {"perpetual_per_store": -5}})
    assert exc.value.detail and "errors" in exc.value.detail


def test_unknown_keys_are_ignored():
    config = build_payout_config({"legacy_flag": True})
    assert config.founder_max_stores.max == 200


async def test_load_payout_config_reads_table(session):
    session.add(PayoutSetting(key="founder_max_stores", value_json=json.dumps({"max": 3})))
    session.add(PayoutSetting(key="point_definitions", value_json=json.dumps({"B": {"base_points": 12}})))
    await session.flush()

    config = await load_payout_config(session)
    assert config.founder_max_stores.max == 3
    assert config.base_points_for("B") == 12


async def test_load_payout_config_rejects_corrupt_json(session):
    session.add(PayoutSetting(key="rank_weights", value_json="{not json"))
    await session.flush()

    with pytest.raises(PayoutValidationError):
        await load_payout_config(session)


async def test_update_payout_setting_upserts_normalised_value(session):
    config = await update_payout_setting(session, "point_definitions", {"B": 10})
    assert config.base_points_for("B") == 10

    row = await session.get(PayoutSetting, "point_definitions")
    assert json.loads(row.value_json) == {"B": {"base_points": 10.0}}

    config = await update_payout_setting(session, "point_definitions", {"B": 15})
    assert config.base_points_for("B") == 15
    assert json.loads(row.value_json) == {"B": {"base_points": 15.0}}


async def test_update_payout_setting_rejects_unknown_key(session):
    with pytest.raises(PayoutValidationError) as exc:
        await update_payout_setting(session, "bonus_pool", {"amount": 1})
    assert exc.value.detail == {"allowed": list(SETTING_KEYS)}


async def test_update_payout_setting_rejects_invalid_value(session):
    with pytest.raises(PayoutValidationError):
        await update_payout_setting(session, "rank_multipliers", {"S": "high"})
    assert await session.get(PayoutSetting, "rank_multipliers") is None


def test_point_definition_keys_are_upper_cased():
    config = build_payout_config({"point_definitions": {"b1": 5, " r ": {"base_points": 2}}})
    assert set(config.point_definitions) == {"B1", "R"}
    assert config.base_points_for("B1") == 5
    assert config.base_points_for("b1") == 5
    assert config.base_points_for("R") == 2
