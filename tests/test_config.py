import math
import random

import pytest

from glyphswarm_app.config import (
    DEFAULT_MESSAGE,
    MAX_SURFACE_SIZE,
    ParticleTextConfig,
    config_from_dict,
    engine_parameters,
)


def test_defaults_match_widget_defaults():
    cfg = config_from_dict({})
    assert cfg.message == DEFAULT_MESSAGE
    assert cfg.draw_type == "stroke"
    assert cfg.background_color == "rgb(5, 15, 20)"
    assert cfg.font_color == "rgb(60, 200, 255)"
    assert cfg.font_family == "monospace"
    assert cfg.font_size == 40.0
    assert cfg.text_align == "center"
    assert cfg.text_baseline == "middle"
    assert cfg.density == 3
    assert cfg.glow is True
    assert cfg.p_lerp_amt == 0.25
    assert cfg.v_lerp_amt == 0.1
    assert cfg.m_lerp_amt == 0.5
    assert cfg.repel_threshold == 50.0


def test_every_field_has_a_parameter():
    params = engine_parameters()
    assert set(params) == set(ParticleTextConfig.__dataclass_fields__)
    assert all(p.wire_key for p in params.values())


@pytest.mark.parametrize(
    "raw, expected",
    [(0, 1), (-3, 1), (1, 1), (2.7, 2), ("4", 4), (9, 4), ("abc", 3), (None, 3)],
)
def test_density_is_truncated_and_clamped(raw, expected):
    assert config_from_dict({"density": raw}).density == expected


@pytest.mark.parametrize("key", ["pLerpAmt", "vLerpAmt", "mLerpAmt"])
def test_lerp_amounts_are_clamped(key):
    low = config_from_dict({key: -1})
    high = config_from_dict({key: 5})
    attr = {"pLerpAmt": "p_lerp_amt", "vLerpAmt": "v_lerp_amt", "mLerpAmt": "m_lerp_amt"}[key]
    assert getattr(low, attr) == 0.05
    assert getattr(high, attr) == 1.0


def test_repel_threshold_is_clamped():
    assert config_from_dict({"repelThreshold": 1}).repel_threshold == 20.0
    assert config_from_dict({"repelThreshold": 1e6}).repel_threshold == 200.0
    assert config_from_dict({"repelThreshold": "75"}).repel_threshold == 75.0


def test_nan_and_garbage_fall_back_to_defaults():
    cfg = config_from_dict({"repelThreshold": float("nan"), "pLerpAmt": "fast", "fontSize": object()})
    assert cfg.repel_threshold == 50.0
    assert cfg.p_lerp_amt == 0.25
    assert cfg.font_size == 40.0


@pytest.mark.parametrize(
    "raw, expected",
    [("false", False), ("FALSE", False), ("true", True), ("", True), (0, False), (1, True), (False, False)],
)
def test_glow_parsing(raw, expected):
    assert config_from_dict({"glow": raw}).glow is expected


def test_enum_options_fall_back_to_default():
    cfg = config_from_dict({"drawType": "zigzag", "textAlign": "RIGHT", "textBaseline": "nowhere"})
    assert cfg.draw_type == "stroke"
    assert cfg.text_align == "right"
    assert cfg.text_baseline == "middle"


def test_empty_message_is_kept():
    assert config_from_dict({"message": ""}).message == ""


def test_snake_case_keys_are_accepted_and_wire_keys_win():
    cfg = config_from_dict({"repel_threshold": 100, "p_lerp_amt": 0.5, "pLerpAmt": 0.75})
    assert cfg.repel_threshold == 100.0
    assert cfg.p_lerp_amt == 0.75


@pytest.mark.parametrize("density, step", [(1, 12), (2, 8), (3, 4), (4, 0)])
def test_pixel_density(density, step):
    assert config_from_dict({"density": density}).pixel_density == step


def test_derived_properties():
    cfg = config_from_dict({"width": 200, "height": 100, "fontSize": 32, "fontFamily": "serif"})
    assert cfg.center == (100.0, 50.0)
    assert cfg.font_style == "32px serif"


def test_with_size_returns_a_new_clamped_config():
    cfg = config_from_dict({"width": 200, "height": 100})
    resized = cfg.with_size(0, "480")
    assert (resized.width, resized.height) == (1, 480)
    assert (cfg.width, cfg.height) == (200, 100)
    assert resized.message == cfg.message


def test_config_is_immutable():
    cfg = config_from_dict({})
    with pytest.raises(Exception):
        cfg.width = 10  # type: ignore[misc]


def test_wire_round_trip():
    cfg = config_from_dict({"message": "HI", "density": 2, "glow": "false", "width": 64})
    assert config_from_dict(cfg.to_wire()) == cfg


def test_random_inputs_stay_within_bounds():
    rng = random.Random(7)
    for _ in range(200):
        raw = {
            "density": rng.uniform(-10, 10),
            "pLerpAmt": rng.uniform(-2, 2),
            "vLerpAmt": rng.uniform(-2, 2),
            "mLerpAmt": rng.uniform(-2, 2),
            "repelThreshold": rng.uniform(-500, 500),
        }
        cfg = config_from_dict(raw)
        assert cfg.density in (1, 2, 3, 4)
        for amt in (cfg.p_lerp_amt, cfg.v_lerp_amt, cfg.m_lerp_amt):
            assert 0.05 <= amt <= 1.0
        assert 20.0 <= cfg.repel_threshold <= 200.0
        assert not math.isnan(cfg.repel_threshold)


@pytest.mark.parametrize("raw, expected", [(200000, MAX_SURFACE_SIZE), (16384, 16384), ("1e12", MAX_SURFACE_SIZE), (float("inf"), 300)])
def test_width_is_capped(raw, expected):
    assert config_from_dict({"width": raw}).width == expected


def test_with_size_keeps_current_dimension_on_garbage():
    cfg = config_from_dict({"width": 200, "height": 100})
    assert (cfg.with_size("abc", None).width, cfg.with_size("abc", None).height) == (200, 100)
    assert cfg.with_size(10**9, "x").width == MAX_SURFACE_SIZE
    assert cfg.with_size(10**9, "x").height == 100
