import numpy as np
import pytest

from glyphswarm_app.config import config_from_dict
from glyphswarm_app.text_mapper import (
    map_particles,
    rasterize_message,
    sample_alpha_mask,
    seeds_to_store,
)


# ---------------------------------------------------------------------------
# Sampling on synthetic masks
# ---------------------------------------------------------------------------


def test_zero_step_keeps_every_lit_pixel_in_scan_order():
    alpha = np.array([[0, 255, 0, 1], [9, 0, 0, 0], [0, 0, 0, 200]], dtype=np.uint8)
    seeds = sample_alpha_mask(alpha, 0)
    assert seeds.tolist() == [[1, 0], [3, 0], [0, 1], [3, 2]]


@pytest.mark.parametrize(
    "step, kept",
    [
        (0, list(range(12))),
        (4, list(range(12))),
        (8, [0, 2, 4, 6, 8, 10]),
        (12, [0, 3, 6, 9]),
    ],
)
def test_density_step_filters_on_byte_index(step, kept):
    alpha = np.full((3, 4), 255, dtype=np.uint8)
    seeds = sample_alpha_mask(alpha, step)
    flat = (seeds[:, 1] * 4 + seeds[:, 0]).astype(int).tolist()
    assert flat == kept


def test_unlit_mask_yields_no_seeds():
    seeds = sample_alpha_mask(np.zeros((10, 10), dtype=np.uint8), 0)
    assert seeds.shape == (0, 2)
    assert seeds_to_store(seeds).count == 0


def test_mask_must_be_2d():
    with pytest.raises(ValueError):
        sample_alpha_mask(np.zeros(10, dtype=np.uint8), 0)


def test_count_is_monotonic_in_density_level():
    rng = np.random.default_rng(1234)
    alpha = (rng.random((37, 53)) > 0.6).astype(np.uint8) * 255
    counts = []
    for density in (1, 2, 3, 4):
        step = config_from_dict({"density": density}).pixel_density
        counts.append(sample_alpha_mask(alpha, step).shape[0])
    assert counts == sorted(counts)
    assert counts[-1] == int(np.count_nonzero(alpha))


def test_seeds_become_particles_at_rest_on_their_origin():
    store = seeds_to_store(np.array([[3, 4], [10, 0]], dtype=np.float32))
    assert store.records.tolist() == [[3, 4, 0, 0, 3, 4], [10, 0, 0, 0, 10, 0]]


# ---------------------------------------------------------------------------
# Rasterizing real glyphs
# ---------------------------------------------------------------------------


def test_empty_message_maps_to_no_particles():
    cfg = config_from_dict({"message": "", "width": 80, "height": 40})
    alpha = rasterize_message(cfg)
    assert alpha.shape == (40, 80)
    assert not alpha.any()
    assert map_particles(cfg).count == 0


def test_single_letter_on_small_surface(require_fonts):
    cfg = config_from_dict({"message": "A", "width": 100, "height": 100, "density": 4})
    store = map_particles(cfg)
    assert store.count > 0
    bx = store.column("bx")
    by = store.column("by")
    assert ((bx >= 0) & (bx < 100)).all()
    assert ((by >= 0) & (by < 100)).all()
    assert np.array_equal(store.column("x"), bx)
    assert np.array_equal(store.column("y"), by)
    assert not store.column("vx").any()
    assert not store.column("vy").any()


@pytest.mark.parametrize("draw_type", ["stroke", "fill"])
def test_mapping_is_deterministic(require_fonts, draw_type):
    cfg = config_from_dict({"message": "Hi!", "width": 160, "height": 80, "drawType": draw_type})
    first = map_particles(cfg)
    second = map_particles(cfg)
    assert first.count == second.count > 0
    assert np.array_equal(first.records, second.records)


def test_real_text_count_is_monotonic_in_density(require_fonts):
    counts = []
    for density in (1, 2, 3, 4):
        cfg = config_from_dict(
            {"message": "WAVE", "width": 240, "height": 90, "fontSize": 48, "drawType": "fill", "density": density}
        )
        counts.append(map_particles(cfg).count)
    assert counts == sorted(counts)
    assert counts[0] > 0


def test_fill_lights_more_pixels_than_stroke(require_fonts):
    base = {"message": "O", "width": 120, "height": 120, "fontSize": 90, "density": 4}
    stroke = map_particles(config_from_dict(dict(base, drawType="stroke"))).count
    fill = map_particles(config_from_dict(dict(base, drawType="fill"))).count
    assert 0 < stroke < fill


def test_text_is_mapped_around_the_center(require_fonts):
    cfg = config_from_dict({"message": "MMMM", "width": 300, "height": 120, "fontSize": 40, "drawType": "fill"})
    store = map_particles(cfg)
    assert store.count > 0
    assert float(store.column("bx").mean()) == pytest.approx(150.0, abs=15.0)
    assert float(store.column("by").mean()) == pytest.approx(60.0, abs=15.0)


def test_surface_too_small_for_text_is_not_an_error(require_fonts):
    cfg = config_from_dict({"message": "HELLO", "width": 1, "height": 1, "fontSize": 40, "textAlign": "left", "textBaseline": "top"})
    store = map_particles(cfg)
    assert store.count in (0, 1)
