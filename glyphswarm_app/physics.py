"""
Per-frame particle integration.

Each frame the repel target is first smoothed toward the pointer (while the
pointer hovers the surface) or back toward the surface center. Every particle
is then pushed away from that target and pulled back toward its origin:

    rd  = dist(x, y, repel)
    phi = angle(repel -> particle)
    f   = (threshold ** 2 / rd) * (rd / threshold)
    vx  = lerp(vx, (bx - x) + cos(phi) * f, v_lerp_amt)
    x   = lerp(x, x + vx, p_lerp_amt)

`f` reduces to `threshold` for any rd > 0. It is evaluated as written so
that the two factors stay independently tunable.
"""

from __future__ import annotations

import math
from typing import Tuple

import numpy as np

from .config import ParticleTextConfig
from .particle_store import ParticleStore
from .session import SimulationSession


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _lerp(a, b, t):
    return (1.0 - t) * a + t * b


def _dist(x1, y1, x2, y2):
    return np.sqrt((x2 - x1) ** 2 + (y2 - y1) ** 2)


def _angle(x1, y1, x2, y2):
    return np.arctan2(y2 - y1, x2 - x1)


# ---------------------------------------------------------------------------
# Repel target
# ---------------------------------------------------------------------------


def update_repel_target(session: SimulationSession, config: ParticleTextConfig) -> None:
    """Smooth the repel target toward the pointer (hovered) or the center."""
    if session.hover:
        tx, ty = session.pointer_x, session.pointer_y
    else:
        tx, ty = config.center
    session.repel_x = _lerp(session.repel_x, tx, config.m_lerp_amt)
    session.repel_y = _lerp(session.repel_y, ty, config.m_lerp_amt)


# ---------------------------------------------------------------------------
# Particles
# ---------------------------------------------------------------------------


def update_particle_coords(
    x: float,
    y: float,
    vx: float,
    vy: float,
    bx: float,
    by: float,
    repel_x: float,
    repel_y: float,
    config: ParticleTextConfig,
) -> Tuple[float, float, float, float]:
    """
    Integrate one particle and return the new (x, y, vx, vy).

    Scalar form of integrate(). A particle sitting exactly on the repel
    target yields NaN (0 / 0), which the caller is expected to discard.
    """
    rd = math.hypot(x - repel_x, y - repel_y)
    phi = math.atan2(y - repel_y, x - repel_x)
    threshold = config.repel_threshold
    try:
        f = (threshold ** 2 / rd) * (rd / threshold)
    except ZeroDivisionError:
        f = math.nan

    dx = bx - x
    dy = by - y

    vx = _lerp(vx, dx + math.cos(phi) * f, config.v_lerp_amt)
    vy = _lerp(vy, dy + math.sin(phi) * f, config.v_lerp_amt)

    x = _lerp(x, x + vx, config.p_lerp_amt)
    y = _lerp(y, y + vy, config.p_lerp_amt)
    return x, y, vx, vy


def integrate(store: ParticleStore, session: SimulationSession, config: ParticleTextConfig) -> int:
    """
    Advance every particle in *store* by one frame.

    All fields are computed from the pre-update snapshot and written back as
    whole records. Records that turned non-finite (particle exactly on the
    repel target) are reset to their origin at rest.

    A particle whose origin coincides with a resting repel target (e.g. the
    center pixel of an even-sized surface while the pointer is away) is reset
    onto the target every frame, so it stays put at the center of the
    otherwise empty repel hole until the target moves.

    Returns the number of records that had to be reset.
    """
    if store.count == 0:
        return 0

    rec = store.records.astype(np.float64)
    x, y, vx, vy, bx, by = (rec[:, j] for j in range(6))
    rx, ry = float(session.repel_x), float(session.repel_y)
    threshold = float(config.repel_threshold)

    with np.errstate(divide="ignore", invalid="ignore"):
        rd = _dist(x, y, rx, ry)
        phi = _angle(rx, ry, x, y)
        f = (threshold ** 2 / rd) * (rd / threshold)

        dx = bx - x
        dy = by - y

        nvx = _lerp(vx, dx + np.cos(phi) * f, config.v_lerp_amt)
        nvy = _lerp(vy, dy + np.sin(phi) * f, config.v_lerp_amt)

        nx = _lerp(x, x + nvx, config.p_lerp_amt)
        ny = _lerp(y, y + nvy, config.p_lerp_amt)

    out = np.stack((nx, ny, nvx, nvy, bx, by), axis=1)

    bad = ~np.isfinite(out[:, :4]).all(axis=1)
    n_bad = int(np.count_nonzero(bad))
    if n_bad:
        out[bad, 0] = bx[bad]
        out[bad, 1] = by[bad]
        out[bad, 2] = 0.0
        out[bad, 3] = 0.0

    store.records[:] = out
    return n_bad


def step_physics(store: ParticleStore, session: SimulationSession, config: ParticleTextConfig) -> int:
    """Run the full integrator for one frame (repel target, then particles)."""
    update_repel_target(session, config)
    return integrate(store, session, config)
