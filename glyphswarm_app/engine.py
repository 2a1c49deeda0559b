from __future__ import annotations

"""
Particle text engine: frame loop, input handling and resize control.

The host talks to the engine with plain dict messages (see handle_message):

    {"surface": RenderSurface, "config": {...}}     once, starts the engine
    {"type": "resize", "width": w, "height": h}     debounced re-derivation
    {"type": "mousemove", "x": x, "y": y}
    {"type": "mouseenter"} / {"type": "mouseleave"}

Once running, the engine schedules itself through its ticker: each frame
runs the integrator, then the compositor. Any exception raised by a frame
stops the ticker for good and is reported to the error sink; the surface
then simply keeps its last image.
"""

import math
import sys
import traceback
from dataclasses import asdict
from enum import Enum
from typing import Any, Callable, Mapping, Optional, Union

from .compositor import Compositor
from .config import ParticleTextConfig, config_from_dict
from .particle_store import ParticleStore
from .physics import step_physics
from .scheduler import RESIZE_DEBOUNCE_MS, Debouncer, FrameTicker
from .session import SimulationSession
from .surface import RenderSurface
from .text_mapper import map_particles

ErrorSink = Callable[[BaseException, str], None]


class GlyphSwarmError(Exception):
    """Base class for engine errors."""


class EngineStateError(GlyphSwarmError):
    """Raised when an operation is not valid in the engine's current state."""


class EngineState(Enum):
    UNINITIALIZED = "uninitialized"
    RUNNING = "running"
    STOPPED = "stopped"


def _diag(message: str) -> None:
    print(f"[glyphswarm] {message}", file=sys.stderr)


def print_error_sink(exc: BaseException, tb: str) -> None:
    """Default error sink: tagged message + traceback on stderr."""
    print("[glyphswarm] Error in render:", exc, file=sys.stderr)
    if tb:
        print(tb, file=sys.stderr)


class ParticleTextEngine:
    """
    Owns the particle population, the working buffer and the simulation
    session of one text field.

    `ticker` is any object with start(callback) / cancel() (FrameTicker by
    default, ManualTicker for deterministic stepping).
    """

    def __init__(
        self,
        ticker: Optional[Any] = None,
        error_sink: Optional[ErrorSink] = None,
        resize_debounce_ms: int = RESIZE_DEBOUNCE_MS,
    ) -> None:
        self._ticker = ticker if ticker is not None else FrameTicker()
        self._error_sink: ErrorSink = error_sink or print_error_sink
        self._resize_debouncer = Debouncer(self._apply_resize, resize_debounce_ms)

        self._state = EngineState.UNINITIALIZED
        self._config: Optional[ParticleTextConfig] = None
        self._surface: Optional[RenderSurface] = None
        self._compositor: Optional[Compositor] = None
        self._particles = ParticleStore.allocate(0)
        self._session = SimulationSession()

        # Number of times the particle population was (re)derived.
        self.derivations: int = 0

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------
    @property
    def state(self) -> EngineState:
        return self._state

    @property
    def config(self) -> Optional[ParticleTextConfig]:
        return self._config

    @property
    def session(self) -> SimulationSession:
        return self._session

    @property
    def particles(self) -> ParticleStore:
        return self._particles

    @property
    def surface(self) -> Optional[RenderSurface]:
        return self._surface

    @property
    def compositor(self) -> Optional[Compositor]:
        return self._compositor

    @property
    def frame_count(self) -> int:
        return self._session.frame

    @property
    def resize_pending(self) -> bool:
        return self._resize_debouncer.pending

    # ------------------------------------------------------------------
    # Message protocol
    # ------------------------------------------------------------------
    def handle_message(self, data: Mapping[str, Any]) -> None:
        """Dispatch one inbound message from the host."""
        if not isinstance(data, Mapping):
            _diag(f"ignoring non-mapping message: {data!r}")
            return

        msg_type = data.get("type")
        if msg_type:
            if msg_type == "mousemove":
                self.on_mouse_move(data.get("x"), data.get("y"))
            elif msg_type == "mouseenter":
                self.on_mouse_enter()
            elif msg_type == "mouseleave":
                self.on_mouse_leave()
            elif msg_type == "resize":
                self.on_resize(data.get("width"), data.get("height"))
            return

        surface = data.get("surface", data.get("canvas"))
        if surface is not None:
            self.initialize(surface, data.get("config"))

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def initialize(
        self,
        surface: RenderSurface,
        config: Union[ParticleTextConfig, Mapping[str, Any], None] = None,
    ) -> None:
        """
        Take the display surface, derive the particles and start the loop.

        Valid only once per engine.
        """
        if self._state is not EngineState.UNINITIALIZED:
            raise EngineStateError(f"engine already initialized (state={self._state.value})")

        if isinstance(config, ParticleTextConfig):
            # Re-run the clamping even for a config built by hand.
            config = asdict(config)
        cfg = config_from_dict(config)

        self._config = cfg
        self._surface = surface
        self._compositor = Compositor(cfg.width, cfg.height)
        self._session.repel_x, self._session.repel_y = cfg.center

        self._rederive(cfg.width, cfg.height)

        self._state = EngineState.RUNNING
        self._ticker.start(self._run_frame)

    def step(self) -> None:
        """Run exactly one frame: integrator, then compositor."""
        if self._config is None or self._surface is None or self._compositor is None:
            raise EngineStateError("engine is not initialized")
        step_physics(self._particles, self._session, self._config)
        self._compositor.render_frame(self._particles, self._surface, self._config)
        self._session.frame += 1

    def _run_frame(self) -> None:
        if self._state is not EngineState.RUNNING:
            return
        try:
            self.step()
        except Exception as exc:
            # Stop the loop on error; no retry.
            self._stop()
            self._error_sink(exc, traceback.format_exc())

    def _stop(self) -> None:
        self._ticker.cancel()
        self._resize_debouncer.cancel()
        self._state = EngineState.STOPPED

    # ------------------------------------------------------------------
    # Resize
    # ------------------------------------------------------------------
    def on_resize(self, width: Any, height: Any) -> None:
        """Queue a re-derivation; bursts of resizes collapse into the last one."""
        if self._state is EngineState.UNINITIALIZED:
            _diag("ignoring resize received before initialization")
            return
        if self._state is EngineState.STOPPED:
            return
        self._resize_debouncer(width, height)

    def flush_pending_resize(self) -> bool:
        """Apply a pending resize immediately. Returns False if none was pending."""
        return self._resize_debouncer.flush()

    def _apply_resize(self, width: Any, height: Any) -> None:
        if self._state is not EngineState.RUNNING:
            return
        try:
            self._rederive(width, height)
        except Exception as exc:
            self._stop()
            self._error_sink(exc, traceback.format_exc())

    def _rederive(self, width: Any, height: Any) -> None:
        """Replace config dimensions, resize both surfaces and re-map the text."""
        self._config = self._config.with_size(width, height)
        cfg = self._config
        self._surface.resize(cfg.width, cfg.height)
        self._compositor.resize(cfg.width, cfg.height)
        self._particles = map_particles(cfg)
        self.derivations += 1

    # ------------------------------------------------------------------
    # Pointer
    # ------------------------------------------------------------------
    def on_mouse_move(self, x: Any, y: Any) -> None:
        try:
            px, py = float(x), float(y)
        except (TypeError, ValueError):
            px = py = math.nan
        if not (math.isfinite(px) and math.isfinite(py)):
            _diag(f"ignoring mousemove with invalid coordinates ({x!r}, {y!r})")
            return
        self._session.move_pointer(px, py)

    def on_mouse_enter(self) -> None:
        self._session.enter()

    def on_mouse_leave(self) -> None:
        self._session.leave()
