from __future__ import annotations

from dataclasses import dataclass


@dataclass
class SimulationSession:
    """
    Mutable per-engine simulation state.

    Passed explicitly to the integrator and the engine's input handlers so
    that several engines can run side by side without shared globals.
    """

    # Last known pointer position in surface coordinates.
    pointer_x: float = 0.0
    pointer_y: float = 0.0
    # True between a pointer-enter and the following pointer-leave.
    hover: bool = False
    # Smoothed repel target (starts at the surface center).
    repel_x: float = 0.0
    repel_y: float = 0.0
    # Number of completed frames.
    frame: int = 0

    @classmethod
    def centered(cls, width: float, height: float) -> "SimulationSession":
        """Return a fresh session whose repel target sits at the surface center."""
        return cls(repel_x=0.5 * float(width), repel_y=0.5 * float(height))

    def move_pointer(self, x: float, y: float) -> None:
        self.pointer_x = float(x)
        self.pointer_y = float(y)

    def enter(self) -> None:
        self.hover = True

    def leave(self) -> None:
        self.hover = False
