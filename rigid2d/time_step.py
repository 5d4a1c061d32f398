"""Per-step data shared between the island solver and constraints."""

from __future__ import annotations

from dataclasses import dataclass, field

from rigid2d.vecmath import Vec2


@dataclass(slots=True)
class Profile:
    """Profiling data. Times are in milliseconds."""

    step: float = 0.0
    collide: float = 0.0
    solve: float = 0.0
    solve_init: float = 0.0
    solve_velocity: float = 0.0
    solve_position: float = 0.0
    broadphase: float = 0.0
    solve_toi: float = 0.0


@dataclass(frozen=True, slots=True)
class TimeStep:
    """Time step parameters used by the solvers."""

    dt: float
    inv_dt: float
    dt_ratio: float
    velocity_iterations: int
    position_iterations: int
    warm_starting: bool

    @staticmethod
    def from_dt(
        dt: float,
        velocity_iterations: int,
        position_iterations: int,
        warm_starting: bool = True,
        dt_ratio: float = 1.0,
    ) -> TimeStep:
        """Build a step, deriving the inverse time step (0 when dt is not positive)."""
        inv_dt = 1.0 / dt if dt > 0.0 else 0.0
        return TimeStep(
            dt=dt,
            inv_dt=inv_dt,
            dt_ratio=dt_ratio,
            velocity_iterations=velocity_iterations,
            position_iterations=position_iterations,
            warm_starting=warm_starting,
        )


@dataclass(slots=True)
class Position:
    """Center of mass position and angle of a body during solving."""

    c: Vec2 = field(default_factory=Vec2)
    a: float = 0.0


@dataclass(slots=True)
class Velocity:
    """Linear and angular velocity of a body during solving."""

    v: Vec2 = field(default_factory=Vec2)
    w: float = 0.0


@dataclass(slots=True)
class SolverData:
    """The step and the state arrays that constraints read and update."""

    step: TimeStep
    positions: list[Position] = field(default_factory=list)
    velocities: list[Velocity] = field(default_factory=list)