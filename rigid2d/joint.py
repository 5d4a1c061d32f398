"""Base joint type, joint definitions and spring tuning helpers.

Joints work with body objects that provide:
``island_index``, ``sweep`` (a Sweep), ``inv_mass``, ``inv_i``, ``mass``,
``inertia``, ``transform``, ``position``, ``angle``, a writable ``awake``,
``is_enabled()``, ``world_point(local)`` and ``local_point(world)``.

A drawer provides ``draw_segment(p1, p2, color)`` and
``draw_point(p, size, color)``; colours are (r, g, b, a) tuples.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any

from rigid2d.time_step import SolverData
from rigid2d.vecmath import PI, Vec2


class JointType(Enum):
    UNKNOWN = 0
    REVOLUTE = 1
    PRISMATIC = 2
    DISTANCE = 3
    PULLEY = 4
    MOUSE = 5
    GEAR = 6
    WHEEL = 7
    WELD = 8
    FRICTION = 9
    MOTOR = 10


@dataclass
class JointDef:
    """Common joint definition data."""

    type: JointType = JointType.UNKNOWN
    body_a: Any = None
    body_b: Any = None
    collide_connected: bool = False
    user_data: Any = None


def _combined(value_a: float, value_b: float) -> float:
    if value_a > 0.0 and value_b > 0.0:
        return value_a * value_b / (value_a + value_b)
    if value_a > 0.0:
        return value_a
    return value_b


def linear_stiffness(
    frequency_hertz: float, damping_ratio: float, body_a: Any, body_b: Any
) -> tuple[float, float]:
    """Linear (stiffness, damping) from a frequency and damping ratio."""
    mass = _combined(body_a.mass, body_b.mass)
    omega = 2.0 * PI * frequency_hertz
    return mass * omega * omega, 2.0 * mass * damping_ratio * omega


def angular_stiffness(
    frequency_hertz: float, damping_ratio: float, body_a: Any, body_b: Any
) -> tuple[float, float]:
    """Angular (stiffness, damping) from a frequency and damping ratio."""
    inertia = _combined(body_a.inertia, body_b.inertia)
    omega = 2.0 * PI * frequency_hertz
    return inertia * omega * omega, 2.0 * inertia * damping_ratio * omega


_JOINT_COLOR = (0.5, 0.8, 0.8, 1.0)
_MOUSE_POINT_COLOR = (0.0, 1.0, 0.0, 1.0)
_MOUSE_LINE_COLOR = (0.8, 0.8, 0.8, 1.0)


class Joint(ABC):
    """A constraint between two distinct bodies."""

    def __init__(self, definition: JointDef) -> None:
        if definition.body_a is definition.body_b:
            raise ValueError("a joint must connect two different bodies")
        self.type = definition.type
        self.body_a = definition.body_a
        self.body_b = definition.body_b
        self.index = 0
        self.collide_connected = definition.collide_connected
        self.island_flag = False
        self.user_data = definition.user_data

    def is_enabled(self) -> bool:
        """True when both attached bodies are enabled."""
        return self.body_a.is_enabled() and self.body_b.is_enabled()

    @abstractmethod
    def anchor_a(self) -> Vec2:
        """Anchor point on body A in world coordinates."""

    @abstractmethod
    def anchor_b(self) -> Vec2:
        """Anchor point on body B in world coordinates."""

    @abstractmethod
    def reaction_force(self, inv_dt: float) -> Vec2:
        """Reaction force on body B at the anchor."""

    @abstractmethod
    def reaction_torque(self, inv_dt: float) -> float:
        """Reaction torque on body B."""

    @abstractmethod
    def init_velocity_constraints(self, data: SolverData) -> None:
        """Prepare the constraint for a step and apply warm starting."""

    @abstractmethod
    def solve_velocity_constraints(self, data: SolverData) -> None:
        """Run one velocity iteration."""

    @abstractmethod
    def solve_position_constraints(self, data: SolverData) -> bool:
        """Run one position iteration; True when the error is within tolerance."""

    @abstractmethod
    def dump(self) -> str:
        """Return script text that recreates this joint."""

    def draw(self, drawer: Any) -> None:
        """Draw the joint with the given drawer."""
        x1 = self.body_a.transform.p
        x2 = self.body_b.transform.p
        p1 = self.anchor_a()
        p2 = self.anchor_b()

        if self.type is JointType.DISTANCE:
            drawer.draw_segment(p1, p2, _JOINT_COLOR)
        elif self.type is JointType.PULLEY:
            s1 = self.ground_anchor_a()
            s2 = self.ground_anchor_b()
            drawer.draw_segment(s1, p1, _JOINT_COLOR)
            drawer.draw_segment(s2, p2, _JOINT_COLOR)
            drawer.draw_segment(s1, s2, _JOINT_COLOR)
        elif self.type is JointType.MOUSE:
            drawer.draw_point(p1, 4.0, _MOUSE_POINT_COLOR)
            drawer.draw_point(p2, 4.0, _MOUSE_POINT_COLOR)
            drawer.draw_segment(p1, p2, _MOUSE_LINE_COLOR)
        else:
            drawer.draw_segment(x1, p1, _JOINT_COLOR)
            drawer.draw_segment(p1, p2, _JOINT_COLOR)
            drawer.draw_segment(x2, p2, _JOINT_COLOR)