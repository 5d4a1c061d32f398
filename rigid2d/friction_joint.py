"""Friction joint: resists relative linear and angular motion up to set limits."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, NamedTuple

from rigid2d.joint import Joint, JointDef, JointType
from rigid2d.time_step import SolverData
from rigid2d.vecmath import (
    VEC2_ZERO,
    Mat22,
    Rot,
    Vec2,
    clamp,
    cross,
    is_valid,
    mul,
)


@dataclass
class FrictionJointDef(JointDef):
    """Definition of a friction joint."""

    type: JointType = JointType.FRICTION
    local_anchor_a: Vec2 = field(default_factory=Vec2)
    local_anchor_b: Vec2 = field(default_factory=Vec2)
    max_force: float = 0.0
    max_torque: float = 0.0

    def initialize(self, body_a: Any, body_b: Any, anchor: Vec2) -> None:
        """Set the bodies and the anchors from one world anchor point."""
        self.body_a = body_a
        self.body_b = body_b
        self.local_anchor_a = body_a.local_point(anchor)
        self.local_anchor_b = body_b.local_point(anchor)


class _MassData(NamedTuple):
    """Per-body values captured when the solver starts."""

    index: int
    local_center: Vec2
    inv_mass: float
    inv_i: float

    @classmethod
    def capture(cls, body: Any) -> "_MassData":
        return cls(body.island_index, body.sweep.local_center, body.inv_mass, body.inv_i)


_EMPTY = _MassData(0, VEC2_ZERO, 0.0, 0.0)


def _check_limit(value: float, name: str) -> float:
    if not is_valid(value) or value < 0.0:
        raise ValueError(f"{name} must be a finite non-negative number, got {value!r}")
    return value


class FrictionJoint(Joint):
    """Top-down friction: a force and torque limited coupling between two bodies."""

    def __init__(self, definition: FrictionJointDef) -> None:
        super().__init__(definition)
        self.local_anchor_a = definition.local_anchor_a
        self.local_anchor_b = definition.local_anchor_b
        self._max_force = definition.max_force
        self._max_torque = definition.max_torque

        self._linear_impulse = VEC2_ZERO
        self._angular_impulse = 0.0

        self._mass_a = self._mass_b = _EMPTY
        self._r_a = self._r_b = VEC2_ZERO
        self._linear_mass = Mat22()
        self._angular_mass = 0.0

    @property
    def max_force(self) -> float:
        return self._max_force

    @max_force.setter
    def max_force(self, force: float) -> None:
        self._max_force = _check_limit(force, "max_force")

    @property
    def max_torque(self) -> float:
        return self._max_torque

    @max_torque.setter
    def max_torque(self, torque: float) -> None:
        self._max_torque = _check_limit(torque, "max_torque")

    def anchor_a(self) -> Vec2:
        return self.body_a.world_point(self.local_anchor_a)

    def anchor_b(self) -> Vec2:
        return self.body_b.world_point(self.local_anchor_b)

    def reaction_force(self, inv_dt: float) -> Vec2:
        return inv_dt * self._linear_impulse

    def reaction_torque(self, inv_dt: float) -> float:
        return inv_dt * self._angular_impulse

    def _apply(self, data: SolverData, linear: Vec2, angular: float) -> None:
        """Push the two bodies apart by an equal and opposite impulse."""
        for mass, arm, sign in ((self._mass_a, self._r_a, -1.0), (self._mass_b, self._r_b, 1.0)):
            state = data.velocities[mass.index]
            state.v = state.v + (sign * mass.inv_mass) * linear
            state.w += sign * mass.inv_i * (cross(arm, linear) + angular)

    def init_velocity_constraints(self, data: SolverData) -> None:
        a = self._mass_a = _MassData.capture(self.body_a)
        b = self._mass_b = _MassData.capture(self.body_b)

        q_a = Rot.from_angle(data.positions[a.index].a)
        q_b = Rot.from_angle(data.positions[b.index].a)
        r_a = self._r_a = mul(q_a, self.local_anchor_a - a.local_center)
        r_b = self._r_b = mul(q_b, self.local_anchor_b - b.local_center)

        total_mass = a.inv_mass + b.inv_mass
        k11 = total_mass + a.inv_i * r_a.y * r_a.y + b.inv_i * r_b.y * r_b.y
        k21 = -a.inv_i * r_a.x * r_a.y - b.inv_i * r_b.x * r_b.y
        k22 = total_mass + a.inv_i * r_a.x * r_a.x + b.inv_i * r_b.x * r_b.x
        self._linear_mass = Mat22(Vec2(k11, k21), Vec2(k21, k22)).inverse()

        angular_inv = a.inv_i + b.inv_i
        self._angular_mass = 1.0 / angular_inv if angular_inv > 0.0 else angular_inv

        step = data.step
        if step.warm_starting:
            self._linear_impulse = step.dt_ratio * self._linear_impulse
            self._angular_impulse *= step.dt_ratio
            self._apply(data, self._linear_impulse, self._angular_impulse)
        else:
            self._linear_impulse = VEC2_ZERO
            self._angular_impulse = 0.0

    def solve_velocity_constraints(self, data: SolverData) -> None:
        h = data.step.dt
        state_a = data.velocities[self._mass_a.index]
        state_b = data.velocities[self._mass_b.index]

        # Angular friction.
        previous = self._angular_impulse
        limit = h * self._max_torque
        self._angular_impulse = clamp(
            previous - self._angular_mass * (state_b.w - state_a.w), -limit, limit
        )
        self._apply(data, VEC2_ZERO, self._angular_impulse - previous)

        # Linear friction.
        relative = (
            state_b.v + cross(state_b.w, self._r_b) - state_a.v - cross(state_a.w, self._r_a)
        )
        previous_linear = self._linear_impulse
        accumulated = previous_linear - mul(self._linear_mass, relative)
        limit = h * self._max_force
        if accumulated.length_squared() > limit * limit:
            direction, _ = accumulated.normalized()
            accumulated = limit * direction
        self._linear_impulse = accumulated
        self._apply(data, accumulated - previous_linear, 0.0)

    def solve_position_constraints(self, data: SolverData) -> bool:
        return True

    def dump(self) -> str:
        anchor_a, anchor_b = self.local_anchor_a, self.local_anchor_b
        lines = [
            "  jd = FrictionJointDef()",
            f"  jd.body_a = bodies[{self.body_a.island_index}]",
            f"  jd.body_b = bodies[{self.body_b.island_index}]",
            f"  jd.collide_connected = {bool(self.collide_connected)}",
            "  jd.local_anchor_a = Vec2(%.9g, %.9g)" % (anchor_a.x, anchor_a.y),
            "  jd.local_anchor_b = Vec2(%.9g, %.9g)" % (anchor_b.x, anchor_b.y),
            "  jd.max_force = %.9g" % self._max_force,
            "  jd.max_torque = %.9g" % self._max_torque,
            f"  joints[{self.index}] = world.create_joint(jd)",
        ]
        return "\n".join(lines) + "\n"