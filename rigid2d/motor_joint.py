"""Motor joint: drives body B towards a target offset relative to body A."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

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
class MotorJointDef(JointDef):
    """Definition of a motor joint."""

    type: JointType = JointType.MOTOR
    linear_offset: Vec2 = field(default_factory=Vec2)
    angular_offset: float = 0.0
    max_force: float = 1.0
    max_torque: float = 1.0
    correction_factor: float = 0.3

    def initialize(self, body_a: Any, body_b: Any) -> None:
        """Set the bodies and take the offsets from their current placement."""
        self.body_a = body_a
        self.body_b = body_b
        self.linear_offset = body_a.local_point(body_b.position)
        self.angular_offset = body_b.angle - body_a.angle


def _check_limit(value: float, name: str) -> float:
    if not is_valid(value) or value < 0.0:
        raise ValueError(f"{name} must be a finite non-negative number, got {value!r}")
    return value


class MotorJoint(Joint):
    """Controls relative motion with force and torque limited corrections."""

    def __init__(self, definition: MotorJointDef) -> None:
        super().__init__(definition)
        self._linear_offset = definition.linear_offset
        self._angular_offset = definition.angular_offset
        self._max_force = definition.max_force
        self._max_torque = definition.max_torque
        self._correction_factor = definition.correction_factor

        self._linear_impulse = VEC2_ZERO
        self._angular_impulse = 0.0

        self._index_a = 0
        self._index_b = 0
        self._r_a = VEC2_ZERO
        self._r_b = VEC2_ZERO
        self._local_center_a = VEC2_ZERO
        self._local_center_b = VEC2_ZERO
        self._linear_error = VEC2_ZERO
        self._angular_error = 0.0
        self._inv_mass_a = 0.0
        self._inv_mass_b = 0.0
        self._inv_i_a = 0.0
        self._inv_i_b = 0.0
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

    @property
    def correction_factor(self) -> float:
        return self._correction_factor

    @correction_factor.setter
    def correction_factor(self, factor: float) -> None:
        if not is_valid(factor) or not 0.0 <= factor <= 1.0:
            raise ValueError(f"correction_factor must lie in [0, 1], got {factor!r}")
        self._correction_factor = factor

    @property
    def linear_offset(self) -> Vec2:
        return self._linear_offset

    @linear_offset.setter
    def linear_offset(self, offset: Vec2) -> None:
        if offset.x != self._linear_offset.x or offset.y != self._linear_offset.y:
            self.body_a.awake = True
            self.body_b.awake = True
            self._linear_offset = offset

    @property
    def angular_offset(self) -> float:
        return self._angular_offset

    @angular_offset.setter
    def angular_offset(self, offset: float) -> None:
        if offset != self._angular_offset:
            self.body_a.awake = True
            self.body_b.awake = True
            self._angular_offset = offset

    def anchor_a(self) -> Vec2:
        return self.body_a.position

    def anchor_b(self) -> Vec2:
        return self.body_b.position

    def reaction_force(self, inv_dt: float) -> Vec2:
        return inv_dt * self._linear_impulse

    def reaction_torque(self, inv_dt: float) -> float:
        return inv_dt * self._angular_impulse

    def init_velocity_constraints(self, data: SolverData) -> None:
        body_a, body_b = self.body_a, self.body_b
        self._index_a = body_a.island_index
        self._index_b = body_b.island_index
        self._local_center_a = body_a.sweep.local_center
        self._local_center_b = body_b.sweep.local_center
        self._inv_mass_a = body_a.inv_mass
        self._inv_mass_b = body_b.inv_mass
        self._inv_i_a = body_a.inv_i
        self._inv_i_b = body_b.inv_i

        pos_a = data.positions[self._index_a]
        pos_b = data.positions[self._index_b]
        vel_a = data.velocities[self._index_a]
        vel_b = data.velocities[self._index_b]
        v_a, w_a = vel_a.v, vel_a.w
        v_b, w_b = vel_b.v, vel_b.w

        q_a = Rot.from_angle(pos_a.a)
        q_b = Rot.from_angle(pos_b.a)
        self._r_a = mul(q_a, self._linear_offset - self._local_center_a)
        self._r_b = mul(q_b, -self._local_center_b)
        r_a, r_b = self._r_a, self._r_b

        m_a, m_b = self._inv_mass_a, self._inv_mass_b
        i_a, i_b = self._inv_i_a, self._inv_i_b

        # Upper 2-by-2 of the point to point effective mass.
        k11 = m_a + m_b + i_a * r_a.y * r_a.y + i_b * r_b.y * r_b.y
        k21 = -i_a * r_a.x * r_a.y - i_b * r_b.x * r_b.y
        k22 = m_a + m_b + i_a * r_a.x * r_a.x + i_b * r_b.x * r_b.x
        self._linear_mass = Mat22(Vec2(k11, k21), Vec2(k21, k22)).inverse()

        self._angular_mass = i_a + i_b
        if self._angular_mass > 0.0:
            self._angular_mass = 1.0 / self._angular_mass

        self._linear_error = pos_b.c + r_b - pos_a.c - r_a
        self._angular_error = pos_b.a - pos_a.a - self._angular_offset

        if data.step.warm_starting:
            self._linear_impulse = data.step.dt_ratio * self._linear_impulse
            self._angular_impulse *= data.step.dt_ratio

            p = self._linear_impulse
            v_a = v_a - m_a * p
            w_a -= i_a * (cross(r_a, p) + self._angular_impulse)
            v_b = v_b + m_b * p
            w_b += i_b * (cross(r_b, p) + self._angular_impulse)
        else:
            self._linear_impulse = VEC2_ZERO
            self._angular_impulse = 0.0

        vel_a.v, vel_a.w = v_a, w_a
        vel_b.v, vel_b.w = v_b, w_b

    def solve_velocity_constraints(self, data: SolverData) -> None:
        vel_a = data.velocities[self._index_a]
        vel_b = data.velocities[self._index_b]
        v_a, w_a = vel_a.v, vel_a.w
        v_b, w_b = vel_b.v, vel_b.w

        m_a, m_b = self._inv_mass_a, self._inv_mass_b
        i_a, i_b = self._inv_i_a, self._inv_i_b
        r_a, r_b = self._r_a, self._r_b

        h = data.step.dt
        inv_h = data.step.inv_dt
        factor = self._correction_factor

        # Angular correction.
        cdot = w_b - w_a + inv_h * factor * self._angular_error
        impulse = -self._angular_mass * cdot
        old_impulse = self._angular_impulse
        max_impulse = h * self._max_torque
        self._angular_impulse = clamp(
            self._angular_impulse + impulse, -max_impulse, max_impulse
        )
        impulse = self._angular_impulse - old_impulse
        w_a -= i_a * impulse
        w_b += i_b * impulse

        # Linear correction.
        cdot_v = (
            v_b
            + cross(w_b, r_b)
            - v_a
            - cross(w_a, r_a)
            + (inv_h * factor) * self._linear_error
        )
        linear = -mul(self._linear_mass, cdot_v)
        old_linear = self._linear_impulse
        self._linear_impulse = self._linear_impulse + linear

        max_impulse = h * self._max_force
        if self._linear_impulse.length_squared() > max_impulse * max_impulse:
            direction, _ = self._linear_impulse.normalized()
            self._linear_impulse = max_impulse * direction

        linear = self._linear_impulse - old_linear
        v_a = v_a - m_a * linear
        w_a -= i_a * cross(r_a, linear)
        v_b = v_b + m_b * linear
        w_b += i_b * cross(r_b, linear)

        vel_a.v, vel_a.w = v_a, w_a
        vel_b.v, vel_b.w = v_b, w_b

    def solve_position_constraints(self, data: SolverData) -> bool:
        return True

    def dump(self) -> str:
        lines = [
            "  jd = MotorJointDef()",
            f"  jd.body_a = bodies[{self.body_a.island_index}]",
            f"  jd.body_b = bodies[{self.body_b.island_index}]",
            f"  jd.collide_connected = {bool(self.collide_connected)}",
            "  jd.linear_offset = Vec2(%.9g, %.9g)"
            % (self._linear_offset.x, self._linear_offset.y),
            "  jd.angular_offset = %.9g" % self._angular_offset,
            "  jd.max_force = %.9g" % self._max_force,
            "  jd.max_torque = %.9g" % self._max_torque,
            "  jd.correction_factor = %.9g" % self._correction_factor,
            f"  joints[{self.index}] = world.create_joint(jd)",
        ]
        return "\n".join(lines) + "\n"