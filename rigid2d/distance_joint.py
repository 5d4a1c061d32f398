"""Distance joint: keeps two anchor points at a fixed, limited or springy distance."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from rigid2d.joint import Joint, JointDef, JointType
from rigid2d.time_step import SolverData
from rigid2d.vecmath import (
    VEC2_ZERO,
    Rot,
    Vec2,
    clamp,
    cross,
    dot,
    mul,
    vabs,
    vmax,
)

LINEAR_SLOP = 0.005
MAX_FLOAT = 3.4028234663852886e38

_REST_COLOR = (0.7, 0.7, 0.7, 1.0)
_MIN_COLOR = (0.3, 0.9, 0.3, 1.0)
_MAX_COLOR = (0.9, 0.3, 0.3, 1.0)
_LINE_COLOR = (0.4, 0.4, 0.4, 1.0)


@dataclass
class DistanceJointDef(JointDef):
    """Definition of a distance joint."""

    type: JointType = JointType.DISTANCE
    local_anchor_a: Vec2 = field(default_factory=Vec2)
    local_anchor_b: Vec2 = field(default_factory=Vec2)
    length: float = 1.0
    min_length: float = 0.0
    max_length: float = MAX_FLOAT
    stiffness: float = 0.0
    damping: float = 0.0

    def initialize(
        self, body_a: Any, body_b: Any, anchor_a: Vec2, anchor_b: Vec2
    ) -> None:
        """Set bodies and anchors from world points; all lengths become the current one."""
        self.body_a = body_a
        self.body_b = body_b
        self.local_anchor_a = body_a.local_point(anchor_a)
        self.local_anchor_b = body_b.local_point(anchor_b)
        self.length = vmax((anchor_b - anchor_a).length(), LINEAR_SLOP)
        self.min_length = self.length
        self.max_length = self.length


class DistanceJoint(Joint):
    """Holds the anchors apart at a rest length, optionally as a spring within limits."""

    def __init__(self, definition: DistanceJointDef) -> None:
        super().__init__(definition)
        self.local_anchor_a = definition.local_anchor_a
        self.local_anchor_b = definition.local_anchor_b
        self._length = vmax(definition.length, LINEAR_SLOP)
        self._min_length = vmax(definition.min_length, LINEAR_SLOP)
        self._max_length = vmax(definition.max_length, self._min_length)
        self.stiffness = definition.stiffness
        self.damping = definition.damping

        self._gamma = 0.0
        self._bias = 0.0
        self._impulse = 0.0
        self._lower_impulse = 0.0
        self._upper_impulse = 0.0
        self._current_length = 0.0

        self._index_a = 0
        self._index_b = 0
        self._u = VEC2_ZERO
        self._r_a = VEC2_ZERO
        self._r_b = VEC2_ZERO
        self._local_center_a = VEC2_ZERO
        self._local_center_b = VEC2_ZERO
        self._inv_mass_a = 0.0
        self._inv_mass_b = 0.0
        self._inv_i_a = 0.0
        self._inv_i_b = 0.0
        self._soft_mass = 0.0
        self._mass = 0.0

    @property
    def length(self) -> float:
        return self._length

    @property
    def min_length(self) -> float:
        return self._min_length

    @property
    def max_length(self) -> float:
        return self._max_length

    def set_length(self, length: float) -> float:
        """Set the rest length (at least the linear slop) and return it."""
        self._impulse = 0.0
        self._length = vmax(LINEAR_SLOP, length)
        return self._length

    def set_min_length(self, min_length: float) -> float:
        """Set the minimum length, clamped to [slop, max_length], and return it."""
        self._lower_impulse = 0.0
        self._min_length = clamp(min_length, LINEAR_SLOP, self._max_length)
        return self._min_length

    def set_max_length(self, max_length: float) -> float:
        """Set the maximum length (at least min_length) and return it."""
        self._upper_impulse = 0.0
        self._max_length = vmax(max_length, self._min_length)
        return self._max_length

    def current_length(self) -> float:
        p_a = self.body_a.world_point(self.local_anchor_a)
        p_b = self.body_b.world_point(self.local_anchor_b)
        return (p_b - p_a).length()

    def anchor_a(self) -> Vec2:
        return self.body_a.world_point(self.local_anchor_a)

    def anchor_b(self) -> Vec2:
        return self.body_b.world_point(self.local_anchor_b)

    def reaction_force(self, inv_dt: float) -> Vec2:
        total = self._impulse + self._lower_impulse - self._upper_impulse
        return (inv_dt * total) * self._u

    def reaction_torque(self, inv_dt: float) -> float:
        return 0.0

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
        self._r_a = mul(q_a, self.local_anchor_a - self._local_center_a)
        self._r_b = mul(q_b, self.local_anchor_b - self._local_center_b)
        u = pos_b.c + self._r_b - pos_a.c - self._r_a

        # Handle singularity.
        self._current_length = u.length()
        if self._current_length > LINEAR_SLOP:
            u = (1.0 / self._current_length) * u
        else:
            u = VEC2_ZERO
            self._mass = 0.0
            self._impulse = 0.0
            self._lower_impulse = 0.0
            self._upper_impulse = 0.0
        self._u = u

        cr_au = cross(self._r_a, u)
        cr_bu = cross(self._r_b, u)
        inv_mass = (
            self._inv_mass_a
            + self._inv_i_a * cr_au * cr_au
            + self._inv_mass_b
            + self._inv_i_b * cr_bu * cr_bu
        )
        self._mass = 1.0 / inv_mass if inv_mass != 0.0 else 0.0

        if self.stiffness > 0.0 and self._min_length < self._max_length:
            c = self._current_length - self._length
            d = self.damping
            k = self.stiffness
            h = data.step.dt

            # The extra factor of h is there because lambda is an impulse.
            gamma = h * (d + h * k)
            self._gamma = 1.0 / gamma if gamma != 0.0 else 0.0
            self._bias = c * h * k * self._gamma

            inv_mass += self._gamma
            self._soft_mass = 1.0 / inv_mass if inv_mass != 0.0 else 0.0
        else:
            self._gamma = 0.0
            self._bias = 0.0
            self._soft_mass = self._mass

        if data.step.warm_starting:
            ratio = data.step.dt_ratio
            self._impulse *= ratio
            self._lower_impulse *= ratio
            self._upper_impulse *= ratio

            p = (self._impulse + self._lower_impulse - self._upper_impulse) * u
            v_a = v_a - self._inv_mass_a * p
            w_a -= self._inv_i_a * cross(self._r_a, p)
            v_b = v_b + self._inv_mass_b * p
            w_b += self._inv_i_b * cross(self._r_b, p)
        else:
            self._impulse = 0.0

        vel_a.v, vel_a.w = v_a, w_a
        vel_b.v, vel_b.w = v_b, w_b

    def solve_velocity_constraints(self, data: SolverData) -> None:
        vel_a = data.velocities[self._index_a]
        vel_b = data.velocities[self._index_b]
        v_a, w_a = vel_a.v, vel_a.w
        v_b, w_b = vel_b.v, vel_b.w

        m_a, m_b = self._inv_mass_a, self._inv_mass_b
        i_a, i_b = self._inv_i_a, self._inv_i_b
        r_a, r_b, u = self._r_a, self._r_b, self._u

        def relative_speed() -> float:
            vp_a = v_a + cross(w_a, r_a)
            vp_b = v_b + cross(w_b, r_b)
            return dot(u, vp_b - vp_a)

        def apply(p: Vec2) -> None:
            nonlocal v_a, w_a, v_b, w_b
            v_a = v_a - m_a * p
            w_a -= i_a * cross(r_a, p)
            v_b = v_b + m_b * p
            w_b += i_b * cross(r_b, p)

        if self._min_length < self._max_length:
            if self.stiffness > 0.0:
                cdot = relative_speed()
                impulse = -self._soft_mass * (
                    cdot + self._bias + self._gamma * self._impulse
                )
                self._impulse += impulse
                apply(impulse * u)

            # Lower limit.
            c = self._current_length - self._min_length
            bias = vmax(0.0, c) * data.step.inv_dt
            cdot = relative_speed()
            impulse = -self._mass * (cdot + bias)
            old_impulse = self._lower_impulse
            self._lower_impulse = vmax(0.0, self._lower_impulse + impulse)
            impulse = self._lower_impulse - old_impulse
            apply(impulse * u)

            # Upper limit.
            c = self._max_length - self._current_length
            bias = vmax(0.0, c) * data.step.inv_dt
            cdot = -relative_speed()
            impulse = -self._mass * (cdot + bias)
            old_impulse = self._upper_impulse
            self._upper_impulse = vmax(0.0, self._upper_impulse + impulse)
            impulse = self._upper_impulse - old_impulse
            apply(-impulse * u)
        else:
            # Equal limits.
            cdot = relative_speed()
            impulse = -self._mass * cdot
            self._impulse += impulse
            apply(impulse * u)

        vel_a.v, vel_a.w = v_a, w_a
        vel_b.v, vel_b.w = v_b, w_b

    def solve_position_constraints(self, data: SolverData) -> bool:
        pos_a = data.positions[self._index_a]
        pos_b = data.positions[self._index_b]
        c_a, a_a = pos_a.c, pos_a.a
        c_b, a_b = pos_b.c, pos_b.a

        q_a = Rot.from_angle(a_a)
        q_b = Rot.from_angle(a_b)
        r_a = mul(q_a, self.local_anchor_a - self._local_center_a)
        r_b = mul(q_b, self.local_anchor_b - self._local_center_b)
        u, length = (c_b + r_b - c_a - r_a).normalized()

        if self._min_length == self._max_length or length < self._min_length:
            c = length - self._min_length
        elif self._max_length < length:
            c = length - self._max_length
        else:
            return True

        impulse = -self._mass * c
        p = impulse * u

        pos_a.c = c_a - self._inv_mass_a * p
        pos_a.a = a_a - self._inv_i_a * cross(r_a, p)
        pos_b.c = c_b + self._inv_mass_b * p
        pos_b.a = a_b + self._inv_i_b * cross(r_b, p)

        return vabs(c) < LINEAR_SLOP

    def dump(self) -> str:
        lines = [
            "  jd = DistanceJointDef()",
            f"  jd.body_a = bodies[{self.body_a.island_index}]",
            f"  jd.body_b = bodies[{self.body_b.island_index}]",
            f"  jd.collide_connected = {bool(self.collide_connected)}",
            "  jd.local_anchor_a = Vec2(%.9g, %.9g)"
            % (self.local_anchor_a.x, self.local_anchor_a.y),
            "  jd.local_anchor_b = Vec2(%.9g, %.9g)"
            % (self.local_anchor_b.x, self.local_anchor_b.y),
            "  jd.length = %.9g" % self._length,
            "  jd.min_length = %.9g" % self._min_length,
            "  jd.max_length = %.9g" % self._max_length,
            "  jd.stiffness = %.9g" % self.stiffness,
            "  jd.damping = %.9g" % self.damping,
            f"  joints[{self.index}] = world.create_joint(jd)",
        ]
        return "\n".join(lines) + "\n"

    def draw(self, drawer: Any) -> None:
        p_a = mul(self.body_a.transform, self.local_anchor_a)
        p_b = mul(self.body_b.transform, self.local_anchor_b)
        axis, _ = (p_b - p_a).normalized()

        drawer.draw_segment(p_a, p_b, _LINE_COLOR)
        drawer.draw_point(p_a + self._length * axis, 8.0, _REST_COLOR)

        if self._min_length != self._max_length:
            if self._min_length > LINEAR_SLOP:
                drawer.draw_point(p_a + self._min_length * axis, 4.0, _MIN_COLOR)
            if self._max_length < MAX_FLOAT:
                drawer.draw_point(p_a + self._max_length * axis, 4.0, _MAX_COLOR)