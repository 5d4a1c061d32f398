"""Gear joint: binds the coordinates of two revolute or prismatic joints.

The constraint is ``coordinate1 + ratio * coordinate2 = constant``.

The joints it connects must provide ``type`` (a JointType), ``body_a``,
``body_b``, ``local_anchor_a``, ``local_anchor_b``, ``reference_angle`` and
``index``. Prismatic joints must also provide ``local_x_axis_a``. Bodies must
provide what Joint documents, plus ``is_dynamic`` and ``transform``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, NamedTuple

from rigid2d.distance_joint import LINEAR_SLOP
from rigid2d.joint import Joint, JointDef, JointType
from rigid2d.time_step import SolverData
from rigid2d.vecmath import (
    PI,
    VEC2_ZERO,
    Rot,
    Vec2,
    cross,
    dot,
    is_valid,
    mul,
    mul_t,
    vabs,
)

ANGULAR_SLOP = 2.0 / 180.0 * PI

_GEARABLE = (JointType.REVOLUTE, JointType.PRISMATIC)


@dataclass
class GearJointDef(JointDef):
    """Definition of a gear joint between two existing revolute/prismatic joints."""

    type: JointType = JointType.GEAR
    joint1: Any = None
    joint2: Any = None
    ratio: float = 1.0


class _Rows(NamedTuple):
    jv_ac: Vec2
    jv_bd: Vec2
    jw_a: float
    jw_b: float
    jw_c: float
    jw_d: float
    mass: float
    r_a: Vec2
    r_b: Vec2


class GearJoint(Joint):
    """Couples two joints so their coordinates move together by a ratio.

    Body A is connected to body C through joint1, body B to body D through joint2.
    """

    def __init__(self, definition: GearJointDef) -> None:
        joint1, joint2 = definition.joint1, definition.joint2
        if joint1 is None or joint2 is None:
            raise ValueError("a gear joint needs both joint1 and joint2")
        for joint in (joint1, joint2):
            if joint.type not in _GEARABLE:
                raise ValueError(
                    f"a gear joint connects revolute or prismatic joints, got {joint.type}"
                )
        super().__init__(definition)

        self._joint1 = joint1
        self._joint2 = joint2
        self._type_a = joint1.type
        self._type_b = joint2.type

        self.body_c = joint1.body_a
        self.body_a = joint1.body_b
        if not self.body_a.is_dynamic:
            raise ValueError("body B of joint1 must be dynamic")

        xf_a = self.body_a.transform
        xf_c = self.body_c.transform
        a_a = self.body_a.sweep.a
        a_c = self.body_c.sweep.a

        self._local_anchor_c = joint1.local_anchor_a
        self._local_anchor_a = joint1.local_anchor_b
        self._reference_angle_a = joint1.reference_angle
        if self._type_a is JointType.REVOLUTE:
            self._local_axis_c = VEC2_ZERO
            coordinate_a = a_a - a_c - self._reference_angle_a
            # Position error is measured in radians.
            self._tolerance = ANGULAR_SLOP
        else:
            self._local_axis_c = joint1.local_x_axis_a
            p_c = self._local_anchor_c
            p_a = mul_t(xf_c.q, mul(xf_a.q, self._local_anchor_a) + (xf_a.p - xf_c.p))
            coordinate_a = dot(p_a - p_c, self._local_axis_c)
            # Position error is measured in meters.
            self._tolerance = LINEAR_SLOP

        self.body_d = joint2.body_a
        self.body_b = joint2.body_b
        if not self.body_b.is_dynamic:
            raise ValueError("body B of joint2 must be dynamic")

        xf_b = self.body_b.transform
        xf_d = self.body_d.transform
        a_b = self.body_b.sweep.a
        a_d = self.body_d.sweep.a

        self._local_anchor_d = joint2.local_anchor_a
        self._local_anchor_b = joint2.local_anchor_b
        self._reference_angle_b = joint2.reference_angle
        if self._type_b is JointType.REVOLUTE:
            self._local_axis_d = VEC2_ZERO
            coordinate_b = a_b - a_d - self._reference_angle_b
        else:
            self._local_axis_d = joint2.local_x_axis_a
            p_d = self._local_anchor_d
            p_b = mul_t(xf_d.q, mul(xf_b.q, self._local_anchor_b) + (xf_b.p - xf_d.p))
            coordinate_b = dot(p_b - p_d, self._local_axis_d)

        self._ratio = definition.ratio
        self._constant = coordinate_a + self._ratio * coordinate_b
        self._impulse = 0.0

        self._indices = (0, 0, 0, 0)
        self._lc = (VEC2_ZERO,) * 4
        self._m = (0.0,) * 4
        self._i = (0.0,) * 4
        self._jv_ac = VEC2_ZERO
        self._jv_bd = VEC2_ZERO
        self._jw_a = self._jw_b = self._jw_c = self._jw_d = 0.0
        self._mass = 0.0

    @property
    def joint1(self) -> Any:
        return self._joint1

    @property
    def joint2(self) -> Any:
        return self._joint2

    @property
    def ratio(self) -> float:
        return self._ratio

    @ratio.setter
    def ratio(self, ratio: float) -> None:
        if not is_valid(ratio):
            raise ValueError(f"ratio must be finite, got {ratio!r}")
        self._ratio = ratio

    def anchor_a(self) -> Vec2:
        return self.body_a.world_point(self._local_anchor_a)

    def anchor_b(self) -> Vec2:
        return self.body_b.world_point(self._local_anchor_b)

    def reaction_force(self, inv_dt: float) -> Vec2:
        return inv_dt * (self._impulse * self._jv_ac)

    def reaction_torque(self, inv_dt: float) -> float:
        return inv_dt * (self._impulse * self._jw_a)

    def _rows(self, q_a: Rot, q_b: Rot, q_c: Rot, q_d: Rot) -> _Rows:
        lc_a, lc_b, lc_c, lc_d = self._lc
        m_a, m_b, m_c, m_d = self._m
        i_a, i_b, i_c, i_d = self._i
        ratio = self._ratio

        if self._type_a is JointType.REVOLUTE:
            jv_ac = VEC2_ZERO
            jw_a = jw_c = 1.0
            mass = i_a + i_c
            r_a = VEC2_ZERO
        else:
            u = mul(q_c, self._local_axis_c)
            r_c = mul(q_c, self._local_anchor_c - lc_c)
            r_a = mul(q_a, self._local_anchor_a - lc_a)
            jv_ac = u
            jw_c = cross(r_c, u)
            jw_a = cross(r_a, u)
            mass = m_c + m_a + i_c * jw_c * jw_c + i_a * jw_a * jw_a

        if self._type_b is JointType.REVOLUTE:
            jv_bd = VEC2_ZERO
            jw_b = jw_d = ratio
            mass += ratio * ratio * (i_b + i_d)
            r_b = VEC2_ZERO
        else:
            u = mul(q_d, self._local_axis_d)
            r_d = mul(q_d, self._local_anchor_d - lc_d)
            r_b = mul(q_b, self._local_anchor_b - lc_b)
            jv_bd = ratio * u
            jw_d = ratio * cross(r_d, u)
            jw_b = ratio * cross(r_b, u)
            mass += (
                ratio * ratio * (m_d + m_b) + i_d * jw_d * jw_d + i_b * jw_b * jw_b
            )

        return _Rows(jv_ac, jv_bd, jw_a, jw_b, jw_c, jw_d, mass, r_a, r_b)

    def _apply_velocity(self, data: SolverData, impulse: float) -> None:
        idx_a, idx_b, idx_c, idx_d = self._indices
        m_a, m_b, m_c, m_d = self._m
        i_a, i_b, i_c, i_d = self._i
        vel_a = data.velocities[idx_a]
        vel_b = data.velocities[idx_b]
        vel_c = data.velocities[idx_c]
        vel_d = data.velocities[idx_d]

        vel_a.v = vel_a.v + (m_a * impulse) * self._jv_ac
        vel_a.w += i_a * impulse * self._jw_a
        vel_b.v = vel_b.v + (m_b * impulse) * self._jv_bd
        vel_b.w += i_b * impulse * self._jw_b
        vel_c.v = vel_c.v - (m_c * impulse) * self._jv_ac
        vel_c.w -= i_c * impulse * self._jw_c
        vel_d.v = vel_d.v - (m_d * impulse) * self._jv_bd
        vel_d.w -= i_d * impulse * self._jw_d

    def init_velocity_constraints(self, data: SolverData) -> None:
        bodies = (self.body_a, self.body_b, self.body_c, self.body_d)
        self._indices = tuple(body.island_index for body in bodies)
        self._lc = tuple(body.sweep.local_center for body in bodies)
        self._m = tuple(body.inv_mass for body in bodies)
        self._i = tuple(body.inv_i for body in bodies)

        q_a, q_b, q_c, q_d = (
            Rot.from_angle(data.positions[index].a) for index in self._indices
        )
        rows = self._rows(q_a, q_b, q_c, q_d)
        self._jv_ac, self._jv_bd = rows.jv_ac, rows.jv_bd
        self._jw_a, self._jw_b = rows.jw_a, rows.jw_b
        self._jw_c, self._jw_d = rows.jw_c, rows.jw_d
        self._mass = 1.0 / rows.mass if rows.mass > 0.0 else 0.0

        if data.step.warm_starting:
            self._apply_velocity(data, self._impulse)
        else:
            self._impulse = 0.0

    def solve_velocity_constraints(self, data: SolverData) -> None:
        idx_a, idx_b, idx_c, idx_d = self._indices
        vel_a = data.velocities[idx_a]
        vel_b = data.velocities[idx_b]
        vel_c = data.velocities[idx_c]
        vel_d = data.velocities[idx_d]

        cdot = dot(self._jv_ac, vel_a.v - vel_c.v) + dot(
            self._jv_bd, vel_b.v - vel_d.v
        )
        cdot += (self._jw_a * vel_a.w - self._jw_c * vel_c.w) + (
            self._jw_b * vel_b.w - self._jw_d * vel_d.w
        )

        impulse = -self._mass * cdot
        self._impulse += impulse
        self._apply_velocity(data, impulse)

    def solve_position_constraints(self, data: SolverData) -> bool:
        idx_a, idx_b, idx_c, idx_d = self._indices
        pos_a = data.positions[idx_a]
        pos_b = data.positions[idx_b]
        pos_c = data.positions[idx_c]
        pos_d = data.positions[idx_d]
        lc_a, lc_b, lc_c, lc_d = self._lc
        m_a, m_b, m_c, m_d = self._m
        i_a, i_b, i_c, i_d = self._i

        q_a = Rot.from_angle(pos_a.a)
        q_b = Rot.from_angle(pos_b.a)
        q_c = Rot.from_angle(pos_c.a)
        q_d = Rot.from_angle(pos_d.a)
        rows = self._rows(q_a, q_b, q_c, q_d)

        if self._type_a is JointType.REVOLUTE:
            coordinate_a = pos_a.a - pos_c.a - self._reference_angle_a
        else:
            p_c = self._local_anchor_c - lc_c
            p_a = mul_t(q_c, rows.r_a + (pos_a.c - pos_c.c))
            coordinate_a = dot(p_a - p_c, self._local_axis_c)

        if self._type_b is JointType.REVOLUTE:
            coordinate_b = pos_b.a - pos_d.a - self._reference_angle_b
        else:
            p_d = self._local_anchor_d - lc_d
            p_b = mul_t(q_d, rows.r_b + (pos_b.c - pos_d.c))
            coordinate_b = dot(p_b - p_d, self._local_axis_d)

        c = (coordinate_a + self._ratio * coordinate_b) - self._constant

        impulse = -c / rows.mass if rows.mass > 0.0 else 0.0

        pos_a.c = pos_a.c + (m_a * impulse) * rows.jv_ac
        pos_a.a += i_a * impulse * rows.jw_a
        pos_b.c = pos_b.c + (m_b * impulse) * rows.jv_bd
        pos_b.a += i_b * impulse * rows.jw_b
        pos_c.c = pos_c.c - (m_c * impulse) * rows.jv_ac
        pos_c.a -= i_c * impulse * rows.jw_c
        pos_d.c = pos_d.c - (m_d * impulse) * rows.jv_bd
        pos_d.a -= i_d * impulse * rows.jw_d

        return vabs(c) < self._tolerance

    def dump(self) -> str:
        lines = [
            "  jd = GearJointDef()",
            f"  jd.body_a = bodies[{self.body_a.island_index}]",
            f"  jd.body_b = bodies[{self.body_b.island_index}]",
            f"  jd.collide_connected = {bool(self.collide_connected)}",
            f"  jd.joint1 = joints[{self._joint1.index}]",
            f"  jd.joint2 = joints[{self._joint2.index}]",
            "  jd.ratio = %.9g" % self._ratio,
            f"  joints[{self.index}] = world.create_joint(jd)",
        ]
        return "\n".join(lines) + "\n"