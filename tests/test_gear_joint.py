from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any

import pytest

from rigid2d.gear_joint import GearJoint, GearJointDef
from rigid2d.joint import JointType
from rigid2d.time_step import Position, SolverData, TimeStep, Velocity
from rigid2d.vecmath import Rot, Sweep, Transform, Vec2, mul


@dataclass
class FakeBody:
    island_index: int
    sweep: Sweep
    inv_mass: float
    inv_i: float
    is_dynamic: bool = True

    @property
    def transform(self) -> Transform:
        q = Rot.from_angle(self.sweep.a)
        return Transform(self.sweep.c - mul(q, self.sweep.local_center), q)

    def world_point(self, local: Vec2) -> Vec2:
        return mul(self.transform, local)


@dataclass
class FakeJoint:
    type: JointType
    body_a: Any
    body_b: Any
    index: int = 0
    reference_angle: float = 0.0
    local_anchor_a: Vec2 = field(default_factory=Vec2)
    local_anchor_b: Vec2 = field(default_factory=Vec2)
    local_x_axis_a: Vec2 = field(default_factory=lambda: Vec2(1.0, 0.0))


def make_body(index, c=Vec2(), a=0.0, inv_mass=0.0, inv_i=0.0, dynamic=True):
    return FakeBody(index, Sweep(c0=c, c=c, a0=a, a=a), inv_mass, inv_i, dynamic)


def make_data(bodies, warm_starting=True):
    ordered = sorted(bodies, key=lambda b: b.island_index)
    return SolverData(
        step=TimeStep.from_dt(1.0 / 60.0, 8, 3, warm_starting=warm_starting),
        positions=[Position(b.sweep.c, b.sweep.a) for b in ordered],
        velocities=[Velocity() for _ in ordered],
    )


def revolute_pair(ratio=2.0, type_a=JointType.REVOLUTE):
    body_a = make_body(0, a=0.3, inv_mass=1.0, inv_i=1.0)
    body_b = make_body(1, a=-0.2, inv_mass=1.0, inv_i=0.5)
    body_c = make_body(2, dynamic=False)
    body_d = make_body(3, dynamic=False)
    joint1 = FakeJoint(type_a, body_c, body_a, index=3)
    joint2 = FakeJoint(JointType.REVOLUTE, body_d, body_b, index=4)
    definition = GearJointDef(
        body_a=body_a, body_b=body_b, joint1=joint1, joint2=joint2, ratio=ratio
    )
    return GearJoint(definition), (body_a, body_b, body_c, body_d)


def test_position_solved_at_initial_configuration():
    joint, bodies = revolute_pair()
    data = make_data(bodies)
    joint.init_velocity_constraints(data)
    before = [(p.c, p.a) for p in data.positions]
    assert joint.solve_position_constraints(data) is True
    after = [(p.c, p.a) for p in data.positions]
    for (c0, a0), (c1, a1) in zip(before, after):
        assert a1 == pytest.approx(a0)
        assert c1.x == pytest.approx(c0.x)


def test_velocity_solve_enforces_ratio():
    joint, bodies = revolute_pair(ratio=2.0)
    data = make_data(bodies)
    data.velocities[0].w = 1.0
    joint.init_velocity_constraints(data)
    joint.solve_velocity_constraints(data)
    w = [v.w for v in data.velocities]
    assert w[0] - w[2] + 2.0 * (w[1] - w[3]) == pytest.approx(0.0, abs=1e-12)
    assert w[0] < 1.0


def test_reaction_for_revolute_side():
    joint, bodies = revolute_pair()
    data = make_data(bodies)
    data.velocities[0].w = 1.0
    joint.init_velocity_constraints(data)
    joint.solve_velocity_constraints(data)
    assert joint.reaction_force(60.0) == Vec2(0.0, 0.0)
    assert joint.reaction_torque(60.0) < 0.0


def test_no_warm_starting_resets_impulse():
    joint, bodies = revolute_pair()
    data = make_data(bodies)
    data.velocities[0].w = 1.0
    joint.init_velocity_constraints(data)
    joint.solve_velocity_constraints(data)
    cold = make_data(bodies, warm_starting=False)
    joint.init_velocity_constraints(cold)
    assert joint.reaction_torque(60.0) == 0.0
    assert all(v.w == 0.0 for v in cold.velocities)


def test_position_error_corrected():
    joint, bodies = revolute_pair(ratio=2.0)
    data = make_data(bodies)
    joint.init_velocity_constraints(data)
    data.positions[0].a += 0.5
    assert joint.solve_position_constraints(data) is False
    assert joint.solve_position_constraints(data) is True
    a = [p.a for p in data.positions]
    assert (a[0] - 0.3) + 2.0 * (a[1] + 0.2) == pytest.approx(0.0, abs=1e-9)


def test_prismatic_side_velocity_and_position():
    body_a = make_body(0, c=Vec2(2.0, 0.0), inv_mass=1.0, inv_i=1.0)
    body_b = make_body(1, inv_mass=1.0, inv_i=1.0)
    body_c = make_body(2, dynamic=False)
    body_d = make_body(3, dynamic=False)
    joint1 = FakeJoint(JointType.PRISMATIC, body_c, body_a)
    joint2 = FakeJoint(JointType.REVOLUTE, body_d, body_b)
    joint = GearJoint(
        GearJointDef(
            body_a=body_a, body_b=body_b, joint1=joint1, joint2=joint2, ratio=3.0
        )
    )
    data = make_data([body_a, body_b, body_c, body_d])
    data.velocities[0].v = Vec2(1.0, 0.0)
    joint.init_velocity_constraints(data)
    joint.solve_velocity_constraints(data)
    v = data.velocities
    cdot = v[0].v.x - v[2].v.x + 3.0 * (v[1].w - v[3].w)
    assert cdot == pytest.approx(0.0, abs=1e-12)
    assert joint.reaction_torque(60.0) == 0.0

    assert joint.solve_position_constraints(data) is True
    data.positions[0].c = Vec2(2.3, 0.0)
    assert joint.solve_position_constraints(data) is False
    assert joint.solve_position_constraints(data) is True
    p = data.positions
    assert (p[0].c.x - 2.0) + 3.0 * p[1].a == pytest.approx(0.0, abs=1e-9)


def test_anchors_follow_bodies():
    joint, bodies = revolute_pair()
    body_a, body_b = bodies[0], bodies[1]
    assert joint.anchor_a() == body_a.world_point(Vec2())
    assert joint.anchor_b() == body_b.world_point(Vec2())


def test_rejects_unsupported_joint_type():
    with pytest.raises(ValueError):
        revolute_pair(type_a=JointType.DISTANCE)


def test_rejects_static_geared_body():
    body_a = make_body(0, dynamic=False)
    body_b = make_body(1, inv_mass=1.0, inv_i=1.0)
    body_c = make_body(2, dynamic=False)
    body_d = make_body(3, dynamic=False)
    definition = GearJointDef(
        body_a=body_a,
        body_b=body_b,
        joint1=FakeJoint(JointType.REVOLUTE, body_c, body_a),
        joint2=FakeJoint(JointType.REVOLUTE, body_d, body_b),
    )
    with pytest.raises(ValueError):
        GearJoint(definition)


def test_rejects_missing_joint():
    body_a = make_body(0, inv_mass=1.0)
    body_b = make_body(1, inv_mass=1.0)
    with pytest.raises(ValueError):
        GearJoint(GearJointDef(body_a=body_a, body_b=body_b))


def test_ratio_property():
    joint, _ = revolute_pair(ratio=2.0)
    assert joint.ratio == 2.0
    joint.ratio = -1.5
    assert joint.ratio == -1.5
    with pytest.raises(ValueError):
        joint.ratio = math.nan
    assert joint.ratio == -1.5


def test_joint_accessors_and_type():
    joint, _ = revolute_pair()
    assert joint.joint1.index == 3
    assert joint.joint2.index == 4
    assert joint.type is JointType.GEAR


def test_dump_mentions_joints_and_ratio():
    joint, _ = revolute_pair(ratio=2.0)
    text = joint.dump()
    assert "jd.joint1 = joints[3]" in text
    assert "jd.joint2 = joints[4]" in text
    assert "jd.ratio = 2\n" in text
    assert text.endswith("world.create_joint(jd)\n")