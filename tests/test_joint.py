from dataclasses import dataclass, field

import pytest

from rigid2d.friction_joint import FrictionJoint, FrictionJointDef
from rigid2d.joint import (
    Joint,
    JointDef,
    JointType,
    angular_stiffness,
    linear_stiffness,
)
from rigid2d.vecmath import Transform, Vec2, mul, mul_t


@dataclass
class Body:
    position: Vec2 = field(default_factory=Vec2)
    mass: float = 1.0
    inertia: float = 1.0
    island_index: int = 0
    enabled: bool = True
    awake: bool = True

    @property
    def transform(self):
        return Transform.from_angle(self.position, 0.0)

    def is_enabled(self):
        return self.enabled

    def world_point(self, local):
        return mul(self.transform, local)

    def local_point(self, world):
        return mul_t(self.transform, world)


class Canvas:
    """Collects draw calls in order."""

    def __init__(self):
        self.log = []

    def draw_segment(self, p1, p2, color):
        self.log.append(("segment", p1, p2))

    def draw_point(self, p, size, color):
        self.log.append(("point", p, size))

    def of_kind(self, kind):
        return [entry[1:] for entry in self.log if entry[0] == kind]


class AnchoredJoint(Joint):
    def anchor_a(self):
        return self.body_a.world_point(Vec2(0.5, 0.0))

    def anchor_b(self):
        return self.body_b.world_point(Vec2(-0.5, 0.0))

    def reaction_force(self, inv_dt):
        return Vec2()

    def reaction_torque(self, inv_dt):
        return 0.0

    def init_velocity_constraints(self, data):
        pass

    def solve_velocity_constraints(self, data):
        pass

    def solve_position_constraints(self, data):
        return True

    def dump(self):
        return ""


def make_bodies():
    return Body(Vec2(0.0, 0.0)), Body(Vec2(3.0, 1.0), island_index=1)


def anchored(kind, **kwargs):
    a, b = make_bodies()
    return AnchoredJoint(JointDef(kind, a, b, **kwargs)), a, b


def test_same_body_rejected():
    body = Body()
    with pytest.raises(ValueError):
        AnchoredJoint(JointDef(JointType.DISTANCE, body, body))


def test_definition_fields_copied():
    joint, a, b = anchored(JointType.WELD, collide_connected=True, user_data="tag")
    assert joint.type is JointType.WELD
    assert joint.body_a is a and joint.body_b is b
    assert joint.collide_connected is True
    assert joint.user_data == "tag"


def test_is_enabled_needs_both_bodies():
    joint, _, b = anchored(JointType.WELD)
    assert joint.is_enabled()
    b.enabled = False
    assert not joint.is_enabled()


def test_base_cannot_be_instantiated():
    a, b = make_bodies()
    with pytest.raises(TypeError):
        Joint(JointDef(JointType.WELD, a, b))


def test_draw_default_three_segments():
    a, b = make_bodies()
    definition = FrictionJointDef()
    definition.initialize(a, b, Vec2(1.0, 0.0))
    joint = FrictionJoint(definition)
    canvas = Canvas()
    joint.draw(canvas)
    p1, p2 = joint.anchor_a(), joint.anchor_b()
    assert canvas.of_kind("segment") == [
        (a.transform.p, p1),
        (p1, p2),
        (b.transform.p, p2),
    ]
    assert canvas.of_kind("point") == []


def test_draw_distance_single_segment():
    joint, _, _ = anchored(JointType.DISTANCE)
    canvas = Canvas()
    joint.draw(canvas)
    assert canvas.of_kind("segment") == [(joint.anchor_a(), joint.anchor_b())]


def test_draw_mouse_points_and_segment():
    joint, _, _ = anchored(JointType.MOUSE)
    canvas = Canvas()
    joint.draw(canvas)
    assert canvas.of_kind("point") == [(joint.anchor_a(), 4.0), (joint.anchor_b(), 4.0)]
    assert len(canvas.of_kind("segment")) == 1


def test_linear_stiffness_symmetric():
    a, b = Body(mass=2.0), Body(mass=5.0)
    assert linear_stiffness(1.5, 0.3, a, b) == pytest.approx(linear_stiffness(1.5, 0.3, b, a))


@pytest.mark.parametrize(
    "pair, single",
    [
        ((Body(mass=2.0), Body(mass=2.0)), (Body(mass=1.0), Body(mass=0.0))),
        ((Body(mass=0.0), Body(mass=3.0)), (Body(mass=3.0), Body(mass=0.0))),
    ],
)
def test_linear_stiffness_reduced_mass(pair, single):
    assert linear_stiffness(2.0, 0.7, *pair) == pytest.approx(linear_stiffness(2.0, 0.7, *single))


def test_stiffness_zero_frequency():
    a, b = Body(mass=2.0, inertia=3.0), Body(mass=4.0, inertia=1.0)
    assert linear_stiffness(0.0, 0.5, a, b) == (0.0, 0.0)
    assert angular_stiffness(0.0, 0.5, a, b) == (0.0, 0.0)


def test_angular_stiffness_zero_damping_ratio():
    stiffness, damping = angular_stiffness(3.0, 0.0, Body(inertia=2.0), Body(inertia=2.0))
    assert damping == 0.0
    assert stiffness > 0.0


def test_angular_stiffness_uses_reduced_inertia():
    pair = angular_stiffness(1.0, 0.2, Body(inertia=2.0), Body(inertia=2.0))
    single = angular_stiffness(1.0, 0.2, Body(inertia=1.0), Body(inertia=0.0))
    assert pair == pytest.approx(single)