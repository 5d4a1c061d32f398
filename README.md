# rigid2d

Building blocks for a 2D rigid body constraint solver: vector, matrix,
rotation and transform math; the time step and per-body solver state; the
listener and callback interfaces a physics world reports through; and four
joint constraints (friction, distance, motor and gear).

## Installation

```
pip install rigid2d
```

To run the tests:

```
pip install "rigid2d[test]"
pytest
```

## Modules

- `rigid2d.vecmath`: immutable `Vec2`, `Vec3`, `Mat22`, `Mat33`, `Rot` and
  `Transform`, the mutable `Sweep`, and the helpers `dot`, `cross`, `mul`,
  `mul_t`, `mul22`, `distance`, `distance_squared`, `vabs`, `vmin`, `vmax`,
  `clamp`, `is_valid`, `next_power_of_two` and `is_power_of_two`.
  `Vec2.normalized()` returns a `(unit_vector, length)` pair.
- `rigid2d.time_step`: `TimeStep` (build one with `TimeStep.from_dt`),
  `Profile`, `Position`, `Velocity` and `SolverData`.
- `rigid2d.callbacks`: `ContactListener` (override its methods or pass
  `on_begin`, `on_end`, `on_pre_solve`, `on_post_solve` handlers), the
  abstract `DestructionListener`, `QueryCallback` and `RayCastCallback`, and
  `ContactImpulse`, which holds at most two points.
- `rigid2d.joint`: the abstract `Joint` base, `JointDef`, `JointType`, and
  `linear_stiffness` / `angular_stiffness`, which turn a frequency and damping
  ratio into a `(stiffness, damping)` pair.
- `rigid2d.friction_joint`: `FrictionJointDef`, `FrictionJoint`.
- `rigid2d.distance_joint`: `DistanceJointDef`, `DistanceJoint`.
- `rigid2d.motor_joint`: `MotorJointDef`, `MotorJoint`.
- `rigid2d.gear_joint`: `GearJointDef`, `GearJoint`.

## Math example

```python
from rigid2d.vecmath import Vec2, Transform, mul, mul_t, cross

xf = Transform.from_angle(Vec2(1.0, 2.0), 0.5)
world = mul(xf, Vec2(1.0, 0.0))   # local point to world
local = mul_t(xf, world)           # back to local, close to Vec2(1.0, 0.0)

print(cross(Vec2(1.0, 0.0), Vec2(0.0, 1.0)))  # 1.0
```

## Joints

Joints do not own bodies; they work with body objects you supply. The
`rigid2d.joint` module docstring lists what a body must provide
(`island_index`, `sweep`, `inv_mass`, `inv_i`, `mass`, `inertia`,
`transform`, `position`, `angle`, a writable `awake`, `is_enabled()`,
`world_point(local)` and `local_point(world)`); each joint only uses the parts
it needs. A minimal example with a distance joint:

```python
from dataclasses import dataclass

from rigid2d.distance_joint import DistanceJoint, DistanceJointDef
from rigid2d.vecmath import Transform, Vec2, mul, mul_t


@dataclass(eq=False)
class Body:
    transform: Transform

    def world_point(self, local):
        return mul(self.transform, local)

    def local_point(self, world):
        return mul_t(self.transform, world)


a = Body(Transform.identity())
b = Body(Transform.from_angle(Vec2(3.0, 4.0), 0.0))

jd = DistanceJointDef()
jd.initialize(a, b, Vec2(0.0, 0.0), Vec2(3.0, 4.0))
joint = DistanceJoint(jd)
print(joint.current_length())  # 5.0
```

During a step a solver calls `init_velocity_constraints`, then
`solve_velocity_constraints` for each velocity iteration, then
`solve_position_constraints` (which returns `True` once the error is within
tolerance), all with a `SolverData` whose `positions` and `velocities` lists
are indexed by each body's `island_index`. Afterwards `reaction_force(inv_dt)`
and `reaction_torque(inv_dt)` report the applied loads.

Further details:

- `FrictionJoint` and `MotorJoint` have `max_force` and `max_torque`
  properties that reject negative or non-finite values; `MotorJoint` also has
  `correction_factor` (must lie in [0, 1]) and `linear_offset` /
  `angular_offset`, whose setters wake both bodies when the value changes.
- `DistanceJoint` has `set_length`, `set_min_length` and `set_max_length`,
  each returning the value actually stored after clamping, and uses a spring
  when `stiffness` is positive and the limits differ.
- `GearJoint` couples two existing revolute or prismatic joint objects so that
  `coordinate1 + ratio * coordinate2` stays constant; see the
  `rigid2d.gear_joint` module docstring for what those joint objects must
  provide. It raises `ValueError` for other joint types or non-dynamic bodies.
- `dump()` returns script text that recreates the joint, and `draw(drawer)`
  calls `draw_segment` / `draw_point` on any object you pass.

## What this package does not do

There is no world, body, fixture, shape, collision detection, contact solver
or island stepping here, and no revolute or prismatic joint. The package
provides the math, the solver state, the callback interfaces and the four
joints above; stepping a simulation means supplying your own bodies and
driving the joint solver calls yourself.