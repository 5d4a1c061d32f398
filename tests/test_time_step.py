import pytest

from rigid2d.time_step import Position, SolverData, TimeStep, Velocity
from rigid2d.vecmath import Vec2


def test_from_dt_computes_inverse():
    step = TimeStep.from_dt(1.0 / 60.0, 8, 3)
    assert step.inv_dt * step.dt == pytest.approx(1.0)
    assert step.velocity_iterations == 8
    assert step.position_iterations == 3
    assert step.warm_starting is True
    assert step.dt_ratio == 1.0


def test_from_dt_zero_has_zero_inverse():
    step = TimeStep.from_dt(0.0, 6, 2, False, 0.5)
    assert step.inv_dt == 0.0
    assert step.warm_starting is False
    assert step.dt_ratio == 0.5


def test_time_step_is_immutable():
    step = TimeStep.from_dt(0.1, 1, 1)
    with pytest.raises(AttributeError):
        step.dt = 0.2
    assert step.dt == 0.1
    assert step.inv_dt == pytest.approx(10.0)


def test_solver_data_shares_state_lists():
    positions = [Position(Vec2(1.0, 2.0), 0.5)]
    velocities = [Velocity(Vec2(0.0, -1.0), 2.0)]
    data = SolverData(TimeStep.from_dt(0.1, 1, 1), positions, velocities)
    data.velocities[0].v = Vec2(3.0, 4.0)
    data.positions[0].a += 1.0
    assert velocities[0].v == Vec2(3.0, 4.0)
    assert positions[0].a == pytest.approx(1.5)
    assert data.step.inv_dt * data.step.dt == pytest.approx(1.0)