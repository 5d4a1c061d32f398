import pytest

from rigid2d.callbacks import (
    MAX_MANIFOLD_POINTS,
    ContactImpulse,
    ContactListener,
    DestructionListener,
    QueryCallback,
    RayCastCallback,
)
from rigid2d.vecmath import Vec2


def test_contact_impulse_count_follows_lists():
    impulse = ContactImpulse([0.5, 0.25], [0.1, 0.2])
    assert impulse.count == 2
    assert impulse.normal_impulses == [0.5, 0.25]


def test_contact_impulse_empty_by_default():
    assert ContactImpulse().count == 0


def test_contact_impulse_length_mismatch():
    with pytest.raises(ValueError):
        ContactImpulse([1.0], [])


def test_contact_impulse_too_many_points():
    values = [1.0] * (MAX_MANIFOLD_POINTS + 1)
    with pytest.raises(ValueError):
        ContactImpulse(values, list(values))


@pytest.mark.parametrize(
    "base, abstract",
    [
        (DestructionListener, {"say_goodbye_joint", "say_goodbye_fixture"}),
        (QueryCallback, {"report_fixture"}),
        (RayCastCallback, {"report_fixture"}),
    ],
)
def test_abstract_listeners_cannot_be_instantiated(base, abstract):
    assert set(base.__abstractmethods__) == abstract
    with pytest.raises(TypeError):
        base()


def test_contact_listener_partial_override_keeps_defaults():
    class Recorder(ContactListener):
        def __init__(self):
            self.begun = []

        def begin_contact(self, contact):
            self.begun.append(contact)

    recorder = Recorder()
    recorder.begin_contact("c1")
    assert recorder.begun == ["c1"]
    assert recorder.end_contact("c1") is None
    assert recorder.post_solve("c1", ContactImpulse()) is None
    assert recorder.begun == ["c1"]


def test_ray_cast_subclass_returns_clip_fraction():
    class Closest(RayCastCallback):
        def report_fixture(self, fixture, point, normal, fraction):
            return fraction

    callback = Closest()
    assert callback.report_fixture(None, Vec2(1.0, 0.0), Vec2(0.0, 1.0), 0.25) == 0.25