"""Listener and callback interfaces through which the world reports events."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from rigid2d.vecmath import Vec2

MAX_MANIFOLD_POINTS = 2


class DestructionListener(ABC):
    """Told when joints and fixtures go away because their body was destroyed.

    Implement it to drop any references you hold to them.
    """

    @abstractmethod
    def say_goodbye_joint(self, joint: Any) -> None:
        """Called when a joint is about to be destroyed with one of its bodies."""

    @abstractmethod
    def say_goodbye_fixture(self, fixture: Any) -> None:
        """Called when a fixture is about to be destroyed with its parent body."""


@dataclass(slots=True)
class ContactImpulse:
    """Impulses applied at each contact point, matching the manifold points."""

    normal_impulses: list[float] = field(default_factory=list)
    tangent_impulses: list[float] = field(default_factory=list)

    def __post_init__(self) -> None:
        if len(self.normal_impulses) != len(self.tangent_impulses):
            raise ValueError("normal and tangent impulses must have the same length")
        if len(self.normal_impulses) > MAX_MANIFOLD_POINTS:
            raise ValueError(
                f"a contact has at most {MAX_MANIFOLD_POINTS} points, "
                f"got {len(self.normal_impulses)}"
            )

    @property
    def count(self) -> int:
        return len(self.normal_impulses)


class ContactListener:
    """Receives contact events.

    Each event is forwarded to the matching handler given to the constructor;
    an event without a handler is ignored. Subclasses may override the methods
    instead. Bodies must not be created or destroyed from inside these callbacks.
    """

    _on_begin: Optional[Callable[[Any], Any]] = None
    _on_end: Optional[Callable[[Any], Any]] = None
    _on_pre_solve: Optional[Callable[[Any, Any], Any]] = None
    _on_post_solve: Optional[Callable[[Any, ContactImpulse], Any]] = None

    def __init__(
        self,
        on_begin: Optional[Callable[[Any], Any]] = None,
        on_end: Optional[Callable[[Any], Any]] = None,
        on_pre_solve: Optional[Callable[[Any, Any], Any]] = None,
        on_post_solve: Optional[Callable[[Any, ContactImpulse], Any]] = None,
    ) -> None:
        self._on_begin = on_begin
        self._on_end = on_end
        self._on_pre_solve = on_pre_solve
        self._on_post_solve = on_post_solve

    def begin_contact(self, contact: Any) -> None:
        """Called when two fixtures begin to touch."""
        if self._on_begin is not None:
            self._on_begin(contact)

    def end_contact(self, contact: Any) -> None:
        """Called when two fixtures cease to touch."""
        if self._on_end is not None:
            self._on_end(contact)

    def pre_solve(self, contact: Any, old_manifold: Any) -> None:
        """Called after a contact is updated and before it is solved."""
        if self._on_pre_solve is not None:
            self._on_pre_solve(contact, old_manifold)

    def post_solve(self, contact: Any, impulse: ContactImpulse) -> None:
        """Called after the solver has finished with a touching contact."""
        if self._on_post_solve is not None:
            self._on_post_solve(contact, impulse)


class QueryCallback(ABC):
    """Callback for bounding box queries."""

    @abstractmethod
    def report_fixture(self, fixture: Any) -> bool:
        """Called for each fixture found; return False to stop the query."""


class RayCastCallback(ABC):
    """Callback for ray casts.

    The return value steers the cast: -1 ignores the fixture and continues,
    0 terminates, a fraction clips the ray to that point, 1 continues unclipped.
    """

    @abstractmethod
    def report_fixture(
        self, fixture: Any, point: Vec2, normal: Vec2, fraction: float
    ) -> float:
        """Called for each fixture hit by the ray."""