"""Small 2D/3D vector, matrix, rotation and transform types used by the solver."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Union

EPSILON = 1.1920928955078125e-07
PI = 3.14159265359

Number = Union[int, float]


def _is_number(value: object) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def is_valid(x: float) -> bool:
    """Return True if x is neither NaN nor infinite."""
    return math.isfinite(x)


@dataclass(frozen=True, slots=True)
class Vec2:
    """A 2D column vector."""

    x: float = 0.0
    y: float = 0.0

    def __iter__(self):
        yield self.x
        yield self.y

    def __getitem__(self, index: int) -> float:
        return (self.x, self.y)[index]

    def __neg__(self) -> Vec2:
        return Vec2(-self.x, -self.y)

    def __add__(self, other: object) -> Vec2:
        if not isinstance(other, Vec2):
            return NotImplemented
        return Vec2(self.x + other.x, self.y + other.y)

    def __sub__(self, other: object) -> Vec2:
        if not isinstance(other, Vec2):
            return NotImplemented
        return Vec2(self.x - other.x, self.y - other.y)

    def __mul__(self, scalar: object) -> Vec2:
        if not _is_number(scalar):
            return NotImplemented
        return Vec2(scalar * self.x, scalar * self.y)

    __rmul__ = __mul__

    def length(self) -> float:
        return math.sqrt(self.x * self.x + self.y * self.y)

    def length_squared(self) -> float:
        return self.x * self.x + self.y * self.y

    def normalized(self) -> tuple[Vec2, float]:
        """Return the unit vector and the original length.

        A vector shorter than EPSILON is returned unchanged with length 0.
        """
        length = self.length()
        if length < EPSILON:
            return self, 0.0
        inv = 1.0 / length
        return Vec2(self.x * inv, self.y * inv), length

    def is_valid(self) -> bool:
        return is_valid(self.x) and is_valid(self.y)

    def skew(self) -> Vec2:
        """Vector such that dot(skew, other) == cross(self, other)."""
        return Vec2(-self.y, self.x)


VEC2_ZERO = Vec2(0.0, 0.0)


@dataclass(frozen=True, slots=True)
class Vec3:
    """A 3D column vector."""

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    def __iter__(self):
        yield self.x
        yield self.y
        yield self.z

    def __neg__(self) -> Vec3:
        return Vec3(-self.x, -self.y, -self.z)

    def __add__(self, other: object) -> Vec3:
        if not isinstance(other, Vec3):
            return NotImplemented
        return Vec3(self.x + other.x, self.y + other.y, self.z + other.z)

    def __sub__(self, other: object) -> Vec3:
        if not isinstance(other, Vec3):
            return NotImplemented
        return Vec3(self.x - other.x, self.y - other.y, self.z - other.z)

    def __mul__(self, scalar: object) -> Vec3:
        if not _is_number(scalar):
            return NotImplemented
        return Vec3(scalar * self.x, scalar * self.y, scalar * self.z)

    __rmul__ = __mul__


@dataclass(frozen=True, slots=True)
class Mat22:
    """A 2-by-2 matrix stored as columns ex and ey."""

    ex: Vec2 = field(default_factory=Vec2)
    ey: Vec2 = field(default_factory=Vec2)

    @staticmethod
    def from_scalars(a11: float, a12: float, a21: float, a22: float) -> Mat22:
        return Mat22(Vec2(a11, a21), Vec2(a12, a22))

    @staticmethod
    def identity() -> Mat22:
        return Mat22(Vec2(1.0, 0.0), Vec2(0.0, 1.0))

    def __add__(self, other: object) -> Mat22:
        if not isinstance(other, Mat22):
            return NotImplemented
        return Mat22(self.ex + other.ex, self.ey + other.ey)

    def inverse(self) -> Mat22:
        """Inverse matrix; the zero matrix if singular."""
        a, b, c, d = self.ex.x, self.ey.x, self.ex.y, self.ey.y
        det = a * d - b * c
        if det != 0.0:
            det = 1.0 / det
        return Mat22(Vec2(det * d, -det * c), Vec2(-det * b, det * a))

    def solve(self, b: Vec2) -> Vec2:
        """Solve self * x = b."""
        a11, a12, a21, a22 = self.ex.x, self.ey.x, self.ex.y, self.ey.y
        det = a11 * a22 - a12 * a21
        if det != 0.0:
            det = 1.0 / det
        return Vec2(det * (a22 * b.x - a12 * b.y), det * (a11 * b.y - a21 * b.x))


@dataclass(frozen=True, slots=True)
class Mat33:
    """A 3-by-3 matrix stored as columns ex, ey and ez."""

    ex: Vec3 = field(default_factory=Vec3)
    ey: Vec3 = field(default_factory=Vec3)
    ez: Vec3 = field(default_factory=Vec3)


@dataclass(frozen=True, slots=True)
class Rot:
    """A rotation stored as sine and cosine."""

    s: float = 0.0
    c: float = 1.0

    @staticmethod
    def from_angle(angle: float) -> Rot:
        return Rot(math.sin(angle), math.cos(angle))

    @staticmethod
    def identity() -> Rot:
        return Rot(0.0, 1.0)

    def angle(self) -> float:
        return math.atan2(self.s, self.c)

    def x_axis(self) -> Vec2:
        return Vec2(self.c, self.s)

    def y_axis(self) -> Vec2:
        return Vec2(-self.s, self.c)


@dataclass(frozen=True, slots=True)
class Transform:
    """Translation p and rotation q of a rigid frame."""

    p: Vec2 = field(default_factory=Vec2)
    q: Rot = field(default_factory=Rot)

    @staticmethod
    def identity() -> Transform:
        return Transform(Vec2(0.0, 0.0), Rot.identity())

    @staticmethod
    def from_angle(position: Vec2, angle: float) -> Transform:
        return Transform(position, Rot.from_angle(angle))


@dataclass(slots=True)
class Sweep:
    """Motion of a body for time of impact computation."""

    local_center: Vec2 = field(default_factory=Vec2)
    c0: Vec2 = field(default_factory=Vec2)
    c: Vec2 = field(default_factory=Vec2)
    a0: float = 0.0
    a: float = 0.0
    alpha0: float = 0.0

    def get_transform(self, beta: float) -> Transform:
        """Interpolated transform; beta 0 gives the state at alpha0."""
        p = (1.0 - beta) * self.c0 + beta * self.c
        angle = (1.0 - beta) * self.a0 + beta * self.a
        q = Rot.from_angle(angle)
        return Transform(p - mul(q, self.local_center), q)

    def advance(self, alpha: float) -> None:
        """Advance the sweep so that alpha becomes the new initial time."""
        if not self.alpha0 < 1.0:
            raise ValueError("sweep cannot advance once alpha0 has reached 1")
        beta = (alpha - self.alpha0) / (1.0 - self.alpha0)
        self.c0 = self.c0 + beta * (self.c - self.c0)
        self.a0 += beta * (self.a - self.a0)
        self.alpha0 = alpha

    def normalize(self) -> None:
        """Shift both angles by a whole number of turns so a0 lies in [0, 2*pi)."""
        two_pi = 2.0 * PI
        d = two_pi * math.floor(self.a0 / two_pi)
        self.a0 -= d
        self.a -= d


def dot(a: Vec2 | Vec3, b: Vec2 | Vec3) -> float:
    if isinstance(a, Vec2) and isinstance(b, Vec2):
        return a.x * b.x + a.y * b.y
    if isinstance(a, Vec3) and isinstance(b, Vec3):
        return a.x * b.x + a.y * b.y + a.z * b.z
    raise TypeError(f"cannot dot {type(a).__name__} and {type(b).__name__}")


def cross(a, b):
    """2D cross products (vector/vector, vector/scalar, scalar/vector) and the 3D one."""
    if isinstance(a, Vec2) and isinstance(b, Vec2):
        return a.x * b.y - a.y * b.x
    if isinstance(a, Vec2) and _is_number(b):
        return Vec2(b * a.y, -b * a.x)
    if _is_number(a) and isinstance(b, Vec2):
        return Vec2(-a * b.y, a * b.x)
    if isinstance(a, Vec3) and isinstance(b, Vec3):
        return Vec3(
            a.y * b.z - a.z * b.y,
            a.z * b.x - a.x * b.z,
            a.x * b.y - a.y * b.x,
        )
    raise TypeError(f"cannot cross {type(a).__name__} and {type(b).__name__}")


def mul(a, b):
    """Multiply matrices, rotations and transforms with each other or with vectors."""
    if isinstance(a, Transform):
        if isinstance(b, Vec2):
            x = (a.q.c * b.x - a.q.s * b.y) + a.p.x
            y = (a.q.s * b.x + a.q.c * b.y) + a.p.y
            return Vec2(x, y)
        if isinstance(b, Transform):
            return Transform(mul(a.q, b.p) + a.p, mul(a.q, b.q))
    elif isinstance(a, Rot):
        if isinstance(b, Vec2):
            return Vec2(a.c * b.x - a.s * b.y, a.s * b.x + a.c * b.y)
        if isinstance(b, Rot):
            return Rot(a.s * b.c + a.c * b.s, a.c * b.c - a.s * b.s)
    elif isinstance(a, Mat22):
        if isinstance(b, Vec2):
            return Vec2(a.ex.x * b.x + a.ey.x * b.y, a.ex.y * b.x + a.ey.y * b.y)
        if isinstance(b, Mat22):
            return Mat22(mul(a, b.ex), mul(a, b.ey))
    elif isinstance(a, Mat33) and isinstance(b, Vec3):
        return b.x * a.ex + b.y * a.ey + b.z * a.ez
    raise TypeError(f"cannot multiply {type(a).__name__} by {type(b).__name__}")


def mul_t(a, b):
    """Multiply the transpose (inverse for rotations and transforms) of a by b."""
    if isinstance(a, Transform):
        if isinstance(b, Vec2):
            px = b.x - a.p.x
            py = b.y - a.p.y
            return Vec2(a.q.c * px + a.q.s * py, -a.q.s * px + a.q.c * py)
        if isinstance(b, Transform):
            return Transform(mul_t(a.q, b.p - a.p), mul_t(a.q, b.q))
    elif isinstance(a, Rot):
        if isinstance(b, Vec2):
            return Vec2(a.c * b.x + a.s * b.y, -a.s * b.x + a.c * b.y)
        if isinstance(b, Rot):
            return Rot(a.c * b.s - a.s * b.c, a.c * b.c + a.s * b.s)
    elif isinstance(a, Mat22):
        if isinstance(b, Vec2):
            return Vec2(dot(b, a.ex), dot(b, a.ey))
        if isinstance(b, Mat22):
            c1 = Vec2(dot(a.ex, b.ex), dot(a.ey, b.ex))
            c2 = Vec2(dot(a.ex, b.ey), dot(a.ey, b.ey))
            return Mat22(c1, c2)
    raise TypeError(
        f"cannot transpose-multiply {type(a).__name__} by {type(b).__name__}"
    )


def mul22(matrix: Mat33, v: Vec2) -> Vec2:
    """Multiply the upper 2-by-2 block of a 3-by-3 matrix by a vector."""
    return Vec2(
        matrix.ex.x * v.x + matrix.ey.x * v.y,
        matrix.ex.y * v.x + matrix.ey.y * v.y,
    )


def distance(a: Vec2, b: Vec2) -> float:
    return (a - b).length()


def distance_squared(a: Vec2, b: Vec2) -> float:
    c = a - b
    return dot(c, c)


def vabs(value):
    """Absolute value of a scalar, or component-wise of a Vec2 or Mat22."""
    if isinstance(value, Vec2):
        return Vec2(vabs(value.x), vabs(value.y))
    if isinstance(value, Mat22):
        return Mat22(vabs(value.ex), vabs(value.ey))
    return value if value > 0 else -value


def vmin(a, b):
    """Minimum of two scalars, or component-wise of two Vec2."""
    if isinstance(a, Vec2) and isinstance(b, Vec2):
        return Vec2(vmin(a.x, b.x), vmin(a.y, b.y))
    return a if a < b else b


def vmax(a, b):
    """Maximum of two scalars, or component-wise of two Vec2."""
    if isinstance(a, Vec2) and isinstance(b, Vec2):
        return Vec2(vmax(a.x, b.x), vmax(a.y, b.y))
    return a if a > b else b


def clamp(value, low, high):
    return vmax(low, vmin(value, high))


def next_power_of_two(x: int) -> int:
    """Next power of two strictly above the highest set bit of a 32-bit value."""
    x &= 0xFFFFFFFF
    for shift in (1, 2, 4, 8, 16):
        x |= x >> shift
    return (x + 1) & 0xFFFFFFFF


def is_power_of_two(x: int) -> bool:
    return x > 0 and (x & (x - 1)) == 0