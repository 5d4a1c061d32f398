"""2D rigid body math, solver state, callback interfaces and joint constraints."""

__version__ = "0.1.0"

__all__ = [
    "vecmath",
    "time_step",
    "callbacks",
    "joint",
    "friction_joint",
    "distance_joint",
    "motor_joint",
    "gear_joint",
]