"""
Shared primitive data types for the synchronization layer.

This module provides the 3D kinematic types used throughout the codebase:
positions and velocities (Vector3) and orientations (Quaternion). Both are
immutable so they can be shared freely across the simulated network delay.
"""

import math

from pydantic import BaseModel, ConfigDict


class Vector3(BaseModel):
    """Immutable 3D vector for positions, velocities and offsets.

    World space convention: +z is forward (the runner's direction of travel),
    +y is up.

    Attributes:
        x: Horizontal (lateral) component
        y: Vertical component
        z: Forward component

    Examples:
        >>> pos = Vector3(x=0.0, y=1.0, z=5.0)
        >>> pos + Vector3(z=1.0)
        Vector3(x=0.0, y=1.0, z=6.0)
    """
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    model_config = ConfigDict(frozen=True)  # Immutable

    @classmethod
    def zero(cls) -> 'Vector3':
        """The zero vector."""
        return cls(x=0.0, y=0.0, z=0.0)

    def __add__(self, other: 'Vector3') -> 'Vector3':
        return Vector3(x=self.x + other.x, y=self.y + other.y, z=self.z + other.z)

    def __sub__(self, other: 'Vector3') -> 'Vector3':
        return Vector3(x=self.x - other.x, y=self.y - other.y, z=self.z - other.z)

    def __mul__(self, scalar: float) -> 'Vector3':
        return Vector3(x=self.x * scalar, y=self.y * scalar, z=self.z * scalar)

    __rmul__ = __mul__

    def __truediv__(self, scalar: float) -> 'Vector3':
        return Vector3(x=self.x / scalar, y=self.y / scalar, z=self.z / scalar)

    @property
    def magnitude(self) -> float:
        """Euclidean length."""
        return math.sqrt(self.x * self.x + self.y * self.y + self.z * self.z)

    def distance_to(self, other: 'Vector3') -> float:
        """Euclidean distance to another point."""
        return (self - other).magnitude

    def lerp(self, other: 'Vector3', t: float) -> 'Vector3':
        """Linear blend toward other.

        t is not clamped; t=0 gives self, t=1 gives other and values
        outside [0, 1] extrapolate along the same line.
        """
        return Vector3(
            x=self.x + (other.x - self.x) * t,
            y=self.y + (other.y - self.y) * t,
            z=self.z + (other.z - self.z) * t,
        )

    def with_y(self, y: float) -> 'Vector3':
        """Copy with the vertical component replaced."""
        return Vector3(x=self.x, y=y, z=self.z)

    def as_tuple(self) -> tuple:
        return (self.x, self.y, self.z)

    def __str__(self) -> str:
        """String representation for debugging."""
        return f"Vector3(x={self.x:.2f}, y={self.y:.2f}, z={self.z:.2f})"


class Quaternion(BaseModel):
    """Immutable rotation quaternion (w + xi + yj + zk).

    Defaults to the identity rotation. Values are not forced to unit length
    on construction; use normalized() when composing external input.

    Examples:
        >>> Quaternion.identity()
        Quaternion(w=1.0, x=0.0, y=0.0, z=0.0)
        >>> q = Quaternion.from_axis_angle(Vector3(y=1.0), math.pi / 2)
        >>> round(q.angle_to(Quaternion.identity()), 4)
        1.5708
    """
    w: float = 1.0
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    model_config = ConfigDict(frozen=True)

    @classmethod
    def identity(cls) -> 'Quaternion':
        return cls(w=1.0, x=0.0, y=0.0, z=0.0)

    @classmethod
    def from_axis_angle(cls, axis: Vector3, angle: float) -> 'Quaternion':
        """Build a rotation of angle radians around axis."""
        length = axis.magnitude
        if length == 0.0:
            return cls.identity()
        s = math.sin(angle / 2.0) / length
        return cls(w=math.cos(angle / 2.0), x=axis.x * s, y=axis.y * s, z=axis.z * s)

    def dot(self, other: 'Quaternion') -> float:
        return self.w * other.w + self.x * other.x + self.y * other.y + self.z * other.z

    def __neg__(self) -> 'Quaternion':
        return Quaternion(w=-self.w, x=-self.x, y=-self.y, z=-self.z)

    def normalized(self) -> 'Quaternion':
        """Unit-length copy (identity for a zero quaternion)."""
        norm = math.sqrt(self.dot(self))
        if norm == 0.0:
            return Quaternion.identity()
        return Quaternion(w=self.w / norm, x=self.x / norm, y=self.y / norm, z=self.z / norm)

    def slerp(self, other: 'Quaternion', t: float) -> 'Quaternion':
        """Spherical blend toward other along the shortest arc.

        Nearly parallel inputs fall back to a normalized linear blend, where
        the spherical formula loses precision.
        """
        start = self.normalized()
        end = other.normalized()
        cos_theta = start.dot(end)

        # Shortest path: q and -q describe the same rotation
        if cos_theta < 0.0:
            end = -end
            cos_theta = -cos_theta

        if cos_theta > 0.9995:
            return Quaternion(
                w=start.w + (end.w - start.w) * t,
                x=start.x + (end.x - start.x) * t,
                y=start.y + (end.y - start.y) * t,
                z=start.z + (end.z - start.z) * t,
            ).normalized()

        theta_0 = math.acos(cos_theta)
        theta = theta_0 * t
        sin_theta_0 = math.sin(theta_0)
        s0 = math.cos(theta) - cos_theta * math.sin(theta) / sin_theta_0
        s1 = math.sin(theta) / sin_theta_0
        return Quaternion(
            w=start.w * s0 + end.w * s1,
            x=start.x * s0 + end.x * s1,
            y=start.y * s0 + end.y * s1,
            z=start.z * s0 + end.z * s1,
        )

    def angle_to(self, other: 'Quaternion') -> float:
        """Smallest rotation angle (radians) between the two orientations."""
        d = abs(self.normalized().dot(other.normalized()))
        return 2.0 * math.acos(min(1.0, d))

    def as_tuple(self) -> tuple:
        return (self.w, self.x, self.y, self.z)

    def __str__(self) -> str:
        """String representation for debugging."""
        return f"Quaternion(w={self.w:.3f}, x={self.x:.3f}, y={self.y:.3f}, z={self.z:.3f})"
