"""Small vector types, directions and path shaping."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import ClassVar, Optional, Sequence, TypeVar

_Scalar = (int, float)
_ONE_MINUS_EPSILON = 1.0 - 2.0 * 1.1920929e-07


@dataclass(frozen=True)
class Vec2:
    x: float = 0.0
    y: float = 0.0

    ZERO: ClassVar["Vec2"]
    X: ClassVar["Vec2"]
    Y: ClassVar["Vec2"]
    NEG_X: ClassVar["Vec2"]
    NEG_Y: ClassVar["Vec2"]

    def __add__(self, other: "Vec2") -> "Vec2":
        if not isinstance(other, Vec2):
            return NotImplemented
        return Vec2(self.x + other.x, self.y + other.y)

    def __sub__(self, other: "Vec2") -> "Vec2":
        if not isinstance(other, Vec2):
            return NotImplemented
        return Vec2(self.x - other.x, self.y - other.y)

    def __mul__(self, scalar: float) -> "Vec2":
        if not isinstance(scalar, _Scalar):
            return NotImplemented
        return Vec2(self.x * scalar, self.y * scalar)

    __rmul__ = __mul__

    def __neg__(self) -> "Vec2":
        return Vec2(-self.x, -self.y)


Vec2.ZERO = Vec2()
Vec2.X = Vec2(1.0, 0.0)
Vec2.Y = Vec2(0.0, 1.0)
Vec2.NEG_X = Vec2(-1.0, 0.0)
Vec2.NEG_Y = Vec2(0.0, -1.0)


@dataclass(frozen=True)
class Vec3:
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    def __add__(self, other: "Vec3") -> "Vec3":
        if not isinstance(other, Vec3):
            return NotImplemented
        return Vec3(self.x + other.x, self.y + other.y, self.z + other.z)

    def __sub__(self, other: "Vec3") -> "Vec3":
        if not isinstance(other, Vec3):
            return NotImplemented
        return Vec3(self.x - other.x, self.y - other.y, self.z - other.z)

    def __mul__(self, scalar: float) -> "Vec3":
        if not isinstance(scalar, _Scalar):
            return NotImplemented
        return Vec3(self.x * scalar, self.y * scalar, self.z * scalar)

    __rmul__ = __mul__

    def __neg__(self) -> "Vec3":
        return Vec3(-self.x, -self.y, -self.z)


@dataclass(frozen=True)
class Quat:
    """A quaternion; arithmetic is component-wise, the default is the identity."""

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0
    w: float = 1.0

    def __add__(self, other: "Quat") -> "Quat":
        if not isinstance(other, Quat):
            return NotImplemented
        return Quat(self.x + other.x, self.y + other.y, self.z + other.z, self.w + other.w)

    def __sub__(self, other: "Quat") -> "Quat":
        if not isinstance(other, Quat):
            return NotImplemented
        return Quat(self.x - other.x, self.y - other.y, self.z - other.z, self.w - other.w)

    def __mul__(self, scalar: float) -> "Quat":
        if not isinstance(scalar, _Scalar):
            return NotImplemented
        return Quat(self.x * scalar, self.y * scalar, self.z * scalar, self.w * scalar)

    __rmul__ = __mul__

    @classmethod
    def from_rotation_arc_2d(cls, start: Vec2, end: Vec2) -> "Quat":
        """Rotation about Z taking unit vector ``start`` onto unit vector ``end``."""
        dot = start.x * end.x + start.y * end.y
        if dot > _ONE_MINUS_EPSILON:
            return cls()
        if dot < -_ONE_MINUS_EPSILON:
            return cls(0.0, 0.0, 1.0, 0.0)
        z = start.x * end.y - end.x * start.y
        w = 1.0 + dot
        length_reciprocal = 1.0 / math.sqrt(z * z + w * w)
        return cls(0.0, 0.0, z * length_reciprocal, w * length_reciprocal)


@dataclass
class Transform:
    translation: Vec3 = field(default_factory=Vec3)


class BasicDirection(IntEnum):
    UP = 0
    RIGHT = 1
    DOWN = 2
    LEFT = 3

    def opposite_direction_index(self) -> int:
        return (int(self) + 2) % 4

    def opposite_direction(self) -> Optional["BasicDirection"]:
        return BasicDirection.index_to_dir(self.opposite_direction_index())

    def to_world_direction(self) -> Vec2:
        return _WORLD_DIRECTIONS[self]

    def to_rotation(self) -> Quat:
        return Quat.from_rotation_arc_2d(Vec2.Y, self.to_world_direction())

    @classmethod
    def index_to_dir(cls, index: int) -> Optional["BasicDirection"]:
        try:
            return cls(index)
        except ValueError:
            return None

    @classmethod
    def from_keycode(cls, keycode: str) -> Optional["BasicDirection"]:
        """Map a key name (``"KeyW"``, ``"ArrowUp"`` ...) to a direction."""
        return _KEYCODE_DIRECTIONS.get(keycode)


_WORLD_DIRECTIONS = {
    BasicDirection.UP: Vec2.Y,
    BasicDirection.RIGHT: Vec2.X,
    BasicDirection.DOWN: Vec2.NEG_Y,
    BasicDirection.LEFT: Vec2.NEG_X,
}

_KEYCODE_DIRECTIONS = {
    "KeyW": BasicDirection.UP,
    "ArrowUp": BasicDirection.UP,
    "KeyD": BasicDirection.RIGHT,
    "ArrowRight": BasicDirection.RIGHT,
    "KeyS": BasicDirection.DOWN,
    "ArrowDown": BasicDirection.DOWN,
    "KeyA": BasicDirection.LEFT,
    "ArrowLeft": BasicDirection.LEFT,
}


class MovementType(Enum):
    IN_DIRECT_LINE = "in_direct_line"


T = TypeVar("T")


class PathTravelType(Enum):
    ONE_WAY = "one_way"
    CYCLE = "cycle"
    GO_BACK_ALONG_PATH = "go_back_along_path"

    def apply_to_path(self, path_vertices: Sequence[T]) -> list[T]:
        """Return the full list of vertices to visit for this travel style."""
        vertices = list(path_vertices)
        if not vertices or self is PathTravelType.ONE_WAY:
            return vertices
        if self is PathTravelType.CYCLE:
            return vertices + [vertices[0]]
        return vertices + vertices[-2::-1]