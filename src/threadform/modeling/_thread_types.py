from __future__ import annotations

import numbers
from dataclasses import dataclass, field
from typing import Literal, Sequence, Union

HigbeeMode = Literal["disabled", "default", "offset"]
NutShape = Literal["hex", "square"]


class ThreadingError(ValueError):
    """Base error for thread generation failures."""


class InvalidThreadSpec(ThreadingError):
    """Raised when an argument is malformed or out of range."""


class ThreadGeometryError(ThreadingError):
    """Raised when valid-looking arguments describe impossible geometry."""


class UnsupportedThreadConfig(ThreadingError):
    """Raised for option combinations or table entries that are not supported."""


class MeshBudgetExceeded(ThreadingError):
    """Raised when generated mesh exceeds the configured budget."""


@dataclass(frozen=True)
class Higbee:
    """Blunt-start truncation request for one thread end.

    ``Higbee.offset(0.0)`` is enabled with the default angle; only
    ``Higbee.disabled()`` turns truncation off.
    """

    mode: HigbeeMode = "disabled"
    angle: float = 0.0

    @classmethod
    def disabled(cls) -> "Higbee":
        return cls("disabled", 0.0)

    @classmethod
    def default(cls) -> "Higbee":
        return cls("default", 0.0)

    @classmethod
    def offset(cls, degrees: float) -> "Higbee":
        return cls("offset", float(degrees))

    @property
    def enabled(self) -> bool:
        return self.mode != "disabled"

    @classmethod
    def coerce(cls, value: "HigbeeLike", name: str = "higbee") -> "Higbee | None":
        """Map loose call-site values onto the variant; ``None`` means unspecified."""

        if value is None or isinstance(value, Higbee):
            return value
        # bool is checked first: False and 0 are different requests.
        if isinstance(value, bool):
            return cls.default() if value else cls.disabled()
        if isinstance(value, numbers.Real):
            angle = float(value)
            if angle != angle or angle in (float("inf"), float("-inf")):
                raise InvalidThreadSpec(f"{name} angle must be finite.")
            return cls.offset(angle)
        raise InvalidThreadSpec(f"{name} must be a bool, a number of degrees, or a Higbee value.")


HigbeeLike = Union[Higbee, bool, float, int, None]


@dataclass(frozen=True)
class EndModifier:
    bevel: bool = False
    higbee: Higbee = field(default_factory=Higbee.disabled)


@dataclass(frozen=True)
class ThreadEnds:
    """Per-end modifiers; end1 is the bottom (-z) end, end2 the top."""

    end1: EndModifier = field(default_factory=EndModifier)
    end2: EndModifier = field(default_factory=EndModifier)

    @classmethod
    def resolve(
        cls,
        *,
        bevel: bool | None = None,
        bevel1: bool | None = None,
        bevel2: bool | None = None,
        higbee: HigbeeLike = None,
        higbee1: HigbeeLike = None,
        higbee2: HigbeeLike = None,
        internal: bool = False,
        default_bevel: bool = False,
    ) -> "ThreadEnds":
        base_bevel = _first_defined(_optional_bool(bevel, "bevel"), default_bevel)
        base_higbee = _first_defined(
            Higbee.coerce(higbee, "higbee"),
            Higbee.default() if internal else Higbee.disabled(),
        )
        end1 = EndModifier(
            bevel=_first_defined(_optional_bool(bevel1, "bevel1"), base_bevel),
            higbee=_first_defined(Higbee.coerce(higbee1, "higbee1"), base_higbee),
        )
        end2 = EndModifier(
            bevel=_first_defined(_optional_bool(bevel2, "bevel2"), base_bevel),
            higbee=_first_defined(Higbee.coerce(higbee2, "higbee2"), base_higbee),
        )
        return cls(end1=end1, end2=end2)

    @property
    def any_bevel(self) -> bool:
        return self.end1.bevel or self.end2.bevel


@dataclass(frozen=True)
class ThreadSpec:
    """Canonical thread definition shared by rod, mask and nut generation."""

    profile: tuple[tuple[float, float], ...]
    pitch: float
    length: float
    d1: float
    d2: float
    starts: int = 1
    left_handed: bool = False
    internal: bool = False
    clearance: float = 0.0
    ends: ThreadEnds = field(default_factory=ThreadEnds)

    @property
    def r1(self) -> float:
        return self.d1 / 2.0

    @property
    def r2(self) -> float:
        return self.d2 / 2.0


@dataclass(frozen=True)
class NutSpec:
    nut_width: float
    height: float
    shape: NutShape
    thread: ThreadSpec
    outer_ends: ThreadEnds
    bevel_angle: float = 30.0


@dataclass(frozen=True)
class ThreadMeshEstimate:
    """Predicted mesh size for planning and budget enforcement."""

    predicted_vertices: int
    predicted_faces: int
    sides: int
    periods: int
    profile_points: int


def _first_defined(*values):
    for value in values:
        if value is not None:
            return value
    return None


def _optional_bool(value: bool | None, name: str) -> bool | None:
    if value is not None and not isinstance(value, bool):
        raise InvalidThreadSpec(f"{name} must be a bool.")
    return value


def require_bool(value: object, name: str) -> bool:
    if not isinstance(value, bool):
        raise InvalidThreadSpec(f"{name} must be a bool, got {type(value).__name__}.")
    return value


def require_positive(value: object, name: str) -> float:
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise InvalidThreadSpec(f"{name} must be a number.")
    number = float(value)
    if not number > 0 or number == float("inf"):
        raise InvalidThreadSpec(f"{name} must be positive.")
    return number


def require_starts(value: object) -> int:
    if isinstance(value, bool) or not isinstance(value, numbers.Integral) or int(value) < 1:
        raise InvalidThreadSpec("starts must be an integer >= 1.")
    return int(value)


def resolve_diameters(
    d: float | None,
    d1: float | None,
    d2: float | None,
    name: str = "d",
) -> tuple[float, float]:
    bottom = _first_defined(d1, d)
    top = _first_defined(d2, d)
    if bottom is None or top is None:
        raise InvalidThreadSpec(f"Must give {name}, or both {name}1 and {name}2.")
    return require_positive(bottom, f"{name}1"), require_positive(top, f"{name}2")


def as_profile_tuple(points: Sequence[Sequence[float]]) -> tuple[tuple[float, float], ...]:
    return tuple((float(x), float(y)) for x, y in points)
