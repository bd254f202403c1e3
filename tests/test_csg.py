from __future__ import annotations

import pytest

from threadform.mesh import analyze_mesh
from threadform.modeling import (
    BooleanOperationError,
    boolean_difference,
    boolean_intersection,
    boolean_union,
    make_cylinder,
)


def _pair():
    a = make_cylinder(1.0, 2.0, 32)
    b = make_cylinder(1.0, 2.0, 32).translate((1.0, 0.0, 0.0))
    return a, b


def test_boolean_identities() -> None:
    a, b = _pair()
    union = boolean_union([a, b])
    both = boolean_intersection([a, b])
    only_a = boolean_difference(a, [b])
    for result in (union, both, only_a):
        assert analyze_mesh(result).is_watertight
        assert result.volume > 0
    assert union.volume == pytest.approx(a.volume + b.volume - both.volume, rel=1e-4)
    assert only_a.volume == pytest.approx(a.volume - both.volume, rel=1e-4)


def test_boolean_keeps_first_color() -> None:
    a, b = _pair()
    a.color = (1.0, 0.0, 0.0, 1.0)
    assert boolean_union([a, b]).color == (1.0, 0.0, 0.0, 1.0)
    assert boolean_difference(a, [b]).color == (1.0, 0.0, 0.0, 1.0)


def test_difference_without_cutters_returns_base() -> None:
    a, _ = _pair()
    assert boolean_difference(a, []).volume == pytest.approx(a.volume, rel=1e-5)


def test_open_operand_is_rejected() -> None:
    a, b = _pair()
    b.faces = b.faces[:-4]
    with pytest.raises(BooleanOperationError):
        boolean_union([a, b])


def test_empty_operands() -> None:
    with pytest.raises(ValueError):
        boolean_union([])
    with pytest.raises(ValueError):
        boolean_intersection([])
