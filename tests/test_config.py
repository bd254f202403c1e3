from __future__ import annotations

import json

import pytest

from threadform._config import config_path, get_slop, get_unit_settings


def test_default_config_is_written(isolated_config) -> None:
    assert config_path() == isolated_config
    assert get_slop() == 0.0
    written = json.loads(isolated_config.read_text())
    assert written["units"] == "millimeters"
    assert written["slop"] == 0.0


@pytest.mark.parametrize(
    ("payload", "expected"),
    [
        ('{"slop": 0.2}', 0.2),
        ('{"slop": "0.15"}', 0.15),
        ('{"slop": -1}', 0.0),
        ('{"slop": "loose"}', 0.0),
        ('{"slop": true}', 0.0),
        ('{"slop": null}', 0.0),
        ('{"units": "mm"}', 0.0),
        ("[0.2]", 0.0),
        ("not json", 0.0),
    ],
)
def test_slop_values(isolated_config, payload, expected) -> None:
    isolated_config.write_text(payload)
    assert get_slop() == pytest.approx(expected)


@pytest.mark.parametrize(
    ("units", "name", "label", "scale"),
    [
        ("in", "inches", "in", 25.4),
        ("Meters", "meters", "m", 1000.0),
        ("furlongs", "millimeters", "mm", 1.0),
    ],
)
def test_unit_settings(isolated_config, units, name, label, scale) -> None:
    isolated_config.write_text(json.dumps({"units": units}))
    settings = get_unit_settings()
    assert (settings.name, settings.label, settings.scale_to_mm) == (name, label, scale)
