from __future__ import annotations

import importlib.util
import os
import sys
from pathlib import Path
from types import ModuleType

import pytest

from threadform.mesh_quality import MeshQuality
from tests.helpers import FAST

PROJECT_ROOT = Path(__file__).resolve().parents[1]


def pytest_configure():
    os.environ.setdefault("PYVISTA_OFF_SCREEN", "true")
    os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")


def load_example_module(model_path: Path) -> ModuleType:
    """Import a docs example by path so its build() can be called."""
    module_name = f"threadform_example_{model_path.stem}"
    spec = importlib.util.spec_from_file_location(module_name, model_path)
    assert spec is not None and spec.loader is not None
    module = importlib.util.module_from_spec(spec)
    sys.modules[module_name] = module
    spec.loader.exec_module(module)
    return module


@pytest.fixture(autouse=True)
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    path = tmp_path / "threadform.cfg"
    monkeypatch.setenv("THREADFORM_CONFIG", str(path))
    return path


@pytest.fixture
def project_root() -> Path:
    return PROJECT_ROOT


@pytest.fixture
def fast_quality() -> MeshQuality:
    return FAST
