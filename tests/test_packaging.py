from pathlib import Path

import pytest

tomllib = pytest.importorskip("tomllib")

ROOT = Path(__file__).resolve().parent.parent


def test_project_metadata_points_at_shipped_files():
    project = tomllib.loads((ROOT / "pyproject.toml").read_text())["project"]

    assert project["name"] == "fractal-explorer"
    readme = project.get("readme")
    if readme is not None:
        assert (ROOT / readme).is_file()
        assert readme not in ("SPEC_FULL.md", "DESIGN.md")
    assert {"numpy", "pillow"} <= {dep.split(">")[0].split("=")[0] for dep in project["dependencies"]}
