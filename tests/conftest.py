"""Pytest configuration and shared fixtures.

This module contains fixtures used across all test modules.
"""

import json
from collections.abc import Callable
from pathlib import Path

import pytest
from gitlinks.models.package import InstalledPackage, PackageOrigin


@pytest.fixture(autouse=True)
def isolated_config_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point XDG_CONFIG_HOME at a temporary directory for every test."""
    config_home = tmp_path / "xdg-config"
    monkeypatch.setenv("XDG_CONFIG_HOME", str(config_home))
    return config_home


@pytest.fixture
def git_package() -> InstalledPackage:
    """A package installed from a git reference."""
    return InstalledPackage(
        name="tools",
        version="1.4.0",
        origin=PackageOrigin.GIT,
        package_id="tools@git+ssh://git@github.com/org/tools.git#3f2a9c1e",
    )


@pytest.fixture
def registry_package() -> InstalledPackage:
    """A package installed from the registry."""
    return InstalledPackage(
        name="left-pad",
        version="1.1.0",
        origin=PackageOrigin.REGISTRY,
        package_id="left-pad@1.1.0",
    )


@pytest.fixture
def write_descriptor(tmp_path: Path) -> Callable[[str, str], Path]:
    """Factory writing a package directory with the given descriptor text."""

    def write(name: str, text: str) -> Path:
        package_dir = tmp_path / "node_modules" / name
        package_dir.mkdir(parents=True, exist_ok=True)
        (package_dir / "package.json").write_text(text, encoding="utf-8")
        return package_dir

    return write


@pytest.fixture
def mock_npm_ls_output() -> str:
    """Sample npm ls --json --long --depth=0 output."""
    return json.dumps(
        {
            "name": "game-client",
            "version": "0.3.0",
            "dependencies": {
                "tools": {
                    "version": "1.4.0",
                    "resolved": "git+ssh://git@github.com/org/tools.git#3f2a9c1e",
                    "path": "/srv/game-client/node_modules/tools",
                },
                "left-pad": {
                    "version": "1.1.0",
                    "resolved": "https://registry.npmjs.org/left-pad/-/left-pad-1.1.0.tgz",
                    "path": "/srv/game-client/node_modules/left-pad",
                },
                "local-lib": {
                    "version": "0.0.1",
                    "resolved": "file:../local-lib",
                },
                "ghost": {
                    "required": "^2.0.0",
                    "missing": True,
                },
            },
        }
    )
