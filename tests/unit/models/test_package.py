"""Unit tests for package models.

Tests for InstalledPackage, PackageVersions and SearchResult dataclasses.
"""

from dataclasses import FrozenInstanceError

import pytest
from gitlinks.models.package import (
    InstalledPackage,
    PackageOrigin,
    PackageVersions,
    SearchResult,
)


class TestPackageOrigin:
    """Tests for PackageOrigin enum."""

    def test_values(self) -> None:
        """PackageOrigin has the expected values."""
        assert PackageOrigin.REGISTRY.value == "registry"
        assert PackageOrigin.GIT.value == "git"
        assert PackageOrigin.OTHER.value == "other"


class TestInstalledPackage:
    """Tests for InstalledPackage dataclass."""

    def test_create(self) -> None:
        """InstalledPackage can be created with required fields."""
        pkg = InstalledPackage(
            name="tools",
            version="1.4.0",
            origin=PackageOrigin.GIT,
            package_id="tools@git+ssh://git@github.com/org/tools.git#3f2a9c1e",
        )

        assert pkg.name == "tools"
        assert pkg.resolved_path is None

    def test_is_immutable(self, git_package: InstalledPackage) -> None:
        """InstalledPackage is frozen."""
        with pytest.raises(FrozenInstanceError):
            git_package.version = "2.0.0"  # type: ignore[misc]

    def test_empty_name_raises(self) -> None:
        """InstalledPackage rejects an empty name."""
        with pytest.raises(ValueError, match="name cannot be empty"):
            InstalledPackage(name="", version="1.0.0", origin=PackageOrigin.OTHER, package_id="")

    def test_origin_properties(
        self,
        git_package: InstalledPackage,
        registry_package: InstalledPackage,
    ) -> None:
        """is_git and is_registry reflect the origin."""
        assert git_package.is_git is True
        assert git_package.is_registry is False
        assert registry_package.is_git is False
        assert registry_package.is_registry is True


class TestPackageVersions:
    """Tests for PackageVersions dataclass."""

    def test_recommended_prefers_compatible(self) -> None:
        """The latest compatible version is recommended when known."""
        versions = PackageVersions(latest="3.0.0", latest_compatible="2.4.1")

        assert versions.recommended == "2.4.1"

    def test_recommended_falls_back_to_latest(self) -> None:
        """Without a compatible version the latest is recommended."""
        assert PackageVersions(latest="3.0.0").recommended == "3.0.0"

    def test_recommended_empty(self) -> None:
        """Nothing is recommended when no versions are known."""
        assert PackageVersions().recommended is None


class TestSearchResult:
    """Tests for SearchResult dataclass."""

    def test_default_versions(self) -> None:
        """A search result without versions recommends nothing."""
        result = SearchResult(name="left-pad")

        assert result.versions == PackageVersions()
        assert result.versions.recommended is None
