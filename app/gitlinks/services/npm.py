"""npm package service implementation.

Drives the ``npm`` CLI inside a project directory. Every operation runs
as background child processes polled for completion, so the caller's
loop never blocks.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any, TypeVar

from gitlinks.models.package import (
    InstalledPackage,
    PackageOrigin,
    PackageVersions,
    SearchResult,
)
from gitlinks.services.base import CompletedOperation, PackageService, PendingOperation
from gitlinks.utils.shell import BackgroundCommand, CommandResult, command_exists

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Prefixes npm uses (or accepts) for git-hosted packages
_GIT_PREFIXES = ("git+", "git:", "git@", "github:", "gitlab:", "bitbucket:", "ssh://")

# npm hosted-git shorthands
_HOST_SHORTHANDS = {
    "github:": "github.com/",
    "gitlab:": "gitlab.com/",
    "bitbucket:": "bitbucket.org/",
}

# package.json sections that may declare a dependency spec
_DECLARATION_KEYS = ("dependencies", "devDependencies", "optionalDependencies")

Launcher = Callable[[list[str], str | None], BackgroundCommand]


def _launch(args: list[str], cwd: str | None) -> BackgroundCommand:
    return BackgroundCommand.start(args, cwd=cwd)


class NpmOperation(PendingOperation[T]):
    """A chain of npm commands whose last output is parsed into a result.

    Every step but the last must exit with 0. The last step may also exit
    with one of ``accept_codes`` (``npm ls`` exits 1 when it reports
    problems alongside a valid listing).
    """

    def __init__(
        self,
        steps: list[list[str]],
        parse: Callable[[CommandResult], T],
        *,
        cwd: str | None = None,
        accept_codes: tuple[int, ...] = (0,),
        launcher: Launcher = _launch,
    ) -> None:
        if not steps:
            msg = "NpmOperation needs at least one command"
            raise ValueError(msg)

        self._steps = list(steps)
        self._parse = parse
        self._cwd = cwd
        self._accept_codes = accept_codes
        self._launcher = launcher
        self._index = 0
        self._current: BackgroundCommand | None = None
        self._done = False
        self._result: T | None = None
        self._error: str | None = None
        self._start_step()

    def _start_step(self) -> None:
        args = self._steps[self._index]
        logger.debug("Starting %s", " ".join(args))
        try:
            self._current = self._launcher(args, self._cwd)
        except OSError as e:
            self._finish(error=f"Failed to run {args[0]}: {e}")

    def _finish(self, result: T | None = None, error: str | None = None) -> None:
        self._done = True
        self._current = None
        self._result = result
        self._error = error

    def _advance(self) -> None:
        if self._done or self._current is None:
            return

        outcome = self._current.poll()
        if outcome is None:
            return

        is_last = self._index == len(self._steps) - 1
        accepted = (0, *self._accept_codes) if is_last else (0,)
        if outcome.returncode not in accepted:
            self._finish(error=npm_error_message(outcome))
            return

        if not is_last:
            self._index += 1
            self._start_step()
            return

        try:
            self._finish(result=self._parse(outcome))
        except ValueError as e:
            if outcome.success:
                self._finish(error=str(e))
            else:
                self._finish(error=npm_error_message(outcome))

    @property
    def is_completed(self) -> bool:
        self._advance()
        return self._done

    @property
    def succeeded(self) -> bool:
        return self.is_completed and self._error is None

    @property
    def result(self) -> T | None:
        return self._result if self.succeeded else None

    @property
    def error(self) -> str | None:
        return self._error if self.is_completed else None


class NpmService(PackageService):
    """Package service backed by the npm CLI.

    Attributes:
        project_dir: Directory holding the project's package.json.
        executable: npm executable name or path.
    """

    def __init__(
        self,
        project_dir: Path,
        executable: str = "npm",
        launcher: Launcher = _launch,
    ) -> None:
        """Initialize the service.

        Args:
            project_dir: Project directory npm operates in.
            executable: npm executable name or path.
            launcher: Callable starting background commands.
        """
        self.project_dir = project_dir
        self.executable = executable
        self._launcher = launcher
        self._cached: list[InstalledPackage] | None = None

    def is_available(self) -> bool:
        """Check if npm is available."""
        return command_exists(self.executable)

    def _listing_args(self) -> list[str]:
        return [self.executable, "ls", "--json", "--long", "--depth=0"]

    def _operation(
        self,
        steps: list[list[str]],
        parse: Callable[[CommandResult], T],
        accept_codes: tuple[int, ...] = (0,),
    ) -> PendingOperation[T]:
        if not self.is_available():
            return CompletedOperation.failure(
                f"npm executable '{self.executable}' is not available on this system"
            )
        return NpmOperation(
            steps,
            parse,
            cwd=str(self.project_dir),
            accept_codes=accept_codes,
            launcher=self._launcher,
        )

    def _parse_and_cache(self, outcome: CommandResult) -> list[InstalledPackage]:
        packages = parse_listing(
            outcome.stdout,
            self.project_dir,
            read_declared_specs(self.project_dir),
        )
        self._cached = packages
        return list(packages)

    def list(self, refresh: bool) -> PendingOperation[list[InstalledPackage]]:
        """List installed top-level packages.

        Args:
            refresh: If False and a previous listing exists, return it
                without running npm.
        """
        if not refresh and self._cached is not None:
            return CompletedOperation(result=list(self._cached))

        logger.info("Listing packages in %s", self.project_dir)
        return self._operation([self._listing_args()], self._parse_and_cache, accept_codes=(1,))

    def add(self, ref: str) -> PendingOperation[InstalledPackage]:
        """Install a package, then locate it in a fresh listing."""

        def locate(outcome: CommandResult) -> InstalledPackage:
            package = find_installed(self._parse_and_cache(outcome), ref)
            if package is None:
                msg = f"Installed package for {ref} not found in npm listing"
                raise ValueError(msg)
            return package

        logger.info("Installing %s in %s", ref, self.project_dir)
        return self._operation(
            [[self.executable, "install", ref], self._listing_args()],
            locate,
            accept_codes=(1,),
        )

    def remove(self, id_or_name: str) -> PendingOperation[str]:
        """Uninstall a package by id or name."""
        name = package_name_from_id(id_or_name)
        logger.info("Uninstalling %s in %s", name, self.project_dir)
        return self._operation(
            [[self.executable, "uninstall", name]],
            lambda _outcome: id_or_name,
        )

    def search(self, name: str) -> PendingOperation[list[SearchResult]]:
        """Look up published versions with ``npm view``."""
        logger.info("Searching registry for %s", name)
        return self._operation(
            [[self.executable, "view", name, "--json"]],
            lambda outcome: parse_view(outcome.stdout, name),
        )


def npm_error_message(outcome: CommandResult) -> str:
    """Extract a human-readable error from a failed npm command."""
    try:
        data = json.loads(outcome.stdout)
    except ValueError:
        data = None

    if isinstance(data, dict) and isinstance(data.get("error"), dict):
        summary = data["error"].get("summary") or data["error"].get("code")
        if summary:
            return str(summary).strip()

    lines = [line.strip() for line in outcome.stderr.splitlines() if line.strip()]
    errors = [line for line in lines if line.startswith("npm ERR!") or line.startswith("npm error")]
    if errors:
        return " ".join(errors)
    if lines:
        return lines[-1]
    return f"npm exited with code {outcome.returncode}"


def classify_origin(resolved: str | None) -> PackageOrigin:
    """Classify a package by its npm ``resolved`` field."""
    if not resolved:
        return PackageOrigin.OTHER

    lowered = resolved.strip().lower()
    if lowered.startswith(_GIT_PREFIXES):
        return PackageOrigin.GIT
    if lowered.startswith(("http://", "https://")):
        return PackageOrigin.REGISTRY
    return PackageOrigin.OTHER


def is_git_ref(ref: str) -> bool:
    """Check if an install reference points at a git repository."""
    lowered = ref.strip().lower()
    if lowered.startswith(_GIT_PREFIXES):
        return True
    base = lowered.split("#", 1)[0].split("?", 1)[0]
    return "://" in base and base.endswith(".git")


def repo_key(ref: str) -> str | None:
    """Normalize a git reference to ``host/owner/repo``.

    Scheme, ``git+`` prefix, user, port, ``.git`` suffix and the ``#ref``
    fragment are dropped so that the reference a user typed and the
    ``resolved`` URL npm reports compare equal.

    Example:
        >>> repo_key("git@github.com:Org/Repo.git#v1")
        'github.com/org/repo'
        >>> repo_key("git+ssh://git@github.com/org/repo.git#3f2a9c1")
        'github.com/org/repo'
    """
    text = ref.strip().lower().split("#", 1)[0].split("?", 1)[0]
    if not text:
        return None

    text = text.removeprefix("git+")
    for shorthand, host in _HOST_SHORTHANDS.items():
        if text.startswith(shorthand):
            text = host + text[len(shorthand) :]
            break

    if "://" in text:
        text = text.split("://", 1)[1]
        first, _, path = text.partition("/")
        host = first.rsplit("@", 1)[-1].split(":", 1)[0]
    else:
        first, _, path = text.partition(":")
        host = first.rsplit("@", 1)[-1]
        if not path:
            host, _, path = first.partition("/")

    path = path.strip("/").removesuffix(".git").strip("/")
    if not host or not path:
        return None
    return f"{host}/{path}"


def package_name_from_id(id_or_name: str) -> str:
    """Return the package name part of ``name@something``."""
    at = id_or_name.find("@", 1 if id_or_name.startswith("@") else 0)
    if at < 0:
        return id_or_name
    return id_or_name[:at]


def read_declared_specs(project_dir: Path) -> dict[str, str]:
    """Read the dependency specs declared in a project's package.json.

    A missing or unreadable descriptor declares nothing. When a name
    appears in several sections, the first section listed wins.
    """
    descriptor = project_dir / "package.json"
    try:
        data = json.loads(descriptor.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, ValueError) as e:
        logger.debug("Cannot read declared dependencies from %s: %s", descriptor, e)
        return {}

    if not isinstance(data, dict):
        return {}

    specs: dict[str, str] = {}
    for key in _DECLARATION_KEYS:
        section = data.get(key)
        if not isinstance(section, dict):
            continue
        for name, spec in section.items():
            if isinstance(spec, str):
                specs.setdefault(name, spec)
    return specs


def declared_ref(spec: str | None) -> str | None:
    """Return the ``#`` fragment (branch, tag or range) of a git spec."""
    if not spec:
        return None
    _, _, ref = spec.partition("#")
    return ref.strip() or None


def git_package_id(name: str, resolved: str, declared: str | None = None) -> str:
    """Build the package id of a git-installed package.

    npm's ``resolved`` URL pins a commit but forgets the ref the package
    was declared with, so the declared ref is put back in between::

        tools@git+ssh://git@github.com/org/tools.git#v1#3f2a9c1e

    The last ``#`` fragment is always the resolved commit.

    Example:
        >>> git_package_id("tools", "git+ssh://git@host/org/tools.git#3f2a", "org/tools#v1")
        'tools@git+ssh://git@host/org/tools.git#v1#3f2a'
    """
    url, _, commit = resolved.partition("#")
    ref = declared_ref(declared)
    if ref is None:
        return f"{name}@{resolved}"
    return f"{name}@{url}#{ref}#{commit}"


def _resolved_path(name: str, info: dict[str, Any], project_dir: Path) -> str:
    path = info.get("path")
    if isinstance(path, str) and path:
        return path
    return str(project_dir / "node_modules" / name)


def parse_listing(
    stdout: str,
    project_dir: Path,
    declared: Mapping[str, str] | None = None,
) -> list[InstalledPackage]:
    """Parse ``npm ls --json --long --depth=0`` output.

    Entries npm reports as missing (no version) are skipped. Git packages
    get the ref of their declared spec in the package id (see
    :func:`git_package_id`).

    Args:
        stdout: npm ls output.
        project_dir: Project directory, used for default package paths.
        declared: Dependency specs declared in the project package.json.

    Raises:
        ValueError: If the output is not a JSON object.
    """
    data = json.loads(stdout or "{}")
    if not isinstance(data, dict):
        msg = "Unexpected npm ls output"
        raise ValueError(msg)

    dependencies = data.get("dependencies") or {}
    packages: list[InstalledPackage] = []

    for name, info in dependencies.items():
        if not isinstance(info, dict):
            continue
        version = info.get("version")
        if not version or info.get("missing"):
            logger.debug("Skipping npm entry without installed version: %s", name)
            continue

        resolved = info.get("resolved")
        origin = classify_origin(resolved)
        if origin == PackageOrigin.GIT:
            package_id = git_package_id(name, resolved, (declared or {}).get(name))
        elif origin == PackageOrigin.OTHER and resolved:
            package_id = f"{name}@{resolved}"
        else:
            package_id = f"{name}@{version}"

        packages.append(
            InstalledPackage(
                name=name,
                version=str(version),
                origin=origin,
                package_id=package_id,
                resolved_path=_resolved_path(name, info, project_dir),
            )
        )

    return packages


def find_installed(packages: list[InstalledPackage], ref: str) -> InstalledPackage | None:
    """Find the package an install reference produced.

    Git references match on repository key; anything else matches on the
    package name part of ``name@version``.
    """
    if is_git_ref(ref):
        wanted = repo_key(ref)
        for package in packages:
            if package.is_git and repo_key(package_id_source(package)) == wanted:
                return package
        return None

    name = package_name_from_id(ref.strip()).lower()
    for package in packages:
        if package.name.lower() == name:
            return package
    return None


def package_id_source(package: InstalledPackage) -> str:
    """Return the part of a package id after the name."""
    name = package_name_from_id(package.package_id)
    return package.package_id[len(name) + 1 :]


def parse_view(stdout: str, name: str) -> list[SearchResult]:
    """Parse ``npm view <name> --json`` output.

    Raises:
        ValueError: If the output is not valid JSON.
    """
    data = json.loads(stdout or "null")
    if isinstance(data, list):
        data = data[-1] if data else None
    if not isinstance(data, dict):
        return []

    dist_tags = data.get("dist-tags") or {}
    latest = dist_tags.get("latest") if isinstance(dist_tags, dict) else None
    latest = latest or data.get("version")

    return [
        SearchResult(
            name=str(data.get("name") or name),
            versions=PackageVersions(latest=latest, latest_compatible=None),
        )
    ]
