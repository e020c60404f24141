'''
Resolves which package and which cargo targets an invocation operates on.
'''
import asyncio
import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple

from pydantic import ValidationError

from ..errors import ConfigurationError
from ..utils.logging import setup_logger
from .models import Package, Project, Target, TargetKind

logger = setup_logger()

TargetFilter = Callable[[Target], bool]

# Every library flavour cargo reports is treated as the package's library.
_LIB_KINDS = {"lib", "rlib", "dylib", "cdylib", "staticlib", "proc-macro"}


@dataclass(frozen=True)
class TargetSelector:
    """An explicit `--lib`, `--bin NAME`, `--example NAME` or `--bench NAME`."""
    kind: TargetKind
    name: Optional[str] = None

    def __post_init__(self):
        if self.kind == TargetKind.LIB:
            if self.name is not None:
                raise ValueError("library selector takes no name")
        elif self.kind in (TargetKind.BIN, TargetKind.EXAMPLE, TargetKind.BENCH):
            if self.name is None:
                raise ValueError(f"{self.kind.value} selector needs a target name")
        else:
            raise ValueError(f"cannot select {self.kind.value} targets explicitly")

    def matches(self, target: Target) -> bool:
        if target.kind != self.kind:
            return False
        return self.kind == TargetKind.LIB or target.name == self.name

    def not_found_message(self) -> str:
        if self.kind == TargetKind.LIB:
            return "no library targets found"
        return f"no {self.kind.value} target named `{self.name}`"


def select_package(project: Project, name: Optional[str] = None) -> Package:
    """Return the named package, or the project's default one."""
    if name is None:
        return project.default_package()

    package = project.find_package(name)
    if package is None:
        raise ConfigurationError(f"package `{name}` not found")
    return package


def select_targets(
    package: Package,
    selector: Optional[TargetSelector],
    default_filter: TargetFilter
) -> List[Target]:
    """Resolve an explicit selector to its single target, else filter all targets."""
    if selector is not None:
        target = next((t for t in package.targets if selector.matches(t)), None)
        if target is None:
            raise ConfigurationError(selector.not_found_message())
        return [target]

    return [target for target in package.targets if default_filter(target)]


def kinds_filter(*kinds: TargetKind) -> TargetFilter:
    """Build a default filter accepting the given target kinds."""
    accepted = frozenset(kinds)
    return lambda target: target.kind in accepted


def project_from_metadata(metadata: Dict[str, Any]) -> Project:
    """Build a Project out of `cargo metadata --format-version 1` output."""
    packages = []
    member_ids = set(metadata.get("workspace_members") or [])
    for raw in metadata.get("packages", []):
        if member_ids and raw.get("id") not in member_ids:
            continue
        targets = []
        for raw_target in raw.get("targets", []):
            kind = target_kind(raw_target.get("kind", []))
            if kind is None:
                continue
            targets.append(Target(
                kind=kind,
                name=raw_target["name"],
                src_path=raw_target.get("src_path")
            ))
        packages.append(Package(
            name=raw["name"],
            manifest_path=raw.get("manifest_path"),
            targets=targets
        ))

    if not packages:
        raise ConfigurationError("no packages found in the cargo workspace")

    default_name = packages[0].name
    workspace_root = metadata.get("workspace_root")
    if workspace_root:
        root_manifest = Path(workspace_root) / "Cargo.toml"
        for package in packages:
            if package.manifest_path is not None and Path(package.manifest_path) == root_manifest:
                default_name = package.name
                break

    return Project(packages=packages, default_package_name=default_name)


async def _run_command(cmd: List[str]) -> Tuple[int, str, str]:
    """Run a command and return its exit status, stdout and stderr."""
    process = await asyncio.create_subprocess_exec(
        *cmd,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE
    )
    stdout, stderr = await process.communicate()
    return process.returncode, stdout.decode(errors="replace"), stderr.decode(errors="replace")


async def load_project(manifest_path: Optional[Path] = None, cargo: str = "cargo") -> Project:
    """Read the workspace layout through `cargo metadata`."""
    cmd = [cargo, "metadata", "--format-version", "1", "--no-deps"]
    if manifest_path is not None:
        cmd.extend(["--manifest-path", str(manifest_path)])

    logger.debug(f"Running: {' '.join(cmd)}")
    try:
        returncode, stdout, stderr = await _run_command(cmd)
    except FileNotFoundError as e:
        raise ConfigurationError(f"`{cargo}` not found; please install Rust") from e

    if returncode != 0:
        raise ConfigurationError(
            "failed to read the cargo project metadata",
            hint=stderr.strip() or None
        )

    try:
        return project_from_metadata(json.loads(stdout))
    except (json.JSONDecodeError, ValidationError, KeyError) as e:
        raise ConfigurationError(f"unreadable cargo metadata: {e}") from e


def target_kind(kinds: List[str]) -> Optional[TargetKind]:
    """Map the kinds cargo reports for a target; None for build scripts."""
    for kind in kinds:
        if kind in _LIB_KINDS:
            return TargetKind.LIB
        if kind in ("bin", "example", "bench", "test"):
            return TargetKind(kind)
    return None
