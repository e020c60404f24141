# workflows/build_workflow.py
import os
from typing import Callable, List, Mapping, Tuple

from ..builders.build_args import BuildArgs, build_configuration
from ..builders.build_config import BuildConfiguration, Profile
from ..builders.build_result import BuildResult
from ..builders.cargo_builder import CargoBuilder
from ..builders.emscripten import ToolchainProvisioner
from ..config.settings import WebConfig
from ..project.models import Package, Project, Target, TargetKind
from ..project.resolver import TargetFilter, kinds_filter, select_package, select_targets
from ..utils.logging import setup_logger

logger = setup_logger()

WebConfigLoader = Callable[[Package], WebConfig]


def default_web_config_loader(package: Package) -> WebConfig:
    return WebConfig.load_for_package(package.manifest_path)


class BuildWorkflow:
    """Builds the selected targets of a package one after another."""

    def __init__(
        self,
        project: Project,
        builder: CargoBuilder,
        provisioner: ToolchainProvisioner,
        load_web_config: WebConfigLoader = default_web_config_loader,
        environ: Mapping[str, str] = os.environ
    ):
        self.project = project
        self.builder = builder
        self.provisioner = provisioner
        self.load_web_config = load_web_config
        self.environ = environ

    def resolve_targets(self, flags: BuildArgs, default_filter: TargetFilter) -> Tuple[Package, List[Target]]:
        package = select_package(self.project, flags.package)
        targets = select_targets(package, flags.selector, default_filter)
        logger.debug(f"Selected targets of `{package.name}`: {', '.join(t.name for t in targets) or 'none'}")
        return package, targets

    async def build_all(
        self,
        flags: BuildArgs,
        package: Package,
        targets: List[Target],
        profile: Profile
    ) -> List[Tuple[BuildConfiguration, BuildResult]]:
        """Build every target in order; the first BuildError stops the rest."""
        web_config = self.load_web_config(package)
        builds = []
        for target in targets:
            config = build_configuration(flags, web_config, package, target, profile, self.provisioner, self.environ)
            builds.append((config, await self.builder.run(config)))
        return builds

    async def run(self, flags: BuildArgs, profile: Profile = Profile.MAIN) -> List[BuildResult]:
        """Build the library and binaries (or the explicitly selected target)."""
        package, targets = self.resolve_targets(flags, kinds_filter(TargetKind.LIB, TargetKind.BIN))
        if not targets:
            logger.warning(f"package `{package.name}` has nothing to build")
        builds = await self.build_all(flags, package, targets, profile)
        return [build for _, build in builds]
