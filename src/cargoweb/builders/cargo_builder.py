'''
Building targets with cargo.
'''
import asyncio
import os
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Tuple

from ..errors import BuildError, ConfigurationError
from ..project.models import TargetKind
from ..utils.logging import setup_logger
from .build_config import BuildConfiguration, BuildType, Profile, Triplet
from .build_result import BuildResult
from .cargo_output import collect_artifacts
from .wasm import ArtifactPostProcessor, NodeLoaderWriter

logger = setup_logger()

_TARGET_FLAGS = {
    TargetKind.BIN: "--bin",
    TargetKind.EXAMPLE: "--example",
    TargetKind.BENCH: "--bench",
    TargetKind.TEST: "--test",
}


class CargoBuilder:
    """Runs cargo for a BuildConfiguration and collects what it produced."""

    def __init__(
        self,
        cargo: str = "cargo",
        post_processor: Optional[ArtifactPostProcessor] = None,
        manifest_path: Optional[Path] = None,
        environ: Optional[Mapping[str, str]] = None
    ):
        self.cargo = cargo
        self.post_processor = post_processor or NodeLoaderWriter()
        self.manifest_path = manifest_path
        self.environ = environ

    async def _run_command(self, cmd: List[str], env: Dict[str, str]) -> Tuple[int, List[str]]:
        """Run cargo, capturing stdout and leaving stderr on the terminal."""
        try:
            process = await asyncio.create_subprocess_exec(
                *cmd,
                env=env,
                stdout=asyncio.subprocess.PIPE
            )
        except FileNotFoundError as e:
            raise ConfigurationError(f"`{self.cargo}` not found; please install Rust") from e

        stdout, _ = await process.communicate()
        lines = stdout.decode(errors="replace").splitlines() if stdout else []
        return process.returncode, lines

    def command(self, config: BuildConfiguration) -> List[str]:
        """Cargo command line for a configuration."""
        if config.profile == Profile.TEST:
            cmd = [self.cargo, "test", "--no-run"]
        else:
            cmd = [self.cargo, "build"]

        if self.manifest_path is not None:
            cmd.extend(["--manifest-path", str(self.manifest_path)])

        if config.target.kind == TargetKind.LIB:
            cmd.append("--lib")
        else:
            cmd.extend([_TARGET_FLAGS[config.target.kind], config.target.name])

        cmd.extend(["--target", config.triplet.value, "--package", config.package])

        if config.build_type == BuildType.RELEASE:
            cmd.append("--release")
        if config.features:
            cmd.extend(["--features", " ".join(config.features)])
        if config.no_default_features:
            cmd.append("--no-default-features")
        if config.all_features:
            cmd.append("--all-features")
        if config.verbose:
            cmd.append("--verbose")

        cmd.extend(["--message-format", "json"])
        return cmd

    def environment(self, config: BuildConfiguration) -> Dict[str, str]:
        """Process environment for cargo with the configuration's additions."""
        env = dict(os.environ if self.environ is None else self.environ)
        env.update(dict(config.extra_environment))

        if config.extra_paths:
            paths = [str(path) for path in config.extra_paths]
            if env.get("PATH"):
                paths.append(env["PATH"])
            env["PATH"] = os.pathsep.join(paths)

        if config.extra_rustflags:
            rustflags = [env["RUSTFLAGS"]] if env.get("RUSTFLAGS") else []
            rustflags.extend(config.extra_rustflags)
            env["RUSTFLAGS"] = " ".join(rustflags)

        return env

    async def run(self, config: BuildConfiguration) -> BuildResult:
        """Build the configured target; raises BuildError when cargo fails."""
        cmd = self.command(config)
        logger.info(f"Building {config.target.kind.value} `{config.target.name}` for {config.triplet.value}")
        logger.debug(f"Running: {' '.join(cmd)}")

        returncode, lines = await self._run_command(cmd, self.environment(config))
        artifacts = collect_artifacts(lines, config)

        if returncode != 0:
            raise BuildError()

        for artifact in list(artifacts):
            if config.triplet == Triplet.NATIVE_WASM and artifact.suffix == ".wasm":
                for derived in self.post_processor(artifact):
                    if derived not in artifacts:
                        artifacts.append(derived)

        logger.debug(f"Artifacts: {', '.join(str(a) for a in artifacts)}")
        return BuildResult(success=True, artifacts=artifacts)
