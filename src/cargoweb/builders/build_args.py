'''
Turns the command line flags into one consistent build configuration per target.
'''
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import List, Mapping, Optional, Sequence, Tuple

from pydantic import BaseModel, ConfigDict, model_validator

from ..config.settings import WebConfig
from ..errors import ConfigurationError
from ..project.models import Package, Target, TargetKind
from ..project.resolver import TargetSelector
from ..utils.logging import setup_logger
from .build_config import BuildConfiguration, BuildType, MessageFormat, Profile, Triplet
from .emscripten import ToolchainProvisioner

logger = setup_logger()

# Exit status used when we refuse to go on at all.
ABORT_STATUS = 101


class BuildArgs(BaseModel):
    """Build related flags shared by the `build` and `test` commands."""
    model_config = ConfigDict(frozen=True)

    package: Optional[str] = None
    lib: bool = False
    bin: Optional[str] = None
    example: Optional[str] = None
    bench: Optional[str] = None
    target_webasm: bool = False
    target_webasm_emscripten: bool = False
    features: Optional[str] = None
    no_default_features: bool = False
    all_features: bool = False
    release: bool = False
    use_system_emscripten: bool = False
    message_format: MessageFormat = MessageFormat.HUMAN
    verbose: bool = False

    @model_validator(mode="after")
    def _single_selector(self) -> "BuildArgs":
        given = [
            flag for flag, value in (
                ("--lib", self.lib),
                ("--bin", self.bin is not None),
                ("--example", self.example is not None),
                ("--bench", self.bench is not None),
            ) if value
        ]
        if len(given) > 1:
            raise ConfigurationError(f"only one of {', '.join(given)} may be given")
        return self

    @property
    def selector(self) -> Optional[TargetSelector]:
        if self.lib:
            return TargetSelector(TargetKind.LIB)
        if self.bin is not None:
            return TargetSelector(TargetKind.BIN, self.bin)
        if self.example is not None:
            return TargetSelector(TargetKind.EXAMPLE, self.example)
        if self.bench is not None:
            return TargetSelector(TargetKind.BENCH, self.bench)
        return None

    @property
    def requested_build_type(self) -> BuildType:
        return BuildType.RELEASE if self.release else BuildType.DEBUG

    def feature_list(self) -> Tuple[str, ...]:
        if not self.features:
            return ()
        return tuple(self.features.split())


@dataclass(frozen=True)
class ToolchainAugmentation:
    """Extra environment, rustflags and PATH entries for a triplet."""
    env: Tuple[Tuple[str, str], ...] = ()
    rustflags: Tuple[str, ...] = ()
    paths: Tuple[Path, ...] = ()


def resolve_triplet(flags: BuildArgs) -> Triplet:
    if flags.target_webasm:
        return Triplet.NATIVE_WASM
    if flags.target_webasm_emscripten:
        return Triplet.EMSCRIPTEN_WASM
    return Triplet.ASMJS


def resolve_build_type(flags: BuildArgs, triplet: Triplet) -> BuildType:
    build_type = flags.requested_build_type
    if triplet == Triplet.NATIVE_WASM and build_type == BuildType.DEBUG:
        # TODO: drop once debug builds for wasm32-unknown-unknown work.
        logger.warning("debug builds on the wasm32-unknown-unknown target are currently totally broken")
        logger.warning("forcing a release build")
        return BuildType.RELEASE
    return build_type


def augment_for_toolchain(
    flags: BuildArgs,
    triplet: Triplet,
    profile: Profile,
    provisioner: ToolchainProvisioner,
    environ: Mapping[str, str] = os.environ
) -> ToolchainAugmentation:
    env: List[Tuple[str, str]] = []
    rustflags: List[str] = []
    paths: List[Path] = []

    if triplet.is_emscripten:
        toolchain = provisioner.initialize(flags.use_system_emscripten, triplet.is_wasm)
        if toolchain is not None:
            paths.append(toolchain.emscripten_path)
            env.append(("EMSCRIPTEN", str(toolchain.emscripten_path)))
            env.append(("EMSCRIPTEN_FASTCOMP", str(toolchain.emscripten_llvm_path)))
            env.append(("LLVM", str(toolchain.emscripten_llvm_path)))
            if toolchain.binaryen_path is not None:
                env.append(("BINARYEN", str(toolchain.binaryen_path)))

        # Only test builds keep the runtime alive until exit.
        no_exit_runtime = 0 if profile == Profile.TEST else 1
        rustflags.extend(["-C", "link-arg=-s", "-C", f"link-arg=NO_EXIT_RUNTIME={no_exit_runtime}"])

    if triplet == Triplet.NATIVE_WASM:
        if flags.requested_build_type == BuildType.DEBUG:
            rustflags.extend(["-C", "debuginfo=2"])

        # Incremental compilation does not work with this target.
        if "CARGO_INCREMENTAL" in environ:
            env.append(("CARGO_INCREMENTAL", "0"))

    return ToolchainAugmentation(env=tuple(env), rustflags=tuple(rustflags), paths=tuple(paths))


def apply_user_link_args(rustflags: Sequence[str], link_args: Sequence[str]) -> Tuple[str, ...]:
    """Append `-C link-arg=...` for every declared link argument.

    RUSTFLAGS is split on whitespace, so an argument containing a space
    cannot be passed through and the process exits with ABORT_STATUS.
    """
    result = list(rustflags)
    for arg in link_args:
        if any(ch.isspace() for ch in arg):
            logger.error("you have a space in one of the entries in `link-args` in your `Web.toml`;")
            logger.error("this is currently unsupported - aborting!")
            sys.exit(ABORT_STATUS)
        result.extend(["-C", f"link-arg={arg}"])
    return tuple(result)


def build_configuration(
    flags: BuildArgs,
    web_config: WebConfig,
    package: Package,
    target: Target,
    profile: Profile,
    provisioner: ToolchainProvisioner,
    environ: Mapping[str, str] = os.environ
) -> BuildConfiguration:
    triplet = resolve_triplet(flags)
    augmentation = augment_for_toolchain(flags, triplet, profile, provisioner, environ)
    rustflags = apply_user_link_args(augmentation.rustflags, web_config.link_args)

    return BuildConfiguration(
        triplet=triplet,
        build_type=resolve_build_type(flags, triplet),
        package=package.name,
        target=target,
        profile=profile,
        features=flags.feature_list(),
        no_default_features=flags.no_default_features,
        all_features=flags.all_features,
        extra_paths=augmentation.paths,
        extra_rustflags=rustflags,
        extra_environment=augmentation.env,
        message_format=flags.message_format,
        verbose=flags.verbose
    )
