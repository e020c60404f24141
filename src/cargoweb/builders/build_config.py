from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Tuple

from ..project.models import Target


class Triplet(str, Enum):
    """Compilation targets we can produce."""
    ASMJS = "asmjs-unknown-emscripten"
    EMSCRIPTEN_WASM = "wasm32-unknown-emscripten"
    NATIVE_WASM = "wasm32-unknown-unknown"

    @property
    def is_emscripten(self) -> bool:
        return self in (Triplet.ASMJS, Triplet.EMSCRIPTEN_WASM)

    @property
    def is_wasm(self) -> bool:
        return self in (Triplet.EMSCRIPTEN_WASM, Triplet.NATIVE_WASM)


class BuildType(str, Enum):
    DEBUG = "debug"
    RELEASE = "release"


class Profile(str, Enum):
    """Whether the artifact is a test harness or a regular build."""
    MAIN = "main"
    TEST = "test"


class MessageFormat(str, Enum):
    HUMAN = "human"
    JSON = "json"


@dataclass(frozen=True)
class BuildConfiguration:
    """Everything cargo needs for one (target, profile) build."""
    triplet: Triplet
    build_type: BuildType
    package: str
    target: Target
    profile: Profile
    features: Tuple[str, ...] = ()
    no_default_features: bool = False
    all_features: bool = False
    extra_paths: Tuple[Path, ...] = ()
    extra_rustflags: Tuple[str, ...] = ()
    extra_environment: Tuple[Tuple[str, str], ...] = ()
    message_format: MessageFormat = MessageFormat.HUMAN
    verbose: bool = False
