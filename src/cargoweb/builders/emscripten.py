'''
Locating the Emscripten toolchain used by the asm.js and wasm32-emscripten targets.
'''
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Protocol

from ..utils.logging import setup_logger

logger = setup_logger()


@dataclass(frozen=True)
class EmscriptenToolchain:
    """Paths of an Emscripten installation."""
    emscripten_path: Path
    emscripten_llvm_path: Path
    binaryen_path: Optional[Path] = None


class ToolchainProvisioner(Protocol):
    def initialize(self, use_system: bool, targeting_wasm: bool) -> Optional[EmscriptenToolchain]:
        """Return the toolchain to export, or None to use whatever is on PATH."""


class LocalEmscripten:
    """Uses an Emscripten tree unpacked under a configured root directory."""

    def __init__(self, root: Optional[Path] = None):
        self.root = root

    def initialize(self, use_system: bool, targeting_wasm: bool) -> Optional[EmscriptenToolchain]:
        if use_system:
            logger.debug("Using the system Emscripten installation")
            return None

        if self.root is None:
            logger.debug("No Emscripten root configured; relying on PATH")
            return None

        emscripten_path = self.root / "emscripten"
        emscripten_llvm_path = self.root / "emscripten-fastcomp"

        # binaryen is only needed to emit wasm
        binaryen_path = None
        if targeting_wasm and (self.root / "binaryen").is_dir():
            binaryen_path = self.root / "binaryen"

        logger.debug(f"Using Emscripten from {self.root}")
        return EmscriptenToolchain(
            emscripten_path=emscripten_path,
            emscripten_llvm_path=emscripten_llvm_path,
            binaryen_path=binaryen_path
        )
