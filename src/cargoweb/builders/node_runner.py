import asyncio
import os
from pathlib import Path
from typing import List, Sequence

from ..errors import ConfigurationError, InternalError
from ..utils.logging import setup_logger
from ..utils.process import find_command, working_directory
from .build_config import BuildConfiguration, Triplet
from .build_result import BuildResult

logger = setup_logger()


def nodejs_candidates() -> List[str]:
    """Executable names node.js is installed under on this platform."""
    names = ["nodejs", "node"]
    if os.name == "nt":
        names.insert(0, "node.exe")
    return names


class NodeRunner:
    """Runs a compiled `.js` artifact under node.js."""

    def __init__(self, candidates: Sequence[str] = ()):
        self.candidates = list(candidates) or nodejs_candidates()

    def find_nodejs(self) -> str:
        nodejs = find_command(self.candidates)
        if nodejs is None:
            raise ConfigurationError("node.js not found; please install it!")
        return nodejs

    async def _run_process(self, cmd: List[str]) -> int:
        process = await asyncio.create_subprocess_exec(*cmd)
        return await process.wait()

    async def run(self, config: BuildConfiguration, build: BuildResult, passthrough: Sequence[str]) -> bool:
        """Run the build's script artifact; True when it exits with status 0."""
        nodejs = self.find_nodejs()

        artifact = build.find_artifact(".js")
        if artifact is None:
            raise InternalError("internal error: no .js file found")

        if config.triplet == Triplet.EMSCRIPTEN_WASM:
            # The .wasm file lives in a different directory than the .js loader.
            wasm_artifact = build.find_artifact(".wasm")
            if wasm_artifact is None:
                raise InternalError("internal error: no .wasm file found")
            cwd = wasm_artifact.parent
        else:
            cwd = artifact.parent

        cmd = [nodejs, str(artifact), *passthrough]
        logger.info(f"Running {artifact.name}")
        logger.debug(f"Running: {' '.join(cmd)} in {cwd}")

        with working_directory(cwd):
            returncode = await self._run_process(cmd)

        if returncode != 0:
            logger.error(f"{artifact.name} exited with status {returncode}")
            return False
        return True
