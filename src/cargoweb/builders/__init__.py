# builders/__init__.py
from .build_config import BuildConfiguration, BuildType, MessageFormat, Profile, Triplet
from .build_result import BuildResult
from .build_args import BuildArgs, build_configuration
from .cargo_builder import CargoBuilder
from .node_runner import NodeRunner
from .browser_harness import BrowserHarness, load_browser_harness
from .emscripten import LocalEmscripten, ToolchainProvisioner

__all__ = [
    'BrowserHarness',
    'BuildArgs',
    'BuildConfiguration',
    'BuildResult',
    'BuildType',
    'CargoBuilder',
    'LocalEmscripten',
    'MessageFormat',
    'NodeRunner',
    'Profile',
    'ToolchainProvisioner',
    'Triplet',
    'build_configuration',
    'load_browser_harness',
]
