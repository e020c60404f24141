import os
import pytest
import tempfile
from pathlib import Path
from typing import Dict, Generator, List, Optional, Sequence, Set

from cargoweb.builders.build_config import BuildConfiguration
from cargoweb.builders.build_result import BuildResult
from cargoweb.builders.emscripten import EmscriptenToolchain
from cargoweb.config.settings import WebConfig
from cargoweb.errors import BuildError
from cargoweb.project.models import Package, Project, Target, TargetKind


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmp_dir:
        yield Path(tmp_dir).resolve()


@pytest.fixture
def sample_package() -> Package:
    """A package with one target of every kind."""
    return Package(
        name="hello",
        targets=[
            Target(kind=TargetKind.LIB, name="hello"),
            Target(kind=TargetKind.BIN, name="hello"),
            Target(kind=TargetKind.BIN, name="tool"),
            Target(kind=TargetKind.EXAMPLE, name="demo"),
            Target(kind=TargetKind.BENCH, name="speed"),
            Target(kind=TargetKind.TEST, name="integration"),
        ]
    )


@pytest.fixture
def sample_project(sample_package: Package) -> Project:
    helper = Package(name="helper", targets=[Target(kind=TargetKind.LIB, name="helper")])
    return Project(packages=[sample_package, helper], default_package_name="hello")


class FakeProvisioner:
    """Hands out a fixed toolchain and records how it was asked."""

    def __init__(self, toolchain: Optional[EmscriptenToolchain]):
        self.toolchain = toolchain
        self.calls: List[tuple] = []

    def initialize(self, use_system: bool, targeting_wasm: bool) -> Optional[EmscriptenToolchain]:
        self.calls.append((use_system, targeting_wasm))
        return self.toolchain


@pytest.fixture
def toolchain(temp_dir: Path) -> EmscriptenToolchain:
    return EmscriptenToolchain(
        emscripten_path=temp_dir / "emscripten",
        emscripten_llvm_path=temp_dir / "emscripten-fastcomp",
        binaryen_path=temp_dir / "binaryen"
    )


@pytest.fixture
def provisioner(toolchain: EmscriptenToolchain) -> FakeProvisioner:
    return FakeProvisioner(toolchain)


class FakeCargoBuilder:
    """Pretends to build; the js loader and the wasm land in separate directories."""

    def __init__(self, out_dir: Path, failing: Set[str] = frozenset()):
        self.out_dir = out_dir
        self.failing = set(failing)
        self.configs: List[BuildConfiguration] = []

    async def run(self, config: BuildConfiguration) -> BuildResult:
        self.configs.append(config)
        name = f"{config.target.kind.value}-{config.target.name}"
        if name in self.failing:
            raise BuildError()

        js_dir = self.out_dir / "js"
        wasm_dir = self.out_dir / "wasm"
        js_dir.mkdir(parents=True, exist_ok=True)
        wasm_dir.mkdir(parents=True, exist_ok=True)

        artifacts = [js_dir / f"{name}.js"]
        if config.triplet.is_wasm:
            artifacts.append(wasm_dir / f"{name}.wasm")
        return BuildResult(success=True, artifacts=artifacts)

    @property
    def built(self) -> List[str]:
        return [f"{c.target.kind.value}-{c.target.name}" for c in self.configs]


@pytest.fixture
def fake_builder(temp_dir: Path) -> FakeCargoBuilder:
    return FakeCargoBuilder(temp_dir / "target")


class FakeRunner:
    """Records every run together with the working directory it happened in."""

    def __init__(self, results: Optional[Dict[str, bool]] = None):
        self.results = results or {}
        self.runs: List[dict] = []

    async def run(self, config: BuildConfiguration, build: BuildResult, passthrough: Sequence[str]) -> bool:
        name = f"{config.target.kind.value}-{config.target.name}"
        self.runs.append({
            "name": name,
            "cwd": Path(os.getcwd()),
            "passthrough": list(passthrough),
            "triplet": config.triplet,
        })
        return self.results.get(name, True)

    @property
    def ran(self) -> List[str]:
        return [run["name"] for run in self.runs]


@pytest.fixture
def fake_runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def web_config() -> WebConfig:
    return WebConfig()


@pytest.fixture
def make_runner():
    return FakeRunner


@pytest.fixture
def make_builder(temp_dir: Path):
    def factory(failing: Set[str] = frozenset()) -> FakeCargoBuilder:
        return FakeCargoBuilder(temp_dir / "target", failing)
    return factory
