import io
import json
import os
import pytest
from pathlib import Path
from typing import List

from cargoweb.builders.build_config import BuildConfiguration, BuildType, MessageFormat, Profile, Triplet
from cargoweb.builders.cargo_builder import CargoBuilder
from cargoweb.builders.cargo_output import artifact_paths, collect_artifacts, parse_message
from cargoweb.builders.wasm import NodeLoaderWriter
from cargoweb.errors import BuildError
from cargoweb.project.models import Target, TargetKind


def make_config(**overrides) -> BuildConfiguration:
    values = dict(
        triplet=Triplet.ASMJS,
        build_type=BuildType.DEBUG,
        package="hello",
        target=Target(kind=TargetKind.LIB, name="hello"),
        profile=Profile.TEST,
    )
    values.update(overrides)
    return BuildConfiguration(**values)


def artifact_line(name: str, filenames: List[str], test: bool = True, kind: str = "lib") -> str:
    return json.dumps({
        "reason": "compiler-artifact",
        "target": {"name": name, "kind": [kind]},
        "profile": {"test": test},
        "filenames": filenames,
    })


def diagnostic_line(rendered: str) -> str:
    return json.dumps({
        "reason": "compiler-message",
        "message": {"rendered": rendered, "level": "warning"},
    })


class FakeCargo(CargoBuilder):
    """CargoBuilder whose cargo process is canned."""

    def __init__(self, returncode: int = 0, lines: List[str] = (), **kwargs):
        super().__init__(**kwargs)
        self.returncode = returncode
        self.lines = list(lines)
        self.commands = []

    async def _run_command(self, cmd, env):
        self.commands.append((cmd, env))
        return self.returncode, self.lines


class TestCommand:
    def test_test_profile_uses_cargo_test_no_run(self):
        cmd = CargoBuilder().command(make_config())
        assert cmd == [
            "cargo", "test", "--no-run", "--lib",
            "--target", "asmjs-unknown-emscripten", "--package", "hello",
            "--message-format", "json",
        ]

    def test_main_profile_uses_cargo_build(self):
        config = make_config(
            profile=Profile.MAIN,
            target=Target(kind=TargetKind.BIN, name="tool"),
            build_type=BuildType.RELEASE,
            triplet=Triplet.NATIVE_WASM
        )
        cmd = CargoBuilder(cargo="/opt/cargo").command(config)
        assert cmd == [
            "/opt/cargo", "build", "--bin", "tool",
            "--target", "wasm32-unknown-unknown", "--package", "hello",
            "--release", "--message-format", "json",
        ]

    @pytest.mark.parametrize("kind, flag", [
        (TargetKind.EXAMPLE, "--example"),
        (TargetKind.BENCH, "--bench"),
        (TargetKind.TEST, "--test"),
    ])
    def test_target_flags(self, kind, flag):
        cmd = CargoBuilder().command(make_config(target=Target(kind=kind, name="x")))
        assert cmd[3:5] == [flag, "x"]

    def test_feature_and_output_flags(self):
        config = make_config(
            features=("a", "b"),
            no_default_features=True,
            all_features=True,
            verbose=True
        )
        cmd = CargoBuilder(manifest_path=Path("/work/Cargo.toml")).command(config)

        assert cmd[3:5] == ["--manifest-path", "/work/Cargo.toml"]
        assert cmd[cmd.index("--features") + 1] == "a b"
        assert "--no-default-features" in cmd
        assert "--all-features" in cmd
        assert "--verbose" in cmd


class TestEnvironment:
    def test_rustflags_paths_and_env(self):
        config = make_config(
            extra_paths=(Path("/emsdk/emscripten"),),
            extra_rustflags=("-C", "link-arg=-s"),
            extra_environment=(("EMSCRIPTEN", "/emsdk/emscripten"),)
        )
        builder = CargoBuilder(environ={"PATH": "/usr/bin", "RUSTFLAGS": "-D warnings"})
        env = builder.environment(config)

        assert env["PATH"] == os.pathsep.join(["/emsdk/emscripten", "/usr/bin"])
        assert env["RUSTFLAGS"] == "-D warnings -C link-arg=-s"
        assert env["EMSCRIPTEN"] == "/emsdk/emscripten"

    def test_untouched_when_nothing_extra(self):
        env = CargoBuilder(environ={"PATH": "/usr/bin"}).environment(make_config())
        assert env == {"PATH": "/usr/bin"}


@pytest.mark.asyncio
class TestRun:
    async def test_collects_artifacts_for_target(self):
        builder = FakeCargo(lines=[
            artifact_line("dep", ["/t/deps/libdep.rlib"], test=False),
            artifact_line("hello", ["/t/hello-abc.js", "/t/hello-abc.wasm"]),
            json.dumps({"reason": "build-finished", "success": True}),
        ])
        result = await builder.run(make_config(triplet=Triplet.EMSCRIPTEN_WASM))

        assert result.success
        assert result.artifacts == [Path("/t/hello-abc.js"), Path("/t/hello-abc.wasm")]

    async def test_failure_is_a_build_error(self):
        builder = FakeCargo(returncode=101, lines=[diagnostic_line("error: oops\n")])
        with pytest.raises(BuildError):
            await builder.run(make_config())

    async def test_native_wasm_is_post_processed(self, temp_dir: Path):
        wasm = temp_dir / "hello.wasm"
        wasm.write_bytes(b"\0asm")
        builder = FakeCargo(
            lines=[artifact_line("hello", [str(wasm)])],
            post_processor=NodeLoaderWriter()
        )
        result = await builder.run(make_config(triplet=Triplet.NATIVE_WASM))

        loader = temp_dir / "hello.js"
        assert result.artifacts == [wasm, loader]
        assert loader.exists()
        assert '"hello.wasm"' in loader.read_text()

    async def test_emscripten_wasm_is_not_post_processed(self):
        calls = []

        def post_processor(path):
            calls.append(path)
            return [path.with_suffix(".extra")]

        builder = FakeCargo(
            lines=[artifact_line("hello", ["/t/hello.js", "/t/hello.wasm"])],
            post_processor=post_processor
        )
        result = await builder.run(make_config(triplet=Triplet.EMSCRIPTEN_WASM))

        assert calls == []
        assert result.artifacts == [Path("/t/hello.js"), Path("/t/hello.wasm")]


class TestCargoOutput:
    def test_parse_message_ignores_plain_text(self):
        assert parse_message("   Compiling hello v0.1.0") is None
        assert parse_message("{broken") is None
        assert parse_message('{"reason": "build-finished"}') == {"reason": "build-finished"}

    def test_main_profile_skips_test_artifacts(self):
        message = json.loads(artifact_line("hello", ["/t/hello.js"], test=True))
        assert artifact_paths(message, make_config(profile=Profile.MAIN)) == []

    def test_dashes_and_underscores_match(self):
        message = json.loads(artifact_line("my_crate", ["/t/my_crate.js"]))
        config = make_config(target=Target(kind=TargetKind.LIB, name="my-crate"))
        assert artifact_paths(message, config) == [Path("/t/my_crate.js")]

    def test_lib_and_bin_sharing_a_name(self):
        lib = json.loads(artifact_line("hello", ["/t/libhello.rlib"], test=False))
        bin_ = json.loads(artifact_line("hello", ["/t/hello.js"], test=False, kind="bin"))
        config = make_config(profile=Profile.MAIN, target=Target(kind=TargetKind.BIN, name="hello"))

        assert artifact_paths(lib, config) == []
        assert artifact_paths(bin_, config) == [Path("/t/hello.js")]

    def test_cdylib_counts_as_the_library(self):
        message = json.loads(artifact_line("hello", ["/t/hello.wasm"], kind="cdylib"))
        assert artifact_paths(message, make_config()) == [Path("/t/hello.wasm")]

    def test_human_format_prints_rendered(self):
        out, err = io.StringIO(), io.StringIO()
        collect_artifacts([diagnostic_line("warning: unused\n")], make_config(), out=out, err=err)
        assert err.getvalue() == "warning: unused\n"
        assert out.getvalue() == ""

    def test_json_format_passes_lines_through(self):
        out, err = io.StringIO(), io.StringIO()
        line = diagnostic_line("warning: unused\n")
        collect_artifacts([line], make_config(message_format=MessageFormat.JSON), out=out, err=err)
        assert out.getvalue() == line + "\n"
        assert err.getvalue() == ""
