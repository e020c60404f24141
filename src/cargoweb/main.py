"""
Main entry point for the cargo-web build and test commands.
"""
import argparse
import asyncio
import sys
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from .builders.browser_harness import load_browser_harness
from .builders.build_args import BuildArgs
from .builders.build_config import MessageFormat
from .builders.cargo_builder import CargoBuilder
from .builders.emscripten import LocalEmscripten
from .builders.node_runner import NodeRunner
from .config.settings import Settings, WebConfig
from .errors import CargoWebError
from .project.models import Package
from .project.resolver import load_project
from .utils.logging import set_verbose, setup_logger
from .workflows import BuildWorkflow, TestArgs, TestWorkflow

logger = setup_logger()


def split_passthrough(argv: Sequence[str]) -> Tuple[List[str], List[str]]:
    """Split off everything after the first `--`."""
    argv = list(argv)
    if "--" in argv:
        index = argv.index("--")
        return argv[:index], argv[index + 1:]
    return argv, []


def _add_build_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("-p", "--package", help="Package to build")

    selector = parser.add_mutually_exclusive_group()
    selector.add_argument("--lib", action="store_true", help="Build only this package's library")
    selector.add_argument("--bin", metavar="NAME", help="Build only the specified binary")
    selector.add_argument("--example", metavar="NAME", help="Build only the specified example")
    selector.add_argument("--bench", metavar="NAME", help="Build only the specified benchmark")

    triplet = parser.add_mutually_exclusive_group()
    triplet.add_argument("--target-webasm", action="store_true",
                         help="Generate native WebAssembly (wasm32-unknown-unknown)")
    triplet.add_argument("--target-webasm-emscripten", action="store_true",
                         help="Generate WebAssembly through Emscripten (wasm32-unknown-emscripten)")

    parser.add_argument("--features", metavar="FEATURES", help="Space-separated list of features to also build")
    parser.add_argument("--no-default-features", action="store_true", help="Do not build the `default` feature")
    parser.add_argument("--all-features", action="store_true", help="Build all available features")
    parser.add_argument("--release", action="store_true", help="Build artifacts in release mode, with optimizations")
    parser.add_argument("--use-system-emscripten", action="store_true",
                        help="Use the system Emscripten installation")
    parser.add_argument("--message-format", choices=[f.value for f in MessageFormat],
                        default=MessageFormat.HUMAN.value, help="Error format")
    parser.add_argument("-v", "--verbose", action="store_true", help="Use verbose output")
    parser.add_argument("--manifest-path", type=Path, help="Path to Cargo.toml")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cargo-web",
        description="Build and test Rust crates for the web",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    build = subparsers.add_parser("build", help="Compile a local package and all of its dependencies")
    _add_build_arguments(build)

    test = subparsers.add_parser(
        "test",
        help="Compile and run tests",
        description="Compile and run tests; arguments after `--` are passed to the test binaries"
    )
    _add_build_arguments(test)
    test.add_argument("--nodejs", action="store_true", help="Use node.js instead of a web browser to run the tests")
    test.add_argument("--no-run", action="store_true", help="Compile, but don't run tests")

    return parser


def _build_args_values(args: argparse.Namespace) -> dict:
    return dict(
        package=args.package,
        lib=args.lib,
        bin=args.bin,
        example=args.example,
        bench=args.bench,
        target_webasm=args.target_webasm,
        target_webasm_emscripten=args.target_webasm_emscripten,
        features=args.features,
        no_default_features=args.no_default_features,
        all_features=args.all_features,
        release=args.release,
        use_system_emscripten=args.use_system_emscripten,
        message_format=MessageFormat(args.message_format),
        verbose=args.verbose
    )


async def run_command(args: argparse.Namespace, passthrough: Sequence[str], settings: Settings) -> int:
    """Execute a parsed command and return the process exit status."""
    project = await load_project(args.manifest_path, cargo=settings.cargo)

    def load_web_config(package: Package) -> WebConfig:
        return WebConfig.load_for_package(package.manifest_path, settings.config_file_name)

    build_workflow = BuildWorkflow(
        project=project,
        builder=CargoBuilder(cargo=settings.cargo, manifest_path=args.manifest_path),
        provisioner=LocalEmscripten(settings.emscripten_root),
        load_web_config=load_web_config
    )

    if args.command == "build":
        flags = BuildArgs(**_build_args_values(args))
        for build in await build_workflow.run(flags):
            for artifact in build.artifacts:
                print(artifact)
        return 0

    flags = TestArgs(
        nodejs=args.nodejs,
        no_run=args.no_run,
        passthrough=tuple(passthrough),
        **_build_args_values(args)
    )
    workflow = TestWorkflow(
        build_workflow,
        node_runner=NodeRunner(),
        browser_harness=None if flags.nodejs else load_browser_harness(settings.browser_harness)
    )
    outcome = await workflow.run(flags)
    return outcome.exit_code


def main(argv: Optional[Sequence[str]] = None) -> None:
    """Main entry point."""
    argv, passthrough = split_passthrough(sys.argv[1:] if argv is None else argv)
    # Allow being invoked as `cargo web ...`.
    if argv[:1] == ["web"]:
        argv = argv[1:]
    args = build_parser().parse_args(argv)

    settings = Settings()
    setup_logger(settings.log_dir)
    set_verbose(logger, args.verbose)

    try:
        sys.exit(asyncio.run(run_command(args, passthrough, settings)))
    except CargoWebError as e:
        logger.error(str(e))
        sys.exit(e.exit_code)
    except KeyboardInterrupt:
        print("\nCancelled by user")
        sys.exit(130)


if __name__ == "__main__":
    main()
