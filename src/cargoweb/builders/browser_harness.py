import importlib
from typing import Optional, Protocol, Sequence

from ..errors import ConfigurationError
from .build_config import BuildConfiguration
from .build_result import BuildResult


class BrowserHarness(Protocol):
    async def run(self, config: BuildConfiguration, build: BuildResult, passthrough: Sequence[str]) -> bool:
        """Load the artifacts into a headless browser; True when the tests pass."""


def missing_harness_error() -> ConfigurationError:
    return ConfigurationError(
        "no browser test harness is configured",
        hint="set CARGO_WEB_BROWSER_HARNESS=module:attribute or run the tests with `--nodejs`"
    )


class MissingBrowserHarness:
    """Stands in when no harness is configured; refuses to run."""

    async def run(self, config: BuildConfiguration, build: BuildResult, passthrough: Sequence[str]) -> bool:
        raise missing_harness_error()


def load_browser_harness(reference: Optional[str]) -> BrowserHarness:
    """Import a harness given as `module:attribute`.

    A class or factory is called without arguments; any other object is used
    as the harness itself.
    """
    if not reference:
        return MissingBrowserHarness()

    module_name, _, attribute = reference.partition(":")
    if not module_name or not attribute:
        raise ConfigurationError(f"invalid browser harness `{reference}`; expected `module:attribute`")

    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise ConfigurationError(f"cannot import browser harness module `{module_name}`: {e}") from e

    try:
        harness = getattr(module, attribute)
    except AttributeError as e:
        raise ConfigurationError(f"`{module_name}` has no attribute `{attribute}`") from e

    if isinstance(harness, type) or not hasattr(harness, "run"):
        harness = harness()
    return harness
