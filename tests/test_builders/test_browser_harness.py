import pytest
from pathlib import Path

from cargoweb.builders.browser_harness import MissingBrowserHarness, load_browser_harness
from cargoweb.errors import ConfigurationError


HARNESS_MODULE = '''
class Harness:
    async def run(self, config, build, passthrough):
        return True


instance = Harness()


def factory():
    return Harness()
'''


class TestLoadBrowserHarness:
    @pytest.fixture
    def harness_module(self, temp_dir: Path, monkeypatch):
        (temp_dir / "cargoweb_test_harness.py").write_text(HARNESS_MODULE)
        monkeypatch.syspath_prepend(str(temp_dir))
        return "cargoweb_test_harness"

    def test_nothing_configured(self):
        assert isinstance(load_browser_harness(None), MissingBrowserHarness)

    @pytest.mark.parametrize("attribute", ["Harness", "instance", "factory"])
    def test_loads_harness(self, harness_module, attribute):
        harness = load_browser_harness(f"{harness_module}:{attribute}")
        assert type(harness).__name__ == "Harness"

    def test_bad_reference(self):
        with pytest.raises(ConfigurationError, match="module:attribute"):
            load_browser_harness("no_colon_here")

    def test_missing_module(self):
        with pytest.raises(ConfigurationError, match="cannot import"):
            load_browser_harness("cargoweb_no_such_module:Harness")

    def test_missing_attribute(self, harness_module):
        with pytest.raises(ConfigurationError, match="no attribute"):
            load_browser_harness(f"{harness_module}:Nope")

    @pytest.mark.asyncio
    async def test_missing_harness_refuses_to_run(self):
        with pytest.raises(ConfigurationError, match="--nodejs"):
            await MissingBrowserHarness().run(None, None, [])
