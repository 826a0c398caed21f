"""Shared fixtures and helpers for tests."""

import shutil
from pathlib import Path

import pytest

from dev_inspector.bridge.host import POSIX_HOST
from dev_inspector.bridge.service import BridgeService
from dev_inspector.bridge.settings import BridgeSettings
from dev_inspector.picker.dom import Element, load_document

_REPO_ROOT = Path(__file__).parent.parent


# ---------------------------------------------------------------------------
# Auto-marker: tag tests as "unit" or "integration" based on directory
# ---------------------------------------------------------------------------


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    for item in items:
        test_path = Path(str(item.fspath))
        rel = test_path.relative_to(_REPO_ROOT / "tests")
        parts = rel.parts
        if parts and parts[0] == "integration":
            item.add_marker(pytest.mark.integration)
        else:
            item.add_marker(pytest.mark.unit)


requires_bash = pytest.mark.skipif(shutil.which("bash") is None, reason="bash is not available")


# ---------------------------------------------------------------------------
# Shared fixtures
# ---------------------------------------------------------------------------


class FakeProcess:
    """Stand-in for ``asyncio.subprocess.Process``."""

    def __init__(self, returncode: int = 0) -> None:
        self.returncode = returncode

    async def wait(self) -> int:
        return self.returncode


@pytest.fixture
def settings() -> BridgeSettings:
    return BridgeSettings()


@pytest.fixture
def service(settings: BridgeSettings) -> BridgeService:
    return BridgeService(POSIX_HOST, settings)


@pytest.fixture
def button_body() -> bytes:
    return (
        b'{"prompt":"make this blue","file":"/app/src/Button.tsx","line":"12","elementType":"button"}'
    )


@pytest.fixture
def page() -> Element:
    """A rendered page with tagged and untagged elements and the picker's own UI."""
    return load_document(
        """
        <html>
          <body>
            <div id="root" data-source-file="/app/src/App.tsx" data-source-line="3" data-source-column="2">
              <div class="card" data-source-file="/app/src/Card.tsx" data-source-line="7" data-source-column="4">
                <section><p><span id="deep">hello</span></p></section>
                <button id="save" data-source-file="/app/src/Card.tsx" data-source-line="9" data-source-column="6">
                  <b id="label">Save</b>
                </button>
              </div>
            </div>
            <footer id="plain"><i id="untagged">x</i></footer>
            <div class="dev-inspector-ui">
              <button id="toggle">DEV INSPECTOR</button>
            </div>
          </body>
        </html>
        """
    )


def by_id(root: Element, element_id: str) -> Element:
    element = root.find(lambda node: node.get_attribute("id") == element_id)
    assert element is not None, element_id
    return element
