import os

# Must be set before the first Qt import.
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest  # noqa: E402
from PyQt6.QtGui import QFontDatabase, QGuiApplication  # noqa: E402


@pytest.fixture(scope="session", autouse=True)
def qapp():
    """One QGuiApplication for the whole run (fonts, painters and timers need it)."""
    app = QGuiApplication.instance() or QGuiApplication(["glyphswarm-tests"])
    yield app


@pytest.fixture
def require_fonts(qapp):
    """Skip tests that rasterize glyphs when Qt cannot find any font."""
    if not QFontDatabase.families():
        pytest.skip("no fonts available to Qt in this environment")
