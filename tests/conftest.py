import os

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from PySide6.QtGui import QGuiApplication  # noqa: E402


@pytest.fixture(scope="session", autouse=True)
def qapp():
    app = QGuiApplication.instance() or QGuiApplication([])
    yield app
