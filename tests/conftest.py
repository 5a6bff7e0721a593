from __future__ import annotations

import pytest

from consolidator import create_app
from consolidator.config import Config


@pytest.fixture
def template_folder(tmp_path):
    folder = tmp_path / "templates"
    folder.mkdir()
    return folder


@pytest.fixture
def app(tmp_path, template_folder):
    class TestConfig(Config):
        TESTING = True
        TEMPLATE_FOLDER = str(template_folder)
        UPLOAD_FOLDER = str(tmp_path / "uploads")
        SKIPPED_HEADER_LIMIT = 2

    return create_app(TestConfig)


@pytest.fixture
def client(app):
    return app.test_client()
