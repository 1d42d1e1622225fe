import logging

import pytest
from fastapi.testclient import TestClient

from bluedock_api.app.core.config import Settings
from bluedock_api.app.core.logging_config import CONSOLE_HANDLER_NAME, setup_logging
from bluedock_api.app.main import create_app


@pytest.fixture
def root_logger():
    root = logging.getLogger()
    level = root.level
    handlers = list(root.handlers)
    yield root
    for handler in root.handlers[:]:
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)


def _file_handlers(root, path):
    return [
        h for h in root.handlers
        if isinstance(h, logging.FileHandler) and h.baseFilename == str(path.resolve())
    ]


def test_log_file_and_level_from_settings(tmp_path, root_logger):
    log_file = tmp_path / "api.log"
    settings = Settings(
        database_url=str(tmp_path / "services.db"),
        log_level="INFO",
        log_file=str(log_file),
    )
    with TestClient(create_app(settings)) as client:
        response = client.post("/api/services", json={"customer_name": "Ana", "item_description": "Reel"})
        assert response.status_code == 201

    assert root_logger.level == logging.INFO
    for handler in _file_handlers(root_logger, log_file):
        handler.flush()
    content = log_file.read_text(encoding="utf-8")
    assert "Created service" in content
    assert "[INFO] bluedock_api.app.services.order_service" in content


def test_settings_apply_on_every_call(tmp_path, root_logger):
    setup_logging("WARNING")
    setup_logging("DEBUG")
    assert root_logger.level == logging.DEBUG
    consoles = [h for h in root_logger.handlers if h.get_name() == CONSOLE_HANDLER_NAME]
    assert len(consoles) == 1


def test_file_handler_is_added_once_per_path(tmp_path, root_logger):
    first = tmp_path / "first.log"
    second = tmp_path / "second.log"
    assert setup_logging("INFO", str(first)) is not None
    assert setup_logging("INFO", str(first)) is None
    assert setup_logging("INFO", str(second)) is not None
    assert len(_file_handlers(root_logger, first)) == 1
    assert len(_file_handlers(root_logger, second)) == 1


def test_unknown_level_falls_back_to_info(root_logger):
    setup_logging("chatty")
    assert root_logger.level == logging.INFO
