import logging

from resale_inventory.logging import ROOT_LOGGER_NAME, get_logger, level_from_env


def test_loggers_share_package_handlers():
    first = get_logger("alpha")
    get_logger("beta")
    package = logging.getLogger(ROOT_LOGGER_NAME)
    handler_count = len(package.handlers)

    again = get_logger("alpha")

    assert first is again
    assert first.name == "resale_inventory.alpha"
    assert not first.handlers
    assert handler_count >= 1
    assert len(package.handlers) == handler_count
    assert package.propagate is False


def test_level_from_env_values(monkeypatch):
    assert level_from_env("debug") == logging.DEBUG
    assert level_from_env("WARN") == logging.WARNING
    assert level_from_env("30") == 30
    assert level_from_env("chatty") == logging.INFO

    monkeypatch.setenv("LOG_LEVEL", "error")
    assert level_from_env() == logging.ERROR
