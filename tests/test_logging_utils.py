import logging

from adawat.logging_utils import configure_logging


def test_configure_logging_honours_env_override(monkeypatch, tmp_path):
    target_dir = tmp_path / "logs"
    monkeypatch.setenv("ADAWAT_LOG_DIR", str(target_dir))

    log_path = configure_logging("unit_test", include_console=False)
    logging.getLogger(__name__).info("env override works")

    assert log_path == target_dir / "unit_test.log"
    assert "env override works" in log_path.read_text()


def test_configure_logging_replaces_previous_handlers(tmp_path):
    first_dir = tmp_path / "logs"
    second_dir = tmp_path / "alt_logs"

    first_path = configure_logging("first_run", log_dir=first_dir, include_console=False)
    logging.getLogger(__name__).info("first run entry")
    assert "first run entry" in first_path.read_text()

    second_path = configure_logging(
        "second_run", log_dir=second_dir, include_console=False
    )
    logging.getLogger(__name__).info("second run entry")
    assert "second run entry" in second_path.read_text()
    assert "second run entry" not in first_path.read_text()


def test_configure_logging_reads_level_from_env(monkeypatch, tmp_path):
    monkeypatch.setenv("ADAWAT_LOG_LEVEL", "warning")

    log_path = configure_logging("level_env", log_dir=tmp_path, include_console=False)
    logging.getLogger(__name__).info("quiet entry")
    logging.getLogger(__name__).warning("loud entry")

    text = log_path.read_text()
    assert logging.getLogger().level == logging.WARNING
    assert "loud entry" in text
    assert "quiet entry" not in text


def test_configure_logging_keeps_httpx_at_warning(monkeypatch, tmp_path):
    monkeypatch.delenv("ADAWAT_LOG_LEVEL", raising=False)

    configure_logging("httpx_level", log_dir=tmp_path, include_console=False)

    assert logging.getLogger().level == logging.INFO
    assert logging.getLogger("httpx").level == logging.WARNING
