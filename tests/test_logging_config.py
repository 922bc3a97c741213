import pytest
from loguru import logger

from swa_scraper.logging_config import setup_logging


@pytest.fixture
def restore_logger():
    yield
    logger.remove()


def test_results_on_stdout_diagnostics_on_stderr(capsys, restore_logger):
    setup_logging()

    logger.info("Flight # 1234, Nonstop, 6:00AM,7:20AM @ $79")
    logger.warning("Throttled 1 time(s)")
    logger.debug("Extracted 1 flights (1 priced) for SJC - BUR")

    captured = capsys.readouterr()
    assert "Flight # 1234" in captured.out
    assert "Throttled" not in captured.out
    assert "Throttled" in captured.err
    assert "WARNING" in captured.err
    assert "Flight # 1234" not in captured.err
    assert "Extracted" not in captured.out


def test_verbose_prints_debug_records(capsys, restore_logger):
    setup_logging(verbose=True)

    logger.debug("Extracted 1 flights (1 priced) for SJC - BUR")

    assert "Extracted 1 flights" in capsys.readouterr().out


def test_log_file_keeps_every_level(tmp_path, capsys, restore_logger):
    log_file = tmp_path / "logs" / "run.log"
    setup_logging(log_file=log_file)

    logger.debug("stage NAVIGATED")
    logger.warning("Throttled 1 time(s)")
    logger.remove()

    text = log_file.read_text()
    assert "stage NAVIGATED" in text
    assert "WARNING" in text
