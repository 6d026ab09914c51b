import logging

from plex_wrapped.logging_setup import setup_logging


def test_file_log_and_quiet_http_loggers(tmp_path) -> None:
    log_file = tmp_path / "logs" / "run.log"

    setup_logging(level="INFO", log_file=str(log_file), console_width=80, no_color=True)
    logging.getLogger("plex_wrapped.test").info("hello [bracketed] title")
    for handler in logging.getLogger().handlers:
        handler.flush()

    assert "hello [bracketed] title" in log_file.read_text(encoding="utf-8")
    assert logging.getLogger("urllib3").level == logging.WARNING

    setup_logging(level="DEBUG", console_width=80, no_color=True)
    assert logging.getLogger("urllib3").level == logging.NOTSET
    assert len(logging.getLogger().handlers) == 1
