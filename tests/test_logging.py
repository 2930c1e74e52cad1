import logging
from movienight_core.logging_config import RedactionFilter, configure_logging


def test_redacts_token_fields():
    out = RedactionFilter.redact('body={"token": "abc123XYZ", "title": "Dune"}')
    assert "abc123XYZ" not in out
    assert "[REDACTED]" in out
    assert "Dune" in out


def test_redacts_query_and_header():
    assert RedactionFilter.redact("GET /x?token=s3cr3t&a=1") == "GET /x?token=[REDACTED]&a=1"
    assert "s3cr3t" not in RedactionFilter.redact("Authorization: Bearer s3cr3t")


def test_filter_formats_args():
    record = logging.LogRecord("t", logging.INFO, __file__, 1, "user token=%s", ("s3cr3t",), None)
    assert RedactionFilter().filter(record)
    assert record.getMessage() == "user token=[REDACTED]"


def test_configure_logging_from_template(tmp_path):
    ini = tmp_path / "logging.ini"
    ini.write_text(
        "[loggers]\nkeys=root\n\n[handlers]\nkeys=console\n\n[formatters]\nkeys=plain\n\n"
        "[logger_root]\nlevel=__LOG_LEVEL__\nhandlers=console\n\n"
        "[handler_console]\nclass=StreamHandler\nlevel=NOTSET\nformatter=plain\nargs=(sys.stderr,)\n\n"
        "[formatter_plain]\nformat=%(levelname)s %(message)s\n",
        encoding="utf-8",
    )
    configure_logging("warning", ini)
    root = logging.getLogger()
    assert root.level == logging.WARNING
    assert any(isinstance(f, RedactionFilter) for h in root.handlers for f in h.filters)
