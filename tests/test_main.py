"""End-to-end tests for the command-line entry point."""
import json
import logging
import os
from unittest.mock import MagicMock, patch

import pytest

from ddsubmit.main import build_parser, log_level_value, main

ENV = {"API_KEY": "myApiKey", "APP_KEY": "myAppKey"}


@pytest.fixture
def api_cls():
    with patch("ddsubmit.submitter.ApiClient", MagicMock()), \
            patch("ddsubmit.submitter.MetricsApi") as api_cls:
        yield api_cls


def test_parser_accepts_single_dash_flags():
    parser = build_parser("~/.datadogrc", "INFO")
    args = parser.parse_intermixed_args(
        ["incr", "mycompany.temp", "98.6", "-tags=dc:us-east-1,env:prod", "-conf=/opt/rc", "-dry-run"]
    )
    assert args.args == ["incr", "mycompany.temp", "98.6"]
    assert args.tags == "dc:us-east-1,env:prod"
    assert args.conf == "/opt/rc"
    assert args.dry_run is True


def test_parser_accepts_negative_values():
    args = build_parser("~/.datadogrc", "INFO").parse_intermixed_args(["g", "m", "-0.242", "3"])
    assert args.args == ["g", "m", "-0.242", "3"]


def test_dry_run(capsys, api_cls):
    with patch.dict(os.environ, ENV):
        code = main(["-dry-run", "-tags=project:glory", "gauge", "vsco.my_metric", "58.274"])

    assert code == 0
    api_cls.assert_not_called()
    err = capsys.readouterr().err
    payload = json.loads(err.strip().splitlines()[-1])
    assert payload["metric"] == "vsco.my_metric"
    assert payload["type"] == "gauge"
    assert payload["tags"] == ["project:glory"]
    assert payload["points"][0][1] == 58.274


def test_live_run(api_cls):
    with patch.dict(os.environ, ENV):
        code = main(["c", "vsco.requests", "1"])

    assert code == 0
    api_cls.return_value.submit_metrics.assert_called_once()


def test_validation_error_exits_non_zero(caplog, api_cls):
    with patch.dict(os.environ, ENV):
        code = main(["gauge", "vsco.my_metric"])

    assert code == 1
    assert "error: not enough arguments" in caplog.text
    api_cls.assert_not_called()


def test_config_error_exits_non_zero(tmp_path, caplog, api_cls):
    env = {"DATADOG_CONF": str(tmp_path / "missing")}
    with patch.dict(os.environ, env, clear=True):
        code = main(["gauge", "m", "1"])

    assert code == 1
    assert "error: datadog configuration missing or inaccessible" in caplog.text
    api_cls.assert_not_called()


def test_credentials_from_conf_flag(tmp_path, api_cls):
    path = tmp_path / "datadogrc"
    path.write_text(json.dumps({"api_key": "a", "app_key": "b"}))
    os.chmod(path, 0o600)

    with patch.dict(os.environ, {}, clear=True):
        code = main([f"-conf={path}", "gauge", "m", "1"])

    assert code == 0
    api_cls.return_value.submit_metrics.assert_called_once()


@pytest.mark.parametrize("name,expected", [
    ("DEBUG", logging.DEBUG),
    ("info", logging.INFO),
    ("ERROR", logging.ERROR),
    ("CRITICAL", logging.ERROR),
    ("bogus", logging.INFO),
])
def test_log_level_never_hides_errors(name, expected):
    assert log_level_value(name) == expected


def test_error_reported_at_critical_log_level(caplog, api_cls):
    with patch.dict(os.environ, dict(ENV, LOG_LEVEL="CRITICAL")):
        code = main(["--log-level", "CRITICAL", "gauge", "m"])

    assert code == 1
    assert "error: not enough arguments" in caplog.text


def test_non_utf8_credentials_file_exits_non_zero(tmp_path, caplog, api_cls):
    path = tmp_path / "datadogrc"
    path.write_bytes(b"\xff\xfe")
    os.chmod(path, 0o600)

    with patch.dict(os.environ, {}, clear=True):
        code = main([f"-conf={path}", "-dry-run", "g", "m", "1"])

    assert code == 1
    assert "error: malformed datadog configuration" in caplog.text
