"""Tests for command line dispatch and startup failures"""

import socket

from broadcast_relay import cli


def test_no_command_prints_usage(capsys):
    assert cli.main([]) == 1

    err = capsys.readouterr().err
    assert "Usage: broadcast-relay <start|connect>" in err


def test_unknown_command(capsys):
    assert cli.main(["serve"]) == 1

    err = capsys.readouterr().err
    assert "Unknown command: serve" in err
    assert "Usage: broadcast-relay <start|connect>" in err


def test_bad_flag_is_usage_error(capsys):
    assert cli.main(["start", "--port", "abc"]) == 1
    assert "Usage:" in capsys.readouterr().err


def test_bad_port_env_is_usage_error(monkeypatch, capsys):
    monkeypatch.setenv("PORT", "not-a-port")

    assert cli.main(["start"]) == 1
    assert "Invalid value for PORT" in capsys.readouterr().err


def test_start_on_busy_port_exits_1(monkeypatch):
    monkeypatch.setenv("RELAY_ENABLE_RICH_LOGGING", "false")
    with socket.socket() as busy:
        busy.bind(("127.0.0.1", 0))
        busy.listen()
        port = busy.getsockname()[1]

        assert cli.main(["start", "--host", "127.0.0.1", "--port", str(port)]) == 1


def test_connect_without_hub_exits_1(monkeypatch):
    monkeypatch.setenv("RELAY_ENABLE_RICH_LOGGING", "false")
    with socket.socket() as unused:
        unused.bind(("127.0.0.1", 0))
        port = unused.getsockname()[1]

    assert cli.main(["CONNECT", "--host", "127.0.0.1", "--port", str(port)]) == 1


def test_parser_accepts_mixed_case_commands():
    args = cli.build_parser().parse_args(["Start", "--port", "9001"])

    assert args.command == "Start"
    assert args.port == 9001


def test_unknown_command_is_reported_lowercased(capsys):
    assert cli.main(["SERVE"]) == 1
    assert "Unknown command: serve" in capsys.readouterr().err


def test_connect_failure_logged_once(monkeypatch, caplog):
    """Only the command line reports the failed connection at ERROR"""
    monkeypatch.setenv("RELAY_ENABLE_RICH_LOGGING", "false")
    with socket.socket() as unused:
        unused.bind(("127.0.0.1", 0))
        port = unused.getsockname()[1]

    assert cli.main(["connect", "--host", "127.0.0.1", "--port", str(port)]) == 1

    errors = [record for record in caplog.records if record.levelname == "ERROR"]
    assert len(errors) == 1
    assert errors[0].name == "broadcast_relay.cli"
    assert "CONN001" in errors[0].getMessage()
