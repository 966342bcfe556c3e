"""Tests for ``python -m examine``."""
from __future__ import annotations

import logging
import sys
from pathlib import Path

import pytest

from examine.__main__ import main
from examine.logging_config import LOGGER_NAME


@pytest.fixture(autouse=True)
def _clean_environment(monkeypatch: pytest.MonkeyPatch):
    for name in ("EXAMINE_ENV", "EXAMINE_ENVIRONMENTS", "EXAMINE_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    yield
    logger = logging.getLogger(LOGGER_NAME)
    for handler in logger.handlers[:]:
        handler.close()
        logger.removeHandler(handler)
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


def _script(tmp_path: Path, body: str) -> Path:
    script = tmp_path / "program.py"
    script.write_text(body, encoding="utf-8")
    return script


def test_runs_script_with_arguments(tmp_path, monkeypatch, capsys) -> None:
    monkeypatch.chdir(tmp_path)
    script = _script(
        tmp_path,
        "import sys\nimport examine\n\nexamine.inspect(sys.argv[1:], measure=False)\n",
    )

    assert main([str(script), "--flag", "value"]) == 0

    err = capsys.readouterr().err.splitlines()
    assert err == ["./program.py:4", "", "  sys.argv[1:] #=> ['--flag', 'value']"]


def test_missing_script_prints_usage(tmp_path, capsys) -> None:
    assert main([str(tmp_path / "missing.py")]) == 2
    assert "Usage: python -m examine" in capsys.readouterr().err


def test_no_arguments_prints_usage(capsys) -> None:
    assert main([]) == 2
    assert "Usage" in capsys.readouterr().err


def test_exit_code_is_preserved(tmp_path) -> None:
    assert main([str(_script(tmp_path, "raise SystemExit(3)\n"))]) == 3
    assert main([str(_script(tmp_path, "import sys\nsys.exit()\n"))]) == 0
    assert main([str(_script(tmp_path, "raise SystemExit('failed')\n"))]) == 1


def test_env_option_closes_the_gate(tmp_path, capsys) -> None:
    script = _script(tmp_path, "import examine\nexamine.inspect(1)\n")

    assert main(["--examine-env", "prod", str(script)]) == 0
    assert capsys.readouterr().err == ""


def test_interpreter_state_is_restored(tmp_path) -> None:
    script = _script(tmp_path, "import sys\nassert sys.argv[0].endswith('program.py')\n")
    argv, path = list(sys.argv), list(sys.path)

    assert main([str(script)]) == 0
    assert sys.argv == argv
    assert sys.path == path


def test_log_file_receives_debug_messages(tmp_path) -> None:
    script = _script(tmp_path, "import examine\nvalue = examine.inspect(1)\n")
    log_file = tmp_path / "examine.log"

    assert main(
        [
            "--examine-env=prod",
            "--examine-log-level=DEBUG",
            f"--examine-log-file={log_file}",
            str(script),
        ]
    ) == 0

    text = log_file.read_text(encoding="utf-8")
    assert "instrumentation disabled for env 'prod'" in text
    assert " - examine.transform - DEBUG - " in text
