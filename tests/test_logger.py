# tests/test_logger.py
import os
import subprocess
import sys
from pathlib import Path

SRC = Path(__file__).resolve().parents[1] / "src"


def test_importing_the_application_creates_no_log_file(tmp_path):
    env = {k: v for k, v in os.environ.items() if k != "LOG_FILE"}
    env["PYTHONPATH"] = os.pathsep.join([str(SRC), env.get("PYTHONPATH", "")])

    subprocess.run(
        [sys.executable, "-c", "import delivery_ledger.cli.ledger_cli"],
        cwd=tmp_path,
        env=env,
        check=True,
    )

    assert not (tmp_path / "logs").exists()


def test_get_logger_attaches_handlers_once():
    from delivery_ledger.utils.logger import get_logger

    logger = get_logger("delivery_ledger.tests")
    again = get_logger("delivery_ledger.tests")

    assert logger is again
    assert len(logger.handlers) == 2
