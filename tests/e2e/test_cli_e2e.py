from __future__ import annotations

"""
End-to-End (E2E) CLI Tests.

Verifies the tool's external behavior by invoking the entry point script
via subprocess: exit codes, stream output (stdout/stderr) and the
document file artifact.
"""

import json
import os
import subprocess
import sys
from pathlib import Path
from typing import List, Optional

import yaml

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
SRC_DIR = PROJECT_ROOT / "src"
FIXTURES_DIR = PROJECT_ROOT / "tests" / "fixtures"
ENTRY_POINT = SRC_DIR / "confdoc" / "main.py"

sys.path.insert(0, str(FIXTURES_DIR))
from sample_app import EXPECTED_TEXT  # noqa: E402


def run_cli(args: List[str], cwd: Optional[Path] = None) -> subprocess.CompletedProcess[str]:
    """
    Execute the CLI in a separate process.

    Injects 'src' and the sample providers into PYTHONPATH so that neither
    needs to be installed.
    """
    env = os.environ.copy()
    env["PYTHONPATH"] = os.pathsep.join([str(SRC_DIR), str(FIXTURES_DIR), env.get("PYTHONPATH", "")])

    cmd = [sys.executable, str(ENTRY_POINT)] + args

    return subprocess.run(
        cmd,
        cwd=cwd,
        env=env,
        capture_output=True,
        text=True,
        encoding="utf-8"
    )


def test_e2e_text_tree_on_stdout():
    result = run_cli(["-c", "sample_app:AppConfig", "-b", "sample_app:blocks"])

    assert result.returncode == 0, result.stderr
    assert result.stdout == EXPECTED_TEXT + "\n"
    assert "name: root" in result.stderr


def test_e2e_document_file_yaml(tmp_path: Path):
    out_file = tmp_path / "docs" / "reference.yaml"

    result = run_cli([
        "-c", "sample_app:AppConfig",
        "-b", "sample_app:blocks",
        "--no-tree",
        "--no-document",
        "--document-file", str(out_file),
    ])

    assert result.returncode == 0, result.stderr
    assert result.stdout == ""
    assert "name: root" not in result.stderr

    document = yaml.safe_load(out_file.read_text(encoding="utf-8"))
    assert document["name"] == "root"
    server = next(b for b in document["fields"] if b["name"] == "server")
    assert server["root"] is True
    assert server["description"] == "Configures the HTTP/gRPC server."
    assert server["flag_prefix"] == ["server."]


def test_e2e_json_format(tmp_path: Path):
    out_file = tmp_path / "reference.json"

    result = run_cli([
        "-c", "sample_app:AppConfig",
        "--format", "json",
        "--no-tree",
        "--document-file", str(out_file),
    ])

    assert result.returncode == 0, result.stderr
    document = json.loads(out_file.read_text(encoding="utf-8"))
    target = document["fields"][0]
    assert target["name"] == "target"
    assert target["flag"] == "target"
    assert target["value"] is None
    assert target["description"] == "Module to run."


def test_e2e_bad_provider_exit_code():
    result = run_cli(["-c", "no_such_module_xyz:Config"])

    assert result.returncode == 2
    assert "ERROR:" in result.stderr
    assert result.stdout == ""


def test_e2e_registration_failure_exit_code():
    result = run_cli(["-c", "sample_app:AppConfig", "--register", "sample_app:register_duplicate"])

    assert result.returncode == 1
    assert "FlagRegistrationError" in result.stderr
    assert result.stdout == ""


def test_e2e_missing_config_argument():
    result = run_cli([])

    assert result.returncode == 2
    assert "--config" in result.stderr
