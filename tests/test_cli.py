from __future__ import annotations

import json
import os
import subprocess
import sys
from pathlib import Path

ROOT_DIR = Path(__file__).resolve().parents[1]


def _run_cli(tmp_path: Path, *args: str, env: dict[str, str] | None = None) -> subprocess.CompletedProcess[str]:
    settings_file = tmp_path / "configdoc.toml"
    if not settings_file.exists():
        settings_file.write_text('[logging]\nlevel = "WARNING"\n', encoding="utf-8")
    environ = {key: value for key, value in os.environ.items() if not key.startswith("CONFIGDOC__")}
    environ["PYTHONPATH"] = os.pathsep.join(filter(None, [str(ROOT_DIR), environ.get("PYTHONPATH")]))
    environ.update(env or {})
    cmd = [
        sys.executable,
        "-m",
        "configdoc",
        "--config",
        str(settings_file),
        *args,
    ]
    return subprocess.run(cmd, check=False, capture_output=True, text=True, env=environ, cwd=tmp_path)


def test_validate_success(tmp_path: Path) -> None:
    result = _run_cli(tmp_path, "--validate")
    assert result.returncode == 0
    assert "Settings OK" in result.stdout


def test_validate_failure_reports_error(tmp_path: Path) -> None:
    (tmp_path / "configdoc.toml").write_text('[logging]\nlevel = "LOUD"\n', encoding="utf-8")
    result = _run_cli(tmp_path, "--validate")
    assert result.returncode == 1
    assert result.stderr.startswith("error: ")
    assert "logging.level" in result.stderr
    assert "file" in result.stderr


def test_describe_reference_configuration(tmp_path: Path) -> None:
    result = _run_cli(tmp_path, "--describe")
    assert result.returncode == 0, result.stderr
    payload = json.loads(result.stdout)
    names = [block["name"] for block in payload["blocks"]]
    assert names[0] == ""
    assert "grpc_client" in names
    grpc_client = payload["blocks"][names.index("grpc_client")]
    assert grpc_client["flag_prefixes"] == ["ingester.client", "querier.store-gateway-client"]


def test_describe_applies_category_overrides(tmp_path: Path) -> None:
    (tmp_path / "configdoc.toml").write_text(
        '[category_overrides]\n"querier.max-concurrent" = "experimental"\n',
        encoding="utf-8",
    )
    result = _run_cli(tmp_path, "--describe", "configdoc.reference:QuerierConfig", "--roots", "configdoc.reference:ROOT_BLOCKS")
    assert result.returncode == 0, result.stderr
    top = json.loads(result.stdout)["blocks"][0]
    max_concurrent = next(entry for entry in top["entries"] if entry["name"] == "max_concurrent")
    assert max_concurrent["category"] == "experimental"
    assert max_concurrent["flag"] == "querier.max-concurrent"


def test_describe_unknown_target_fails(tmp_path: Path) -> None:
    result = _run_cli(tmp_path, "--describe", "configdoc.nowhere:Config")
    assert result.returncode == 1
    assert "error: Cannot import configdoc.nowhere" in result.stderr


def test_describe_rejects_non_registry_roots(tmp_path: Path) -> None:
    result = _run_cli(tmp_path, "--describe", "--roots", "configdoc.reference:Config")
    assert result.returncode == 1
    assert "is not a root block registry" in result.stderr


def test_explain_reports_source(tmp_path: Path) -> None:
    (tmp_path / ".env").write_text("CONFIGDOC__TARGET=configdoc.reference:LimitsConfig\n", encoding="utf-8")
    result = _run_cli(tmp_path, "--explain", "target")
    assert result.returncode == 0, result.stderr
    assert "configdoc.reference:LimitsConfig" in result.stdout
    assert "CONFIGDOC__TARGET" in result.stdout


def test_dump_defaults_and_sources(tmp_path: Path) -> None:
    result = _run_cli(tmp_path, "--dump-defaults")
    assert result.returncode == 0
    assert "[logging]" in result.stdout

    result = _run_cli(tmp_path, "--show-sources", env={"CONFIGDOC__LOGGING__LEVEL": "INFO"})
    assert result.returncode == 0
    assert "Active settings sources:" in result.stdout
    assert "environment prefix: CONFIGDOC__*" in result.stdout
