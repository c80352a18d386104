# SPDX-FileCopyrightText: AISEC Pentesting Team
#
# SPDX-License-Identifier: Apache-2.0

import json
from collections.abc import Iterator
from pathlib import Path
from typing import Any

import exitcode
import pytest
import zstandard

from tinyargs.cli import build_parser, run
from tinyargs.config import Config
from tinyargs.log import stop_logging


@pytest.fixture(autouse=True)
def workdir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[Path]:
    monkeypatch.delenv("TINYARGS_CONFIG", raising=False)
    monkeypatch.chdir(tmp_path)
    yield tmp_path
    stop_logging()


@pytest.fixture
def source(workdir: Path) -> Path:
    path = workdir.joinpath("input.bin")
    path.write_bytes(bytes(range(256)) * 10)
    return path


def test_copy(source: Path, workdir: Path) -> None:
    target = workdir.joinpath("copy.bin")

    assert run(["tinyargs-copy", "-i", str(source), "--output", str(target), "-b", "100"]) == exitcode.OK
    assert target.read_bytes() == source.read_bytes()


def test_copy_default_output(source: Path, workdir: Path) -> None:
    assert run(["tinyargs-copy", "--input", str(source), "--verbose"]) == exitcode.OK
    assert workdir.joinpath("output.txt").read_bytes() == source.read_bytes()


def test_dry_run(source: Path, workdir: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert run(["tinyargs-copy", "-i", str(source), "-d"]) == exitcode.OK

    assert "dry run - would process" in capsys.readouterr().out
    assert not workdir.joinpath("output.txt").exists()


def test_help(capsys: pytest.CaptureFixture[str]) -> None:
    assert run(["tinyargs-copy", "--help"]) == exitcode.OK

    out = capsys.readouterr().out
    assert out == build_parser(Config()).format_help()
    assert out.startswith("Available arguments:\n  --input, -i <string> (required)\n")


def test_missing_input_prints_help(capsys: pytest.CaptureFixture[str]) -> None:
    assert run(["tinyargs-copy", "-v"]) == exitcode.USAGE

    err = capsys.readouterr().err
    assert "missing required argument --input" in err
    assert "Available arguments:" in err


def test_invalid_buffer_size(source: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert run(["tinyargs-copy", "-i", str(source), "-b", "big"]) == exitcode.USAGE
    assert "buffer size must be a valid integer" in capsys.readouterr().err


def test_zero_buffer_size(source: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert run(["tinyargs-copy", "-i", str(source), "-b", "0"]) == exitcode.USAGE
    assert "buffer size must be positive" in capsys.readouterr().err


def test_unknown_argument(source: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert run(["tinyargs-copy", "-i", str(source), "--force"]) == exitcode.USAGE
    assert "unknown argument --force" in capsys.readouterr().err


def test_missing_input_file(workdir: Path) -> None:
    missing = workdir.joinpath("missing.bin")

    assert run(["tinyargs-copy", "-i", str(missing)]) == exitcode.IOERR


def test_config_defaults(source: Path, workdir: Path) -> None:
    workdir.joinpath("tinyargs.toml").write_text(
        """[tinyargs.defaults]
output = "configured.bin"
buffer-size = 7
"""
    )

    assert run(["tinyargs-copy", "-i", str(source)]) == exitcode.OK
    assert workdir.joinpath("configured.bin").read_bytes() == source.read_bytes()


def test_config_strict_rejects_bad_default(
    source: Path, workdir: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    workdir.joinpath("tinyargs.toml").write_text(
        """[tinyargs]
strict = true

[tinyargs.defaults]
buffer-size = "huge"
"""
    )

    assert run(["tinyargs-copy", "-i", str(source)]) == exitcode.CONFIG
    assert "invalid config" in capsys.readouterr().err


def test_config_non_strict_bad_default(
    source: Path, workdir: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    workdir.joinpath("tinyargs.toml").write_text(
        """[tinyargs.defaults]
buffer-size = "huge"
"""
    )

    assert run(["tinyargs-copy", "-i", str(source)]) == exitcode.USAGE
    assert "buffer size must be a valid integer" in capsys.readouterr().err


def test_invalid_config_file(workdir: Path) -> None:
    workdir.joinpath("tinyargs.toml").write_text("[tinyargs\n")

    assert run(["tinyargs-copy", "-i", "x"]) == exitcode.CONFIG


def test_config_env_missing(workdir: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TINYARGS_CONFIG", str(workdir.joinpath("absent.toml")))

    assert run(["tinyargs-copy", "-i", "x"]) == exitcode.CONFIG


def read_log(path: Path) -> list[dict[str, Any]]:
    raw = path.read_bytes()
    if path.suffix == ".zst":
        raw = zstandard.ZstdDecompressor().decompressobj().decompress(raw)
    return [json.loads(line) for line in raw.decode().splitlines()]


@pytest.mark.parametrize("filename", ["copy.log", "copy.log.zst"])
def test_log_file(source: Path, workdir: Path, filename: str) -> None:
    log_path = workdir.joinpath(filename)

    assert run(["tinyargs-copy", "-i", str(source), "-l", str(log_path)]) == exitcode.OK

    records = {r["data"]: r["levelname"] for r in read_log(log_path)}
    assert records["configuration:"] == "DEBUG"
    assert records["successfully processed 2560 total bytes"] == "NOTICE"


def test_log_file_unwritable(source: Path, workdir: Path) -> None:
    log_path = workdir.joinpath("missing", "copy.log")

    assert run(["tinyargs-copy", "-i", str(source), "--log-file", str(log_path)]) == exitcode.IOERR


def test_parser_logs_reach_console(
    source: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setenv("TINYARGS_LOGLEVEL", "debug")

    assert run(["tinyargs-copy", "-i", str(source), "-d"]) == exitcode.OK
    stop_logging()

    assert "--output defaults to 'output.txt'" in capsys.readouterr().err


def test_verbose_logs_configuration(source: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert run(["tinyargs-copy", "-i", str(source), "-d", "-v"]) == exitcode.OK
    stop_logging()

    assert "buffer size: 1024 bytes" in capsys.readouterr().err
