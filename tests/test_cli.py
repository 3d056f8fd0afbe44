import asyncio

import pytest

from fsbench import cli


@pytest.fixture(autouse=True)
def no_signal_handlers(monkeypatch):
    monkeypatch.setattr(cli, "GracefulKiller", lambda on_kill=None: None)
    monkeypatch.setattr(cli, "setup_logging", lambda level="INFO", log_file=None: None)


def test_parse_args_defaults(monkeypatch):
    for name in ("FSBENCH_WORKERS", "FSBENCH_FILES", "FSBENCH_BLOCK_SIZE", "FSBENCH_FILE_SIZE"):
        monkeypatch.delenv(name, raising=False)
    args = cli.parse_args([])
    assert args.workers == 4
    assert args.files == 100
    assert args.block_size == 0
    assert args.file_size == 1048576
    assert args.directory_depth == 0
    assert args.max_file_size is None


def test_parse_args_reads_environment(monkeypatch):
    monkeypatch.setenv("FSBENCH_WORKERS", "8")
    monkeypatch.setenv("FSBENCH_FILES", "12")
    args = cli.parse_args(["-d", "2"])
    assert args.workers == 8
    assert args.files == 12
    assert args.directory_depth == 2


def test_run_in_memory(capsys):
    code = asyncio.run(
        cli.run(["--memory", "--no-progress", "-w", "2", "-f", "6", "-s", "8192", "-b", "4096"])
    )
    out = capsys.readouterr().out
    assert code == 0
    assert "Files: 6" in out
    assert "Errors: 0" in out
    assert "Size: 49.2 kB" in out


def test_run_writes_to_output_dir(tmp_path, capsys):
    code = asyncio.run(
        cli.run(["-o", str(tmp_path), "--no-progress", "-w", "1", "-f", "3", "-s", "100", "-d", "1"])
    )
    assert code == 0
    assert len([p for p in tmp_path.rglob("*.zero")]) == 3


def test_invalid_config_exits_with_2(capsys):
    code = asyncio.run(cli.run(["--memory", "-w", "0"]))
    assert code == 2


@pytest.mark.parametrize("bins", ["0", "-3"])
def test_histogram_bins_must_be_positive(bins):
    with pytest.raises(SystemExit):
        cli.parse_args(["--histogram-bins", bins])
