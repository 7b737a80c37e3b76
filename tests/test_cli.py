import pytest
from pathlib import Path

from kubereserve.cli.main import KubeReserveCLI
from kubereserve.host.cpus import CPU_COUNT_ENV, detect_cpu_count

SAMPLE = (Path(__file__).parent / "fixtures" / "gke-kubelet-config.yaml").read_bytes()


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "kubelet-config.yaml"
    path.write_bytes(SAMPLE)
    return path


def test_show_is_read_only(config_file):
    assert KubeReserveCLI().run(["show", str(config_file), "--cpus", "16"]) == 0
    assert config_file.read_bytes() == SAMPLE


def test_apply_dry_run_with_diff(config_file):
    code = KubeReserveCLI().run(["apply", str(config_file), "--cpus", "16", "--dry-run", "--diff"])
    assert code == 0
    assert config_file.read_bytes() == SAMPLE


def test_apply_confirmed_writes(config_file):
    code = KubeReserveCLI().run(["apply", str(config_file), "--cpus", "8", "-y", "--no-backup"])
    assert code == 0
    assert b"cpu: 90m" in config_file.read_bytes()


def test_apply_declined_leaves_file(config_file, monkeypatch):
    monkeypatch.setattr("kubereserve.cli.main.console.input", lambda prompt: "n")
    assert KubeReserveCLI().run(["apply", str(config_file), "--cpus", "8"]) == 1
    assert config_file.read_bytes() == SAMPLE


def test_apply_reads_cpu_count_from_environment(config_file, monkeypatch):
    monkeypatch.setenv(CPU_COUNT_ENV, "64")
    assert KubeReserveCLI().run(["apply", str(config_file), "-y"]) == 0
    assert b"cpu: 230m" in config_file.read_bytes()


def test_missing_file_fails(tmp_path):
    assert KubeReserveCLI().run(["show", str(tmp_path / "missing.yaml"), "--cpus", "4"]) == 1


def test_negative_cpus_rejected(config_file):
    assert KubeReserveCLI().run(["apply", str(config_file), "--cpus", "-2", "-y"]) == 2
    assert config_file.read_bytes() == SAMPLE


@pytest.mark.parametrize("environ,expected", [
    ({CPU_COUNT_ENV: "12"}, 12),
    ({CPU_COUNT_ENV: " 0 "}, 0),
    ({CPU_COUNT_ENV: "lots"}, 7),
    ({CPU_COUNT_ENV: "-3"}, 7),
    ({}, 7),
])
def test_detect_cpu_count(environ, expected, monkeypatch):
    monkeypatch.setattr("kubereserve.host.cpus.os.cpu_count", lambda: 7)
    assert detect_cpu_count(environ) == expected
