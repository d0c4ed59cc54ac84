"""
Unit tests for the offline-sync command line
"""

import argparse

import pytest

from offline_sync.datamodel.available_offline_sync_storage import AvailableOfflineSyncStorageManager
from offline_sync.datamodel.data_models import OfflineFile
from offline_sync.scheduling import platform
from offline_sync.scripts import offline_sync_cli
from offline_sync.scripts.offline_sync_cli import main, non_negative_int, parse_file_arg


class TestParseFileArg:

    def test_remote_only(self):
        assert parse_file_arg("/a.txt") == OfflineFile("/a.txt")

    def test_remote_and_local(self):
        assert parse_file_arg("/a.txt=/home/u/a.txt") == OfflineFile("/a.txt", "/home/u/a.txt")

    def test_empty_remote_rejected(self):
        with pytest.raises(argparse.ArgumentTypeError):
            parse_file_arg("=/home/u/a.txt")


class TestNonNegativeInt:

    def test_accepts_zero_and_positive(self):
        assert non_negative_int("0") == 0
        assert non_negative_int("5000") == 5000

    @pytest.mark.parametrize("value", ["-5", "soon", "1.5"])
    def test_rejects_invalid(self, value):
        with pytest.raises(argparse.ArgumentTypeError):
            non_negative_int(value)


class TestCommands:

    def test_schedule_then_list_jobs(self, local_engine, capsys):
        assert main(["schedule", "--account", "alice", "--file", "/a.txt=/tmp/a.txt", "--file", "/b.txt"]) == 0

        assert AvailableOfflineSyncStorageManager(local_engine).get_available_offline_sync() is not None

        assert main(["jobs"]) == 0
        out = capsys.readouterr().out
        assert "AVAILABLE_OFFLINE" in out

    def test_schedule_on_unsupported_platform(self, local_engine, monkeypatch):
        monkeypatch.setattr(offline_sync_cli, "supports_periodic_jobs", lambda: False)

        assert main(["schedule", "--account", "alice"]) == 1
        assert AvailableOfflineSyncStorageManager(local_engine).get_available_offline_sync() is None

    def test_show_and_set_checkpoint(self, local_engine, capsys):
        assert main(["show-checkpoint"]) == 1
        assert main(["set-last-sync", "5000"]) == 1

        AvailableOfflineSyncStorageManager(local_engine).create_available_offline_sync(1000)

        assert main(["set-last-sync", "5000"]) == 0
        assert main(["show-checkpoint"]) == 0
        assert capsys.readouterr().out.splitlines()[-1].startswith("5000 ")

    def test_set_last_sync_rejects_negative(self, local_engine, capsys):
        AvailableOfflineSyncStorageManager(local_engine).create_available_offline_sync(1000)

        with pytest.raises(SystemExit) as exc_info:
            main(["set-last-sync", "-5"])

        assert exc_info.value.code == 2
        assert "must not be negative" in capsys.readouterr().err
        checkpoint = AvailableOfflineSyncStorageManager(local_engine).get_available_offline_sync()
        assert checkpoint.available_offline_last_sync == 1000

    def test_cancel(self, local_engine, capsys):
        main(["schedule", "--account", "alice"])

        assert main(["cancel"]) == 0
        main(["jobs"])
        assert "no jobs" in capsys.readouterr().out

    def test_command_required(self):
        with pytest.raises(SystemExit):
            main([])


def test_platform_probe_is_the_cli_gate():
    assert offline_sync_cli.supports_periodic_jobs is platform.supports_periodic_jobs
