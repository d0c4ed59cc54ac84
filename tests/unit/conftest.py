"""Shared fixtures: a sqlite database per test and a job service on it."""

import sys
from pathlib import Path

import pytest

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent.parent / "src"))

from offline_sync.datamodel.available_offline_sync_storage import AvailableOfflineSyncStorageManager
from offline_sync.global_const import global_const
from offline_sync.scheduling.job_service import PeriodicJobService, build_scheduler
from offline_sync.utils.create_table import create_tables
from offline_sync.utils.exception_listener import clear_job_status


@pytest.fixture
def engine(tmp_path):
    """Engine on a fresh sqlite file with the client tables created"""
    engine = global_const.create_local_engine(f"sqlite:///{tmp_path / 'client.db'}")
    create_tables(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def local_engine(monkeypatch, engine):
    """Make the process-wide local engine point at the test database"""
    monkeypatch.setattr(global_const, "_local_engine", engine)
    return engine


@pytest.fixture
def storage_manager(engine):
    return AvailableOfflineSyncStorageManager(engine)


@pytest.fixture
def job_service(engine):
    """Job service started paused: jobs are stored but never executed"""
    service = PeriodicJobService(scheduler=build_scheduler(engine))
    service.start(paused=True)
    yield service
    service.shutdown(wait=False)


@pytest.fixture(autouse=True)
def _reset_job_status():
    clear_job_status()
    yield
    clear_job_status()
