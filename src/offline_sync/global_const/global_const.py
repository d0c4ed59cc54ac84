"""
@Project ：offline_sync
@File    ：global_const.py
@Desc     : settings, paths and the local database engine
"""

import os
from pathlib import Path
import sys

import sqlalchemy
from dynaconf import Dynaconf
from loguru import logger

BASE_DIR = Path(__file__).absolute().parent.parent


def ensure_src_path():
    """Make sure the src directory is importable (scripts run from a checkout)."""
    src_path = str(BASE_DIR.parent)
    if src_path not in sys.path:
        sys.path.insert(0, src_path)
    return BASE_DIR


def _str_to_bool(value: str) -> bool:
    """Convert string to boolean, treating 'true' (case insensitive) as True, everything else as False"""
    return str(value).lower() == "true"


def get_environment() -> str:
    """Current environment name"""
    return "production" if _str_to_bool(os.environ.get("prod", "false")) else "development"


env = get_environment()

config_dir_path = BASE_DIR / "configs"
logger.debug(f"[CONFIG] settings directory: {config_dir_path}")

settings = Dynaconf(
    root_path=str(BASE_DIR),
    envvar_prefix="OFFLINE_SYNC",
    environments=True,
    env=env,
    merge_enabled=True,
    settings_files=[
        str(config_dir_path / "settings.toml"),
        str(config_dir_path / ".secrets.toml"),
    ],
)

DATA_DIR = Path(settings.get("data_dir", BASE_DIR.parent.parent / "data"))


def get_database_url() -> str:
    """Database url from settings, defaulting to a sqlite file under DATA_DIR"""
    url = settings.get("database.url")
    if url:
        return url
    return f"sqlite:///{DATA_DIR / 'offline_sync.db'}"


def create_local_engine(url: str = None) -> sqlalchemy.engine.Engine:
    """
    Create the engine for the local client database.

    The sqlite file's parent directory is created on demand; nothing connects
    until the engine is first used.
    """
    url = url or get_database_url()
    if url.startswith("sqlite:///") and url != "sqlite:///:memory:":
        Path(url[len("sqlite:///"):]).parent.mkdir(parents=True, exist_ok=True)

    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    return sqlalchemy.create_engine(
        url,
        pool_pre_ping=True,          # check the connection before handing it out
        connect_args=connect_args,   # job threads share the engine
        echo=bool(settings.get("database.echo", False)),
        future=True,
    )


_local_engine = None


def get_local_engine() -> sqlalchemy.engine.Engine:
    """Process-wide engine, created lazily"""
    global _local_engine
    if _local_engine is None:
        _local_engine = create_local_engine()
        logger.info(f"[CONFIG] local database: {_local_engine.url}")
    return _local_engine
