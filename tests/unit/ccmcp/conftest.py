from pathlib import Path

import pytest

import ccmcp.config
from ccmcp.logging.logger import LoggingConfig
from ccmcp.store.codec import EntryStoreCodec
from ccmcp.store.manager import ServerStateManager


@pytest.fixture(scope="function", autouse=True)
def reset_global_state():
    """Drop cached settings and logging handlers between tests"""
    yield
    ccmcp.config._settings = None
    LoggingConfig.shutdown()


@pytest.fixture
def host_path(tmp_path: Path) -> Path:
    return tmp_path / ".claude.json"


@pytest.fixture
def codec(tmp_path: Path, host_path: Path) -> EntryStoreCodec:
    return EntryStoreCodec(
        host_path=host_path,
        disabled_path=tmp_path / ".ccmcp" / "disabled.json",
        journal_path=tmp_path / ".ccmcp" / "journal.json",
    )


@pytest.fixture
def manager(codec: EntryStoreCodec) -> ServerStateManager:
    return ServerStateManager(codec)
