"""Root conftest for the letsgo test suite."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

# ---------------------------------------------------------------------------
# Make ``src/`` importable without installing the package
# ---------------------------------------------------------------------------
_SRC = str(Path(__file__).resolve().parent.parent / "src")
if _SRC not in sys.path:
    sys.path.insert(0, _SRC)

from letsgo.config.raw import RawConfiguration  # noqa: E402
from tests.helpers import make_stores  # noqa: E402


@pytest.fixture()
def stores():
    return make_stores("XXXXX")


@pytest.fixture()
def raw_config(tmp_path: Path) -> RawConfiguration:
    """A complete, valid raw configuration rooted in *tmp_path*."""
    return RawConfiguration(
        account_email="support@example.com",
        account_key_file=str(tmp_path / "account.key"),
        domains="example.com,www.example.com",
        output_directory=str(tmp_path / "certs"),
        dns_auth_token="XXXXX",
    )


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Remove letsgo environment variables inherited from the host."""
    from letsgo.config import constants as c

    for name in (
        c.DOMAINS,
        c.FILENAME,
        c.ACCOUNT_EMAIL,
        c.ACCOUNT_KEY_FILE,
        c.LE_TOS_AGREED,
        c.CA_DIR,
        c.LE_CRT_KEY_TYPE,
        c.OUTPUT_DIRECTORY,
        c.DISABLE_CP,
        c.DNS_TIMEOUT,
        c.DNS_RESOLVERS,
        c.DNS_AUTH_TOKEN,
        c.DNS_AUTH_TOKEN_FILE,
        c.DNS_AUTH_TOKEN_VAULT,
        c.DNS_AUTH_TOKEN_SECRET,
        c.WEB_ROOT,
        c.WEB_ENABLED,
        c.LOG_LEVEL,
        c.LOG_FORMAT,
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture()
def config(raw_config, stores):
    """A resolved configuration whose bundle lives under *tmp_path*."""
    from letsgo.config import resolve

    return resolve(raw_config, stores)


@pytest.fixture(autouse=True)
def reset_letsgo_logger():
    """Undo ``configure_logging`` so that ``caplog`` keeps working."""
    yield
    import logging

    logger = logging.getLogger("letsgo")
    logger.handlers.clear()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
