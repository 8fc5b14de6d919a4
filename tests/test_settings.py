import logging
from pathlib import Path

import pytest

from hyperlane_relayer._internal.config import DEFAULT_IMAGE, DEFAULT_SETTLE_SECONDS, load_settings
from hyperlane_relayer._internal.logging import PACKAGE_LOGGER, configure_logging


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch):
    for name in ("DATA_DIR", "IMAGE", "SETTLE_SECONDS", "TEST_NETWORK", "KEYSTORE_PATH", "SIGNER_KEY", "PORT"):
        monkeypatch.delenv(f"HYPERLANE_RELAYER_{name}", raising=False)


def test_defaults():
    settings = load_settings()

    assert settings.data_dir == Path("data")
    assert settings.image == DEFAULT_IMAGE
    assert settings.settle_seconds == DEFAULT_SETTLE_SECONDS
    assert settings.test_network is None
    assert settings.port == 8878
    assert settings.resolved_keystore_path == Path("data") / "keystore" / "ecdsa.key"


def test_environment_overrides(monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
    monkeypatch.setenv("HYPERLANE_RELAYER_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("HYPERLANE_RELAYER_TEST_NETWORK", "hyperlane_relayer_test_net")
    monkeypatch.setenv("HYPERLANE_RELAYER_KEYSTORE_PATH", str(tmp_path / "key"))

    settings = load_settings()

    assert settings.data_dir == tmp_path
    assert settings.test_network == "hyperlane_relayer_test_net"
    assert settings.resolved_keystore_path == tmp_path / "key"


def test_explicit_values_win_and_none_is_ignored(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("HYPERLANE_RELAYER_PORT", "9000")

    assert load_settings(port=9100).port == 9100
    assert load_settings(port=None).port == 9000


def test_invalid_settings_raise_runtime_error():
    with pytest.raises(RuntimeError, match="Invalid relayer settings"):
        load_settings(settle_seconds=-1)


def test_signer_key_is_not_shown_in_repr():
    settings = load_settings(signer_key="ab" * 32)

    assert "ab" * 32 not in repr(settings)


def test_configure_logging_writes_to_file(tmp_path: Path):
    log_file = tmp_path / "relayer.log"

    configure_logging(log_file=str(log_file), log_level="DEBUG", force=True)
    try:
        logging.getLogger("hyperlane_relayer.store").debug("staged")
        for handler in logging.getLogger(PACKAGE_LOGGER).handlers:
            handler.flush()
        assert "hyperlane_relayer.store - DEBUG - staged" in log_file.read_text()
    finally:
        configure_logging(log_file="", force=True)


def test_signing_keys_are_masked_in_logs(tmp_path: Path):
    log_file = tmp_path / "relayer.log"
    secret = "ab" * 32

    configure_logging(log_file=str(log_file), log_level="INFO", force=True)
    try:
        logging.getLogger("hyperlane_relayer.container").info("cmd: --defaultSigner.key %s", f"0x{secret}")
        logging.getLogger("hyperlane_relayer.container").info("Container %s is active", "c" * 64)
        for handler in logging.getLogger(PACKAGE_LOGGER).handlers:
            handler.flush()
        content = log_file.read_text()
        assert secret not in content
        assert "--defaultSigner.key <redacted>" in content
        assert "c" * 64 in content
    finally:
        configure_logging(log_file="", force=True)
