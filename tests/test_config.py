"""Unit tests for NetworkConfig."""

from __future__ import annotations

import os
from pathlib import Path
from unittest.mock import patch

import pytest
from stellar_sdk import Network, StrKey

from questkit.config import (
    DEFAULT_CONFIRM_TIMEOUT,
    DEFAULT_RPC_URL,
    DEFAULT_SIMULATION_SOURCE,
    NetworkConfig,
    load_env,
)
from questkit.domain.errors import ConfigurationError

CONTRACT = StrKey.encode_contract(bytes(32))

_VARS = (
    "STELLAR_RPC_URL",
    "STELLAR_NETWORK_PASSPHRASE",
    "QUEST_MANAGER_CONTRACT_ID",
    "QUEST_SIMULATION_SOURCE",
    "QUEST_TX_TIMEOUT",
    "QUEST_POLL_INTERVAL",
)


@pytest.fixture()
def clean_env():
    with patch.dict(os.environ):
        for var in _VARS:
            os.environ.pop(var, None)
        yield


class TestFromEnv:
    def test_defaults(self, clean_env) -> None:
        config = NetworkConfig.from_env(load=False)
        assert config.rpc_url == DEFAULT_RPC_URL
        assert config.network_passphrase == Network.TESTNET_NETWORK_PASSPHRASE
        assert config.contract_id == ""
        assert config.simulation_source == DEFAULT_SIMULATION_SOURCE
        assert config.confirm_timeout == DEFAULT_CONFIRM_TIMEOUT

    def test_values(self, clean_env) -> None:
        os.environ.update({
            "STELLAR_RPC_URL": "http://localhost:8000/soroban/rpc",
            "QUEST_MANAGER_CONTRACT_ID": f"  {CONTRACT} ",
            "QUEST_TX_TIMEOUT": "15",
            "QUEST_POLL_INTERVAL": "0.5",
        })
        config = NetworkConfig.from_env(load=False)
        assert config.rpc_url == "http://localhost:8000/soroban/rpc"
        assert config.contract_id == CONTRACT
        assert config.confirm_timeout == 15.0
        assert config.poll_interval == 0.5

    @pytest.mark.parametrize("raw", ["soon", "0", "-3"])
    def test_bad_timeout(self, clean_env, raw: str) -> None:
        os.environ["QUEST_TX_TIMEOUT"] = raw
        with pytest.raises(ConfigurationError, match="QUEST_TX_TIMEOUT"):
            NetworkConfig.from_env(load=False)

    def test_load_env_file(self, clean_env, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.chdir(tmp_path)
        env_file = tmp_path / "questkit.env"
        env_file.write_text(f"QUEST_MANAGER_CONTRACT_ID={CONTRACT}\n", encoding="utf-8")
        load_env(env_file)
        assert os.environ["QUEST_MANAGER_CONTRACT_ID"] == CONTRACT

    def test_load_env_does_not_override(self, clean_env, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.chdir(tmp_path)
        os.environ["STELLAR_RPC_URL"] = "http://already.set"
        env_file = tmp_path / "questkit.env"
        env_file.write_text("STELLAR_RPC_URL=http://from.file\n", encoding="utf-8")
        load_env(env_file)
        assert os.environ["STELLAR_RPC_URL"] == "http://already.set"


class TestOverridesAndValidate:
    def test_with_overrides_ignores_none(self) -> None:
        config = NetworkConfig(contract_id=CONTRACT)
        updated = config.with_overrides(rpc_url="http://other", contract_id=None)
        assert updated.rpc_url == "http://other"
        assert updated.contract_id == CONTRACT
        assert config.rpc_url == DEFAULT_RPC_URL

    def test_validate_ok(self) -> None:
        config = NetworkConfig(contract_id=CONTRACT)
        assert config.validate() is config

    def test_missing_contract(self) -> None:
        with pytest.raises(ConfigurationError, match="not set"):
            NetworkConfig().validate()

    def test_malformed_contract(self) -> None:
        with pytest.raises(ConfigurationError, match="not a valid contract"):
            NetworkConfig(contract_id="CNOTACONTRACT").validate()

    def test_account_is_not_a_contract(self) -> None:
        account = "GAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAWHF"
        with pytest.raises(ConfigurationError):
            NetworkConfig(contract_id=account).validate()

    def test_bad_simulation_source(self) -> None:
        with pytest.raises(ConfigurationError, match="QUEST_SIMULATION_SOURCE"):
            NetworkConfig(contract_id=CONTRACT, simulation_source="nobody").validate()
