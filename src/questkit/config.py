"""
Network configuration for the Quest Manager client.

Values come from the process environment, after ``.env`` files are loaded
(./.env first, then ~/.questkit/.env, neither overriding variables that are
already set).
"""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from stellar_sdk import Network, StrKey

from .domain.errors import ConfigurationError

# Default config directory
QUESTKIT_DIR = Path.home() / ".questkit"
QUESTKIT_ENV = QUESTKIT_DIR / ".env"

DEFAULT_RPC_URL = "https://soroban-testnet.stellar.org"
DEFAULT_NETWORK_PASSPHRASE = Network.TESTNET_NETWORK_PASSPHRASE

# Placeholder account used as the source of read-only simulations
DEFAULT_SIMULATION_SOURCE = "GAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAWHF"

BASE_FEE = 100_000
TX_VALIDITY_SECONDS = 30
DEFAULT_CONFIRM_TIMEOUT = 60.0
DEFAULT_POLL_INTERVAL = 1.0


def load_env(env_path: Optional[Path] = None) -> None:
    """Load .env files into the process environment."""
    load_dotenv(Path.cwd() / ".env", override=False)
    path = env_path or QUESTKIT_ENV
    if path.exists():
        load_dotenv(path, override=False)


def _float_env(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}")
    if value <= 0:
        raise ConfigurationError(f"{name} must be positive, got {raw!r}")
    return value


@dataclass(frozen=True)
class NetworkConfig:
    """
    Where and how to reach the Quest Manager contract.

    Attributes:
        rpc_url: Soroban JSON-RPC endpoint
        network_passphrase: Network passphrase used when signing
        contract_id: Deployed contract address (C... strkey)
        simulation_source: Account used as source of read-only simulations
        confirm_timeout: Seconds to wait for a submitted transaction
        poll_interval: Seconds between confirmation polls
    """
    rpc_url: str = DEFAULT_RPC_URL
    network_passphrase: str = DEFAULT_NETWORK_PASSPHRASE
    contract_id: str = ""
    simulation_source: str = DEFAULT_SIMULATION_SOURCE
    confirm_timeout: float = DEFAULT_CONFIRM_TIMEOUT
    poll_interval: float = DEFAULT_POLL_INTERVAL

    @classmethod
    def from_env(cls, load: bool = True) -> "NetworkConfig":
        """
        Build a config from the environment.

        The contract id is not required here so that commands which never
        touch the contract (key generation, health checks) still work; call
        ``validate()`` before contract calls.
        """
        if load:
            load_env()
        return cls(
            rpc_url=os.environ.get("STELLAR_RPC_URL") or DEFAULT_RPC_URL,
            network_passphrase=(
                os.environ.get("STELLAR_NETWORK_PASSPHRASE") or DEFAULT_NETWORK_PASSPHRASE
            ),
            contract_id=(os.environ.get("QUEST_MANAGER_CONTRACT_ID") or "").strip(),
            simulation_source=(
                os.environ.get("QUEST_SIMULATION_SOURCE") or DEFAULT_SIMULATION_SOURCE
            ),
            confirm_timeout=_float_env("QUEST_TX_TIMEOUT", DEFAULT_CONFIRM_TIMEOUT),
            poll_interval=_float_env("QUEST_POLL_INTERVAL", DEFAULT_POLL_INTERVAL),
        )

    def with_overrides(self, **changes: object) -> "NetworkConfig":
        """Return a copy with the non-None keyword values replaced."""
        updates = {k: v for k, v in changes.items() if v is not None}
        return replace(self, **updates)

    def validate(self) -> "NetworkConfig":
        """
        Check the configuration before any network I/O.

        Raises:
            ConfigurationError: If the contract id or simulation source is
                missing or malformed
        """
        if not self.contract_id:
            raise ConfigurationError(
                "QUEST_MANAGER_CONTRACT_ID not set. Export it or add it to "
                f".env / {QUESTKIT_ENV}."
            )
        if not StrKey.is_valid_contract(self.contract_id):
            raise ConfigurationError(
                f"QUEST_MANAGER_CONTRACT_ID is not a valid contract address: {self.contract_id}"
            )
        if not StrKey.is_valid_ed25519_public_key(self.simulation_source):
            raise ConfigurationError(
                f"QUEST_SIMULATION_SOURCE is not a valid account: {self.simulation_source}"
            )
        if not self.rpc_url:
            raise ConfigurationError("STELLAR_RPC_URL is empty")
        return self
