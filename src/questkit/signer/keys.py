"""
Stellar ed25519 key management for the Quest Manager client.

Two signing roles are used by the contract:
- admin: creates quests, marks eligibility, resolves, distributes, cancels
- user:  registers in quests

Secrets are read from the environment (ADMIN_SECRET_KEY, USER1_SECRET_KEY),
optionally loaded from ~/.questkit/.env. Only presence and seed validity are
checked; nothing is fetched from the network here.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from stellar_sdk import Keypair, StrKey

from ..config import QUESTKIT_ENV
from ..domain.errors import ConfigurationError

ROLE_ENV_VARS: dict[str, str] = {
    "admin": "ADMIN_SECRET_KEY",
    "user": "USER1_SECRET_KEY",
}


def _env_var(role: str) -> str:
    try:
        return ROLE_ENV_VARS[role]
    except KeyError:
        raise ConfigurationError(
            f"Unknown signing role: {role!r} (expected one of {', '.join(ROLE_ENV_VARS)})"
        )


def generate_keypair() -> tuple[str, str]:
    """
    Generate a new ed25519 keypair.

    Returns:
        Tuple of (secret_seed, public_key)
        - secret_seed: S... strkey
        - public_key: G... strkey
    """
    keypair = Keypair.random()
    return keypair.secret, keypair.public_key


def save_secret(role: str, secret: str, env_path: Optional[Path] = None) -> Path:
    """
    Save a role's secret seed to a .env file.

    Args:
        role: "admin" or "user"
        secret: S... secret seed
        env_path: Path to .env file (default: ~/.questkit/.env)

    Returns:
        Path to the saved .env file
    """
    var = _env_var(role)
    if not StrKey.is_valid_ed25519_secret_seed(secret):
        raise ConfigurationError(f"Refusing to save invalid secret seed for {var}")

    env_path = env_path or QUESTKIT_ENV
    env_path.parent.mkdir(parents=True, exist_ok=True)

    existing = {}
    if env_path.exists():
        for line in env_path.read_text(encoding="utf-8").splitlines():
            line = line.strip()
            if line and not line.startswith("#") and "=" in line:
                k, v = line.split("=", 1)
                existing[k.strip()] = v.strip()

    existing[var] = secret

    lines = [f"{k}={v}" for k, v in existing.items()]
    env_path.write_text("\n".join(lines) + "\n", encoding="utf-8")

    if os.name != "nt":
        env_path.chmod(0o600)

    return env_path


def load_secret(role: str = "admin", env_path: Optional[Path] = None) -> str:
    """
    Load a role's secret seed from the environment or .env file.

    Raises:
        ConfigurationError: If the variable is missing or not a valid seed
    """
    var = _env_var(role)
    env_path = env_path or QUESTKIT_ENV

    if not os.environ.get(var) and env_path.exists():
        load_dotenv(env_path, override=False)

    secret = (os.environ.get(var) or "").strip()
    if not secret:
        raise ConfigurationError(
            f"{var} not set. Run 'questkit keygen --role {role}' or set "
            f"{var} in {env_path}"
        )
    if not StrKey.is_valid_ed25519_secret_seed(secret):
        raise ConfigurationError(f"{var} is not a valid secret seed")
    return secret


def get_keypair(secret: Optional[str] = None, role: str = "admin") -> Keypair:
    """
    Get a signing Keypair.

    Args:
        secret: S... secret seed. If None, loads the role's secret.
        role: Role to load when no secret is given

    Returns:
        Keypair able to sign transactions
    """
    if secret is None:
        secret = load_secret(role)
    elif not StrKey.is_valid_ed25519_secret_seed(secret):
        raise ConfigurationError("Provided secret is not a valid secret seed")
    return Keypair.from_secret(secret)


def get_address(secret: Optional[str] = None, role: str = "admin") -> str:
    """Get the G... account address for a secret (or the role's secret)."""
    return get_keypair(secret, role).public_key
