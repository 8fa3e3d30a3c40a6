"""
Errors for the Quest Manager client.

Two families live here:

- ``QuestError``: the closed set of error codes the contract can raise
  (``Error(Contract, #N)`` in host errors), decoded at the boundary so callers
  branch on kind instead of parsing strings.
- ``QuestClientError`` and subclasses: local failures raised by this package.
  Each carries an ``exit_code`` used by the CLI.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Any, Optional


class QuestError(IntEnum):
    QUEST_NOT_FOUND = 1
    QUEST_NOT_ACTIVE = 2
    QUEST_EXPIRED = 3
    QUEST_NOT_FINISHED = 4
    QUEST_ALREADY_RESOLVED = 5
    QUEST_NOT_RESOLVED = 6
    ALREADY_REGISTERED = 7
    USER_NOT_REGISTERED = 8
    INVALID_MAX_WINNERS = 9
    INVALID_REWARD_AMOUNT = 10
    INSUFFICIENT_REWARD_POOL = 11
    INVALID_DURATION = 12
    NO_WINNERS = 13
    UNAUTHORIZED = 14
    INSUFFICIENT_BALANCE = 15

    @property
    def description(self) -> str:
        return _DESCRIPTIONS[self]

    @classmethod
    def from_code(cls, code: int) -> Optional["QuestError"]:
        try:
            return cls(code)
        except ValueError:
            return None


_DESCRIPTIONS: dict[QuestError, str] = {
    QuestError.QUEST_NOT_FOUND: "Quest does not exist",
    QuestError.QUEST_NOT_ACTIVE: "Quest is not active",
    QuestError.QUEST_EXPIRED: "Quest has expired",
    QuestError.QUEST_NOT_FINISHED: "Quest has not reached its end time",
    QuestError.QUEST_ALREADY_RESOLVED: "Quest was already resolved",
    QuestError.QUEST_NOT_RESOLVED: "Quest must be resolved first",
    QuestError.ALREADY_REGISTERED: "User is already registered",
    QuestError.USER_NOT_REGISTERED: "User is not registered in this quest",
    QuestError.INVALID_MAX_WINNERS: "max_winners must be greater than zero",
    QuestError.INVALID_REWARD_AMOUNT: "reward_per_winner must be greater than zero",
    QuestError.INSUFFICIENT_REWARD_POOL: "Reward pool is smaller than reward_per_winner * max_winners",
    QuestError.INVALID_DURATION: "duration_seconds must be greater than zero",
    QuestError.NO_WINNERS: "Quest has no winners to pay",
    QuestError.UNAUTHORIZED: "Caller is not authorized",
    QuestError.INSUFFICIENT_BALANCE: "Admin balance cannot cover the reward pool",
}

# Soroban host errors render contract failures as "Error(Contract, #7)"
_CONTRACT_ERROR_RE = re.compile(r"Error\(\s*Contract\s*,\s*#(\d+)\s*\)")


def parse_contract_error(text: Optional[str]) -> Optional[QuestError]:
    """Extract the contract error code from a host error / diagnostic string."""
    if not text:
        return None
    match = _CONTRACT_ERROR_RE.search(text)
    if match is None:
        return None
    return QuestError.from_code(int(match.group(1)))


class ErrorKind(str, Enum):
    CONFIGURATION = "configuration"
    TRANSPORT = "transport"
    RPC = "rpc"
    CONTRACT = "contract"
    REJECTED = "rejected"
    FAILED = "failed"
    TIMEOUT = "timeout"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class InvokeError:
    """
    Failure payload of an ``InvokeResult``.

    Attributes:
        kind: Broad failure category
        message: Human-readable summary
        code: Decoded contract error, when the failure came from the contract
        raw: Untouched payload from the network (host error text or result XDR)
    """
    kind: ErrorKind
    message: str
    code: Optional[QuestError] = None
    raw: Optional[str] = None

    def __str__(self) -> str:
        if self.code is not None:
            return f"{self.code.name} ({int(self.code)}): {self.code.description}"
        return self.message

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"kind": self.kind.value, "message": self.message}
        if self.code is not None:
            result["code"] = int(self.code)
            result["name"] = self.code.name
        if self.raw is not None:
            result["raw"] = self.raw
        return result


class QuestClientError(RuntimeError):
    exit_code: int = 1


class ConfigurationError(QuestClientError):
    exit_code = 2


class EncodingError(QuestClientError, ValueError):
    exit_code = 3


class RpcError(QuestClientError):
    exit_code = 4

    def __init__(self, method: str, code: Optional[int], message: str, data: Any = None) -> None:
        super().__init__(f"RPC error in {method}: {message} (code {code})")
        self.method = method
        self.code = code
        self.rpc_message = message
        self.data = data


class AccountNotFoundError(QuestClientError):
    exit_code = 5


class SimulationError(QuestClientError):
    exit_code = 6

    def __init__(self, message: str, raw: Optional[str] = None) -> None:
        super().__init__(message)
        self.raw = raw
        self.contract_error = parse_contract_error(raw or message)


class ConfirmationTimeout(QuestClientError):
    exit_code = 7


class ConfirmationCancelled(QuestClientError):
    exit_code = 8


__all__ = [
    "AccountNotFoundError",
    "ConfigurationError",
    "ConfirmationCancelled",
    "ConfirmationTimeout",
    "EncodingError",
    "ErrorKind",
    "InvokeError",
    "QuestClientError",
    "QuestError",
    "RpcError",
    "SimulationError",
    "parse_contract_error",
]
