"""
Quest Manager data model.

Python mirrors of the contract's ``#[contracttype]`` structures. Values are
built from the plain values produced by ``questkit.soroban.codec.to_python``
(dicts keyed by field name, lists for enum variants).
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, ClassVar, Optional, Union

from .errors import EncodingError, InvokeError


class DistributionType(str, Enum):
    RAFFLE = "Raffle"
    FCFS = "Fcfs"

    @classmethod
    def parse(cls, value: Union[str, "DistributionType"]) -> "DistributionType":
        if isinstance(value, DistributionType):
            return value
        for member in cls:
            if str(value).lower() == member.value.lower():
                return member
        raise EncodingError(f"Unknown distribution type: {value!r} (expected Raffle or Fcfs)")

    @classmethod
    def from_native(cls, value: Any) -> "DistributionType":
        # Unit enum variants arrive as a one-element vec: ["Raffle"]
        if isinstance(value, list) and value:
            value = value[0]
        return cls.parse(value)


@dataclass(frozen=True)
class TradeVolume:
    target_volume: int

    tag: ClassVar[str] = "TradeVolume"

    def values(self) -> tuple[Any, ...]:
        return (self.target_volume,)


@dataclass(frozen=True)
class PoolPosition:
    min_position: int

    tag: ClassVar[str] = "PoolPosition"

    def values(self) -> tuple[Any, ...]:
        return (self.min_position,)


@dataclass(frozen=True)
class TokenHold:
    token: str
    min_amount: int

    tag: ClassVar[str] = "TokenHold"

    def values(self) -> tuple[Any, ...]:
        return (self.token, self.min_amount)


QuestType = Union[TradeVolume, PoolPosition, TokenHold]

QUEST_TYPE_VARIANTS: dict[str, type] = {
    TradeVolume.tag: TradeVolume,
    PoolPosition.tag: PoolPosition,
    TokenHold.tag: TokenHold,
}


def make_quest_type(tag: str, *params: Any) -> QuestType:
    """
    Build a quest type variant from its tag and positional parameters.

    Raises:
        EncodingError: If the tag is unknown or the parameter count is wrong
    """
    variant = QUEST_TYPE_VARIANTS.get(tag)
    if variant is None:
        for name, candidate in QUEST_TYPE_VARIANTS.items():
            if name.lower() == str(tag).lower():
                variant = candidate
                break
    if variant is None:
        raise EncodingError(
            f"Unsupported quest type: {tag!r} "
            f"(expected one of {', '.join(QUEST_TYPE_VARIANTS)})"
        )
    try:
        return variant(*params)
    except TypeError as exc:
        raise EncodingError(f"Bad parameters for {variant.tag}: {exc}") from exc


def quest_type_from_native(value: Any) -> QuestType:
    if not isinstance(value, list) or not value:
        raise EncodingError(f"Malformed QuestType value: {value!r}")
    tag, *params = value
    return make_quest_type(tag, *params)


@dataclass(frozen=True)
class Quest:
    id: int
    admin: str
    reward_token: str
    reward_per_winner: int
    max_winners: int
    distribution: DistributionType
    quest_type: QuestType
    end_timestamp: int
    is_active: bool
    total_reward_pool: int
    title: str
    description: str

    @classmethod
    def from_native(cls, data: dict[str, Any]) -> "Quest":
        return cls(
            id=int(data["id"]),
            admin=data["admin"],
            reward_token=data["reward_token"],
            reward_per_winner=int(data["reward_per_winner"]),
            max_winners=int(data["max_winners"]),
            distribution=DistributionType.from_native(data["distribution"]),
            quest_type=quest_type_from_native(data["quest_type"]),
            end_timestamp=int(data["end_timestamp"]),
            is_active=bool(data["is_active"]),
            total_reward_pool=int(data["total_reward_pool"]),
            title=data["title"],
            description=data["description"],
        )


@dataclass(frozen=True)
class QuestStats:
    quest_id: int
    total_registered: int
    total_eligible: int
    total_winners: int
    is_resolved: bool
    time_remaining: int

    @classmethod
    def from_native(cls, data: dict[str, Any]) -> "QuestStats":
        return cls(
            quest_id=int(data["quest_id"]),
            total_registered=int(data["total_registered"]),
            total_eligible=int(data["total_eligible"]),
            total_winners=int(data["total_winners"]),
            is_resolved=bool(data["is_resolved"]),
            time_remaining=int(data["time_remaining"]),
        )


@dataclass(frozen=True)
class UserStats:
    """Per-user totals. ``win_rate`` is in basis points (2500 = 25%)."""
    total_participated: int
    total_won: int
    total_rewards: int
    win_rate: int

    @classmethod
    def from_native(cls, data: dict[str, Any]) -> "UserStats":
        return cls(
            total_participated=int(data["total_participated"]),
            total_won=int(data["total_won"]),
            total_rewards=int(data["total_rewards"]),
            win_rate=int(data["win_rate"]),
        )

    @property
    def win_rate_percent(self) -> float:
        return self.win_rate / 100


@dataclass(frozen=True)
class Participation:
    """A user's standing in one quest, assembled from read-only calls."""
    quest_id: int
    user: str
    registered: bool
    eligible: bool
    winner: bool


@dataclass(frozen=True)
class InvokeResult:
    """
    Normalized outcome of a simulation or a submitted transaction.

    ``success`` is True only when the network reported success. ``data`` is
    the decoded return value, ``error`` the failure, ``hash`` the transaction
    hash (submissions only), ``status`` the last status seen.
    """
    success: bool
    data: Any = None
    error: Optional[InvokeError] = None
    hash: Optional[str] = None
    status: Optional[str] = None

    @classmethod
    def ok(cls, data: Any = None, hash: Optional[str] = None, status: Optional[str] = None) -> "InvokeResult":
        return cls(success=True, data=data, hash=hash, status=status)

    @classmethod
    def fail(
        cls,
        error: InvokeError,
        hash: Optional[str] = None,
        status: Optional[str] = None,
    ) -> "InvokeResult":
        return cls(success=False, error=error, hash=hash, status=status)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"success": self.success}
        if self.data is not None:
            result["data"] = self.data
        if self.error is not None:
            result["error"] = self.error.to_dict()
        if self.hash is not None:
            result["hash"] = self.hash
        return result


__all__ = [
    "DistributionType",
    "InvokeResult",
    "Participation",
    "PoolPosition",
    "QUEST_TYPE_VARIANTS",
    "Quest",
    "QuestStats",
    "QuestType",
    "TokenHold",
    "TradeVolume",
    "UserStats",
    "make_quest_type",
    "quest_type_from_native",
]
