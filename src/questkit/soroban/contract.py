"""
Quest Manager entry points.

Single source of truth for the contract interface: argument names and kinds,
return kind, and whether the call mutates state (signed submission) or is
read-only (simulation).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Sequence

from stellar_sdk import xdr as stellar_xdr

from ..domain.errors import EncodingError
from .codec import ENCODERS, decode_value


@dataclass(frozen=True)
class EntryPoint:
    name: str
    args: tuple[tuple[str, str], ...]
    returns: str
    read_only: bool
    signer_role: str = "admin"

    @property
    def arg_names(self) -> tuple[str, ...]:
        return tuple(name for name, _ in self.args)

    def encode_args(self, values: Sequence[Any]) -> list[stellar_xdr.SCVal]:
        """
        Encode positional Python values into SCVal arguments.

        Values that are already SCVals are passed through unchanged.

        Raises:
            EncodingError: On arity mismatch or an unencodable value
        """
        if len(values) != len(self.args):
            raise EncodingError(
                f"{self.name} takes {len(self.args)} argument(s) "
                f"({', '.join(self.arg_names) or 'none'}), got {len(values)}"
            )
        encoded = []
        for (arg_name, kind), value in zip(self.args, values):
            if isinstance(value, stellar_xdr.SCVal):
                encoded.append(value)
                continue
            try:
                encoded.append(ENCODERS[kind](value))
            except EncodingError as exc:
                raise EncodingError(f"{self.name}({arg_name}): {exc}") from exc
        return encoded

    def decode_result(self, value: Any) -> Any:
        return decode_value(self.returns, value)


_QUEST_ID = ("quest_id", "u64")
_USER = ("user", "address")

ENTRY_POINTS: dict[str, EntryPoint] = {
    ep.name: ep
    for ep in (
        EntryPoint(
            "create_quest",
            (
                ("admin", "address"),
                ("reward_token", "address"),
                ("reward_per_winner", "u128"),
                ("max_winners", "u32"),
                ("distribution", "distribution"),
                ("quest_type", "quest_type"),
                ("duration_seconds", "u64"),
                ("reward_pool_amount", "u128"),
                ("title", "string"),
                ("description", "string"),
            ),
            returns="u64",
            read_only=False,
        ),
        EntryPoint("register", (_QUEST_ID, _USER), "void", False, signer_role="user"),
        EntryPoint("mark_user_eligible", (_QUEST_ID, _USER), "void", False),
        EntryPoint("resolve_quest", (_QUEST_ID,), "void", False),
        EntryPoint("distribute_rewards", (_QUEST_ID,), "void", False),
        EntryPoint("cancel_quest", (_QUEST_ID,), "void", False),
        EntryPoint("get_quest", (_QUEST_ID,), "quest", True),
        EntryPoint("get_active_quests", (), "quest_list", True),
        EntryPoint("get_participants", (_QUEST_ID,), "address_list", True),
        EntryPoint("get_winners", (_QUEST_ID,), "address_list", True),
        EntryPoint("is_user_registered", (_QUEST_ID, _USER), "bool", True),
        EntryPoint("get_user_quests", (_USER,), "u64_list", True),
        EntryPoint("get_quest_counter", (), "u64", True),
        EntryPoint("get_quest_stats", (_QUEST_ID,), "quest_stats", True),
        EntryPoint("get_user_stats", (_USER,), "user_stats", True),
    )
}

READ_ONLY_ENTRY_POINTS = tuple(name for name, ep in ENTRY_POINTS.items() if ep.read_only)


def entry_point(name: str) -> EntryPoint:
    try:
        return ENTRY_POINTS[name]
    except KeyError:
        raise EncodingError(f"Unknown Quest Manager entry point: {name!r}")
