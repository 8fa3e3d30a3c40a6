"""
QuestManagerClient - typed access to every Quest Manager entry point.

State-changing entry points are signed and submitted; read-only ones are
simulated. Both return an ``InvokeResult``. Configuration and argument
problems raise (``ConfigurationError`` / ``EncodingError``) before any network
request is made.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Optional, Sequence, Union

import httpx
from stellar_sdk import Keypair

from .config import NetworkConfig
from .domain.models import (
    DistributionType,
    InvokeResult,
    Participation,
    QuestType,
    make_quest_type,
)
from .signer.keys import get_keypair
from .soroban.contract import entry_point
from .soroban.tx import simulate_call, submit_invocation

log = logging.getLogger(__name__)

Signer = Union[Keypair, str, None]


class QuestManagerClient:
    """
    Client for one deployed Quest Manager contract.

    Args:
        config: Network configuration; loaded from the environment if omitted
        http_client: Optional httpx client reused for every request;
            closed by ``close()``
    """

    def __init__(
        self,
        config: Optional[NetworkConfig] = None,
        http_client: Optional[httpx.Client] = None,
    ) -> None:
        self.config = config or NetworkConfig.from_env()
        self._http = http_client

    def __enter__(self) -> "QuestManagerClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        if self._http is not None:
            self._http.close()
            self._http = None

    # ------------------------------------------------------------------
    # Generic paths
    # ------------------------------------------------------------------

    def _keypair(self, signer: Signer, role: str) -> Keypair:
        if isinstance(signer, Keypair):
            return signer
        return get_keypair(signer, role=role)

    def invoke(
        self,
        function_name: str,
        args: Sequence[Any] = (),
        signer: Signer = None,
        cancel: Optional[threading.Event] = None,
    ) -> InvokeResult:
        """
        Sign and submit a state-changing call.

        Args:
            function_name: Entry point name
            args: Positional Python (or SCVal) arguments
            signer: Keypair, S... secret, or None to load the entry point's role
            cancel: Event that aborts confirmation polling
        """
        ep = entry_point(function_name)
        self.config.validate()
        parameters = ep.encode_args(args)
        keypair = self._keypair(signer, ep.signer_role)
        log.debug("invoke %s as %s", function_name, keypair.public_key)
        return submit_invocation(
            self.config,
            keypair,
            function_name,
            parameters,
            decode=ep.decode_result,
            cancel=cancel,
            client=self._http,
        )

    def simulate(self, function_name: str, args: Sequence[Any] = ()) -> InvokeResult:
        """Simulate a call and decode its return value without submitting."""
        ep = entry_point(function_name)
        self.config.validate()
        parameters = ep.encode_args(args)
        log.debug("simulate %s", function_name)
        return simulate_call(
            self.config,
            function_name,
            parameters,
            decode=ep.decode_result,
            client=self._http,
        )

    # ------------------------------------------------------------------
    # Admin / user transactions
    # ------------------------------------------------------------------

    def create_quest(
        self,
        reward_token: str,
        reward_per_winner: int,
        max_winners: int,
        distribution: Union[str, DistributionType],
        quest_type: Union[QuestType, tuple],
        duration_seconds: int,
        reward_pool_amount: int,
        title: str,
        description: str,
        admin: Signer = None,
        cancel: Optional[threading.Event] = None,
    ) -> InvokeResult:
        """
        Create a quest; ``data`` of the result is the new quest id.

        ``quest_type`` is a variant instance or a ``(tag, *params)`` tuple,
        e.g. ``("TradeVolume", 10_000_000)``.
        """
        if isinstance(quest_type, tuple):
            quest_type = make_quest_type(*quest_type)
        keypair = self._keypair(admin, "admin")
        return self.invoke(
            "create_quest",
            [
                keypair.public_key,
                reward_token,
                reward_per_winner,
                max_winners,
                DistributionType.parse(distribution),
                quest_type,
                duration_seconds,
                reward_pool_amount,
                title,
                description,
            ],
            signer=keypair,
            cancel=cancel,
        )

    def register(self, quest_id: int, user: Signer = None, cancel: Optional[threading.Event] = None) -> InvokeResult:
        keypair = self._keypair(user, "user")
        return self.invoke("register", [quest_id, keypair.public_key], signer=keypair, cancel=cancel)

    def mark_user_eligible(
        self,
        quest_id: int,
        user_address: str,
        admin: Signer = None,
        cancel: Optional[threading.Event] = None,
    ) -> InvokeResult:
        return self.invoke("mark_user_eligible", [quest_id, user_address], signer=admin, cancel=cancel)

    def resolve_quest(self, quest_id: int, admin: Signer = None, cancel: Optional[threading.Event] = None) -> InvokeResult:
        return self.invoke("resolve_quest", [quest_id], signer=admin, cancel=cancel)

    def distribute_rewards(self, quest_id: int, admin: Signer = None, cancel: Optional[threading.Event] = None) -> InvokeResult:
        return self.invoke("distribute_rewards", [quest_id], signer=admin, cancel=cancel)

    def cancel_quest(self, quest_id: int, admin: Signer = None, cancel: Optional[threading.Event] = None) -> InvokeResult:
        return self.invoke("cancel_quest", [quest_id], signer=admin, cancel=cancel)

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    def get_quest(self, quest_id: int) -> InvokeResult:
        return self.simulate("get_quest", [quest_id])

    def get_active_quests(self) -> InvokeResult:
        return self.simulate("get_active_quests")

    def get_participants(self, quest_id: int) -> InvokeResult:
        return self.simulate("get_participants", [quest_id])

    def get_winners(self, quest_id: int) -> InvokeResult:
        return self.simulate("get_winners", [quest_id])

    def is_user_registered(self, quest_id: int, user_address: str) -> InvokeResult:
        return self.simulate("is_user_registered", [quest_id, user_address])

    def get_user_quests(self, user_address: str) -> InvokeResult:
        return self.simulate("get_user_quests", [user_address])

    def get_quest_counter(self) -> InvokeResult:
        return self.simulate("get_quest_counter")

    def get_quest_stats(self, quest_id: int) -> InvokeResult:
        return self.simulate("get_quest_stats", [quest_id])

    def get_user_stats(self, user_address: str) -> InvokeResult:
        return self.simulate("get_user_stats", [user_address])

    def get_participation(self, quest_id: int, user_address: str) -> InvokeResult:
        """
        Combine registration, participant and winner lists for one user.

        The first failing lookup is returned unchanged.
        """
        registered = self.is_user_registered(quest_id, user_address)
        if not registered.success:
            return registered
        participants = self.get_participants(quest_id)
        if not participants.success:
            return participants
        winners = self.get_winners(quest_id)
        if not winners.success:
            return winners

        is_winner = user_address in winners.data
        participation = Participation(
            quest_id=quest_id,
            user=user_address,
            registered=bool(registered.data),
            # FCFS quests record eligible users straight into the winners list
            eligible=is_winner or user_address in participants.data,
            winner=is_winner,
        )
        return InvokeResult.ok(data=participation)
