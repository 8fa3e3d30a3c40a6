"""
CLI integration tests using Click's test runner.

Tests verify that the CLI commands work end-to-end via the Click
CliRunner, without requiring network access or a deployed contract.
"""

from __future__ import annotations

import os
from pathlib import Path
from unittest.mock import patch

import pytest
from click.testing import CliRunner
from stellar_sdk import Keypair, StrKey

from questkit.cli import cli
from questkit.client import QuestManagerClient
from questkit.domain.errors import ErrorKind, InvokeError, QuestError
from questkit.domain.models import (
    DistributionType,
    InvokeResult,
    Quest,
    QuestStats,
    TradeVolume,
    UserStats,
)
from questkit.soroban.codec import to_python

CONTRACT = StrKey.encode_contract(bytes(32))

_VARS = (
    "ADMIN_SECRET_KEY",
    "USER1_SECRET_KEY",
    "QUEST_MANAGER_CONTRACT_ID",
    "STELLAR_RPC_URL",
    "STELLAR_NETWORK_PASSPHRASE",
    "QUEST_TX_TIMEOUT",
    "QUEST_POLL_INTERVAL",
    "REWARD_TOKEN_ADDRESS",
)


@pytest.fixture()
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture()
def questkit_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    """Isolated ~/.questkit, working directory and environment."""
    home = tmp_path / ".questkit"
    home.mkdir()
    env_path = home / ".env"
    monkeypatch.chdir(tmp_path)
    with patch("questkit.config.QUESTKIT_ENV", env_path), \
            patch("questkit.signer.keys.QUESTKIT_ENV", env_path), \
            patch.dict(os.environ):
        for var in _VARS:
            os.environ.pop(var, None)
        yield home


@pytest.fixture()
def admin(questkit_home: Path) -> Keypair:
    keypair = Keypair.random()
    os.environ["ADMIN_SECRET_KEY"] = keypair.secret
    return keypair


@pytest.fixture()
def user(questkit_home: Path) -> Keypair:
    keypair = Keypair.random()
    os.environ["USER1_SECRET_KEY"] = keypair.secret
    return keypair


@pytest.fixture()
def contract(questkit_home: Path) -> str:
    os.environ["QUEST_MANAGER_CONTRACT_ID"] = CONTRACT
    return CONTRACT


def _views(responses: dict):
    """Stand-in for simulate_call answering by entry point name."""
    def fake(config, function_name, parameters, decode=None, client=None):
        return responses[function_name]
    return fake


def _submitted(mock_submit) -> tuple[str, str, list]:
    keypair, function_name, parameters = mock_submit.call_args.args[1:4]
    return keypair.public_key, function_name, [to_python(p) for p in parameters]


def _line(output: str, label: str) -> str:
    return next(line for line in output.splitlines() if label in line)


def _quest(quest_id: int = 0) -> Quest:
    return Quest(
        id=quest_id,
        admin=Keypair.random().public_key,
        reward_token=CONTRACT,
        reward_per_winner=1_000_000,
        max_winners=5,
        distribution=DistributionType.RAFFLE,
        quest_type=TradeVolume(10_000_000),
        end_timestamp=4_102_444_800,
        is_active=True,
        total_reward_pool=5_000_000,
        title="Weekly Volume Challenge",
        description="Trade 10 tokens worth of volume",
    )


class TestVersionAndInfo:
    def test_version(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert "0.1.0" in result.output

    def test_help_lists_commands(self, runner: CliRunner, questkit_home: Path) -> None:
        result = runner.invoke(cli, [])
        assert result.exit_code == 0
        for command in ("create", "register", "mark-eligible", "resolve", "distribute", "cancel", "list"):
            assert command in result.output

    def test_info(self, runner: CliRunner, questkit_home: Path) -> None:
        with patch("questkit.soroban.rpc.get_health", return_value={"status": "healthy"}), \
                patch("questkit.soroban.rpc.get_latest_ledger", return_value=123456), \
                patch("questkit.soroban.rpc.get_network", return_value={"protocolVersion": 22}):
            result = runner.invoke(cli, ["info"])

        assert result.exit_code == 0
        assert "Q U E S T K I T" in result.output
        assert "healthy" in result.output
        assert "123456" in result.output
        assert "not set" in result.output

    def test_bad_timeout(self, runner: CliRunner, questkit_home: Path) -> None:
        result = runner.invoke(cli, ["--timeout", "0", "list"])
        assert result.exit_code == 2


class TestKeys:
    def test_keygen(self, runner: CliRunner, questkit_home: Path) -> None:
        result = runner.invoke(cli, ["keygen", "--role", "admin"])
        assert result.exit_code == 0
        assert "SUCCESS: admin key created" in result.output
        assert "ADMIN_SECRET_KEY=S" in (questkit_home / ".env").read_text(encoding="utf-8")

    def test_keygen_keeps_existing(self, runner: CliRunner, admin: Keypair) -> None:
        result = runner.invoke(cli, ["keygen"])
        assert result.exit_code == 0
        assert "already set" in result.output
        assert admin.public_key in result.output

    def test_whoami(self, runner: CliRunner, admin: Keypair) -> None:
        result = runner.invoke(cli, ["whoami"])
        assert result.exit_code == 0
        assert f"Address: {admin.public_key}" in result.output

    def test_whoami_without_key(self, runner: CliRunner, questkit_home: Path) -> None:
        result = runner.invoke(cli, ["whoami", "--role", "user"])
        assert result.exit_code == 1
        assert "questkit keygen --role user" in result.output


class TestPreconditions:
    def test_missing_contract_id(self, runner: CliRunner, questkit_home: Path) -> None:
        with patch("questkit.soroban.rpc._rpc_call") as mock_rpc:
            result = runner.invoke(cli, ["list"])
        assert result.exit_code == 2
        assert "ERROR: QUEST_MANAGER_CONTRACT_ID not set" in result.output
        mock_rpc.assert_not_called()

    def test_missing_admin_key(self, runner: CliRunner, contract: str) -> None:
        with patch("questkit.soroban.rpc._rpc_call") as mock_rpc:
            result = runner.invoke(cli, ["resolve", "0"])
        assert result.exit_code == 2
        assert "ADMIN_SECRET_KEY not set" in result.output
        mock_rpc.assert_not_called()

    def test_contract_id_option(self, runner: CliRunner, questkit_home: Path) -> None:
        with patch("questkit.soroban.rpc._rpc_call") as mock_rpc:
            result = runner.invoke(cli, ["--contract-id", "CBOGUS", "list"])
        assert result.exit_code == 2
        assert "not a valid contract address" in result.output
        mock_rpc.assert_not_called()

    def test_token_hold_requires_token(self, runner: CliRunner, admin: Keypair, contract: str) -> None:
        result = runner.invoke(cli, [
            "create",
            "--reward-token", CONTRACT,
            "--reward-per-winner", "1000000",
            "--max-winners", "5",
            "--quest-type", "TokenHold",
            "--threshold", "500",
            "--title", "Hold",
        ])
        assert result.exit_code == 2
        assert "--token is required" in result.output


class TestTransactions:
    def test_create(self, runner: CliRunner, admin: Keypair, contract: str) -> None:
        ok = InvokeResult.ok(data=4, hash="ab" * 32, status="SUCCESS")
        with patch.object(QuestManagerClient, "create_quest", return_value=ok) as mock_create:
            result = runner.invoke(cli, [
                "create",
                "--reward-token", CONTRACT,
                "--reward-per-winner", "1000000",
                "--max-winners", "5",
                "--threshold", "10000000",
                "--duration", "1d",
                "--title", "Weekly Volume",
            ])

        assert result.exit_code == 0, result.output
        assert "SUCCESS: Quest #4 created" in result.output
        kwargs = mock_create.call_args.kwargs
        assert kwargs["quest_type"] == TradeVolume(10_000_000)
        assert kwargs["duration_seconds"] == 86400
        assert kwargs["reward_pool_amount"] == 5_000_000

    def test_contract_error_exits_nonzero(self, runner: CliRunner, admin: Keypair, contract: str) -> None:
        failed = InvokeResult.fail(
            InvokeError(ErrorKind.CONTRACT, "Simulation failed", code=QuestError.QUEST_ALREADY_RESOLVED)
        )
        with patch.object(QuestManagerClient, "invoke", return_value=failed):
            result = runner.invoke(cli, ["resolve", "0"])

        assert result.exit_code == 1
        assert "FAILED" in result.output
        assert "QUEST_ALREADY_RESOLVED" in result.output

    def test_cancel_requires_confirmation(self, runner: CliRunner, admin: Keypair, contract: str) -> None:
        with patch.object(QuestManagerClient, "invoke") as mock_invoke:
            result = runner.invoke(cli, ["cancel", "0"], input="n\n")
        assert result.exit_code != 0
        mock_invoke.assert_not_called()


class TestInspect:
    def test_list(self, runner: CliRunner, contract: str) -> None:
        with patch.object(QuestManagerClient, "get_quest_counter", return_value=InvokeResult.ok(data=1)), \
                patch.object(QuestManagerClient, "get_active_quests", return_value=InvokeResult.ok(data=[_quest()])), \
                patch.object(QuestManagerClient, "get_winners", return_value=InvokeResult.ok(data=[])):
            result = runner.invoke(cli, ["list"])

        assert result.exit_code == 0, result.output
        assert "Quest #0: Weekly Volume Challenge" in result.output
        assert "TradeVolume(10000000)" in result.output

    def test_list_empty(self, runner: CliRunner, contract: str) -> None:
        with patch.object(QuestManagerClient, "get_quest_counter", return_value=InvokeResult.ok(data=0)), \
                patch.object(QuestManagerClient, "get_active_quests", return_value=InvokeResult.ok(data=[])):
            result = runner.invoke(cli, ["list"])

        assert result.exit_code == 0
        assert "No active quests" in result.output

    def test_workflow_skips_register_without_quests(self, runner: CliRunner, contract: str) -> None:
        with patch.object(QuestManagerClient, "get_quest_counter", return_value=InvokeResult.ok(data=0)), \
                patch.object(QuestManagerClient, "get_active_quests", return_value=InvokeResult.ok(data=[])), \
                patch.object(QuestManagerClient, "register") as mock_register:
            result = runner.invoke(cli, ["workflow"])

        assert result.exit_code == 0
        assert "Skipped" in result.output
        mock_register.assert_not_called()


class TestLifecycleCommands:
    def test_register(self, runner: CliRunner, user: Keypair, contract: str) -> None:
        ok = InvokeResult.ok(hash="ab" * 32, status="SUCCESS")
        with patch("questkit.client.submit_invocation", return_value=ok) as mock_submit:
            result = runner.invoke(cli, ["register", "2"])

        assert result.exit_code == 0, result.output
        assert "SUCCESS: User registered" in result.output
        assert _submitted(mock_submit) == (user.public_key, "register", [2, user.public_key])

    def test_mark_eligible(self, runner: CliRunner, admin: Keypair, contract: str) -> None:
        target = Keypair.random().public_key
        with patch("questkit.client.submit_invocation", return_value=InvokeResult.ok()) as mock_submit:
            result = runner.invoke(cli, ["mark-eligible", "1", target])

        assert result.exit_code == 0, result.output
        assert "SUCCESS: User marked as eligible" in result.output
        assert _submitted(mock_submit) == (admin.public_key, "mark_user_eligible", [1, target])

    def test_distribute(self, runner: CliRunner, admin: Keypair, contract: str) -> None:
        with patch("questkit.client.submit_invocation", return_value=InvokeResult.ok()) as mock_submit:
            result = runner.invoke(cli, ["distribute", "3"])

        assert result.exit_code == 0, result.output
        assert "SUCCESS: Rewards distributed" in result.output
        assert _submitted(mock_submit) == (admin.public_key, "distribute_rewards", [3])


class TestQueryCommands:
    def test_quest(self, runner: CliRunner, contract: str) -> None:
        participant = Keypair.random().public_key
        responses = {
            "get_quest": InvokeResult.ok(data=_quest(1)),
            "get_quest_stats": InvokeResult.ok(data=QuestStats(1, 4, 2, 1, False, 3600)),
            "get_participants": InvokeResult.ok(data=[participant]),
            "get_winners": InvokeResult.ok(data=[]),
        }
        with patch("questkit.client.simulate_call", side_effect=_views(responses)):
            result = runner.invoke(cli, ["quest", "1"])

        assert result.exit_code == 0, result.output
        assert "Quest #1: Weekly Volume Challenge" in result.output
        assert _line(result.output, "Registered:").endswith("4")
        assert _line(result.output, "Eligible:").endswith("2")
        assert _line(result.output, "Time remaining:").endswith("1h")
        assert participant in result.output
        assert _line(result.output, "Winners:").endswith("(none)")

    def test_quest_not_found(self, runner: CliRunner, contract: str) -> None:
        missing = InvokeResult.fail(InvokeError(ErrorKind.CONTRACT, "failed", code=QuestError.QUEST_NOT_FOUND))
        with patch("questkit.client.simulate_call", return_value=missing):
            result = runner.invoke(cli, ["quest", "9"])

        assert result.exit_code == 1
        assert "QUEST_NOT_FOUND" in result.output

    def test_user_with_quest(self, runner: CliRunner, contract: str) -> None:
        address = Keypair.random().public_key
        responses = {
            "get_user_quests": InvokeResult.ok(data=[0, 1]),
            "get_user_stats": InvokeResult.ok(data=UserStats(4, 1, 1_000_000, 2500)),
            "is_user_registered": InvokeResult.ok(data=True),
            "get_participants": InvokeResult.ok(data=[address]),
            "get_winners": InvokeResult.ok(data=[]),
        }
        with patch("questkit.client.simulate_call", side_effect=_views(responses)):
            result = runner.invoke(cli, ["user", address, "--quest-id", "1"])

        assert result.exit_code == 0, result.output
        assert _line(result.output, "Quests:").endswith("#0, #1")
        assert _line(result.output, "Win rate:").endswith("25.00%")
        assert _line(result.output, "  Registered:").endswith("yes")
        assert _line(result.output, "  Eligible:").endswith("yes")
        assert _line(result.output, "  Winner:").endswith("no")

    def test_workflow_registers_in_first_quest(self, runner: CliRunner, user: Keypair, contract: str) -> None:
        responses = {
            "get_quest_counter": InvokeResult.ok(data=2),
            "get_active_quests": InvokeResult.ok(data=[_quest(0)]),
        }
        with patch("questkit.client.simulate_call", side_effect=_views(responses)), \
                patch("questkit.client.submit_invocation", return_value=InvokeResult.ok()) as mock_submit:
            result = runner.invoke(cli, ["workflow"])

        assert result.exit_code == 0, result.output
        assert "#0 Weekly Volume Challenge" in result.output
        assert "SUCCESS: User registered in quest #0" in result.output
        assert _submitted(mock_submit) == (user.public_key, "register", [0, user.public_key])


class TestCreateOptions:
    def test_token_rejected_for_trade_volume(self, runner: CliRunner, admin: Keypair, contract: str) -> None:
        with patch.object(QuestManagerClient, "create_quest") as mock_create:
            result = runner.invoke(cli, [
                "create",
                "--reward-token", CONTRACT,
                "--reward-per-winner", "1000000",
                "--max-winners", "5",
                "--quest-type", "TradeVolume",
                "--token", CONTRACT,
                "--threshold", "500",
                "--title", "Volume",
            ])

        assert result.exit_code == 2
        assert "--token only applies to TokenHold quests" in result.output
        mock_create.assert_not_called()
