"""
JSON-RPC Client for Soroban RPC.

Lightweight alternative to the SDK's bundled server class: uses httpx for HTTP
and stellar-sdk only for XDR. Supports health/network queries, account
sequence lookup, simulation, submission and bounded confirmation polling.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Optional

import httpx
from stellar_sdk import Keypair
from stellar_sdk import xdr as stellar_xdr

from ..config import DEFAULT_RPC_URL
from ..domain.errors import (
    AccountNotFoundError,
    ConfirmationCancelled,
    ConfirmationTimeout,
    RpcError,
)

log = logging.getLogger(__name__)

HTTP_TIMEOUT = 30.0

# getTransaction statuses
TX_SUCCESS = "SUCCESS"
TX_NOT_FOUND = "NOT_FOUND"
TX_FAILED = "FAILED"

# sendTransaction statuses
SEND_PENDING = "PENDING"
SEND_SUCCESS = "SUCCESS"
SEND_DUPLICATE = "DUPLICATE"
SEND_TRY_AGAIN_LATER = "TRY_AGAIN_LATER"
SEND_ERROR = "ERROR"


# ---------------------------------------------------------------------------
# Response shapes
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SendResponse:
    status: str
    hash: str
    error_result_xdr: Optional[str] = None
    latest_ledger: Optional[int] = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SendResponse":
        return cls(
            status=data.get("status", ""),
            hash=data.get("hash", ""),
            error_result_xdr=data.get("errorResultXdr"),
            latest_ledger=_opt_int(data.get("latestLedger")),
        )


@dataclass(frozen=True)
class TransactionInfo:
    status: str
    hash: str
    ledger: Optional[int] = None
    result_xdr: Optional[str] = None
    result_meta_xdr: Optional[str] = None
    return_value: Optional[str] = None
    diagnostic_events: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, tx_hash: str, data: dict[str, Any]) -> "TransactionInfo":
        return cls(
            status=data.get("status", ""),
            hash=data.get("txHash") or tx_hash,
            ledger=_opt_int(data.get("ledger")),
            result_xdr=data.get("resultXdr"),
            result_meta_xdr=data.get("resultMetaXdr"),
            return_value=data.get("returnValue"),
            diagnostic_events=list(
                data.get("diagnosticEventsXdr")
                or (data.get("events") or {}).get("diagnosticEventsXdr")
                or []
            ),
        )


@dataclass(frozen=True)
class SimulationResult:
    xdr: str
    auth: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class SimulationResponse:
    error: Optional[str] = None
    transaction_data: Optional[str] = None
    min_resource_fee: int = 0
    results: list[SimulationResult] = field(default_factory=list)
    events: list[str] = field(default_factory=list)
    latest_ledger: Optional[int] = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SimulationResponse":
        results = [
            SimulationResult(xdr=r.get("xdr", ""), auth=list(r.get("auth") or []))
            for r in (data.get("results") or [])
        ]
        return cls(
            error=data.get("error"),
            transaction_data=data.get("transactionData"),
            min_resource_fee=int(data.get("minResourceFee") or 0),
            results=results,
            events=list(data.get("events") or []),
            latest_ledger=_opt_int(data.get("latestLedger")),
        )


def _opt_int(value: Any) -> Optional[int]:
    return None if value is None else int(value)


# ---------------------------------------------------------------------------
# Transport
# ---------------------------------------------------------------------------

def _rpc_call(
    method: str,
    params: Optional[dict[str, Any]] = None,
    rpc_url: Optional[str] = None,
    client: Optional[httpx.Client] = None,
) -> Any:
    """
    Make a JSON-RPC call.

    Args:
        method: RPC method name (e.g., "simulateTransaction")
        params: RPC parameters (Soroban RPC takes a single object)
        rpc_url: RPC endpoint URL
        client: Reusable httpx client (a short-lived one is created otherwise)

    Returns:
        Result field from the RPC response

    Raises:
        RpcError: If the response carries a JSON-RPC error object
        httpx.HTTPError: On transport or HTTP status failures
    """
    url = rpc_url or DEFAULT_RPC_URL
    payload: dict[str, Any] = {
        "jsonrpc": "2.0",
        "method": method,
        "id": 1,
    }
    if params is not None:
        payload["params"] = params

    log.debug("rpc %s -> %s", method, url)

    if client is None:
        with httpx.Client(timeout=HTTP_TIMEOUT) as own_client:
            response = own_client.post(url, json=payload)
    else:
        response = client.post(url, json=payload)
    response.raise_for_status()
    data = response.json()

    if "error" in data and data["error"] is not None:
        error = data["error"]
        if isinstance(error, dict):
            raise RpcError(method, error.get("code"), error.get("message", ""), error.get("data"))
        raise RpcError(method, None, str(error))

    return data.get("result")


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------

def get_health(rpc_url: Optional[str] = None, client: Optional[httpx.Client] = None) -> dict:
    return _rpc_call("getHealth", rpc_url=rpc_url, client=client)


def get_network(rpc_url: Optional[str] = None, client: Optional[httpx.Client] = None) -> dict:
    """Returns the node's passphrase, protocol version and friendbot URL."""
    return _rpc_call("getNetwork", rpc_url=rpc_url, client=client)


def get_latest_ledger(rpc_url: Optional[str] = None, client: Optional[httpx.Client] = None) -> int:
    result = _rpc_call("getLatestLedger", rpc_url=rpc_url, client=client)
    return int(result["sequence"])


def account_ledger_key(address: str) -> str:
    """Base64 XDR LedgerKey for an account entry."""
    key = stellar_xdr.LedgerKey(
        type=stellar_xdr.LedgerEntryType.ACCOUNT,
        account=stellar_xdr.LedgerKeyAccount(
            account_id=Keypair.from_public_key(address).xdr_account_id(),
        ),
    )
    return key.to_xdr()


def get_account_sequence(
    address: str,
    rpc_url: Optional[str] = None,
    client: Optional[httpx.Client] = None,
) -> int:
    """
    Get the current sequence number of an account.

    Raises:
        AccountNotFoundError: If the account does not exist on the network
    """
    result = _rpc_call(
        "getLedgerEntries",
        {"keys": [account_ledger_key(address)]},
        rpc_url=rpc_url,
        client=client,
    )
    entries = (result or {}).get("entries") or []
    if not entries:
        raise AccountNotFoundError(
            f"Account not found: {address}. Fund it before sending transactions."
        )
    entry = stellar_xdr.LedgerEntryData.from_xdr(entries[0]["xdr"])
    sequence = entry.account.seq_num.sequence_number.int64
    log.debug("account %s sequence %d", address, sequence)
    return sequence


# ---------------------------------------------------------------------------
# Transactions
# ---------------------------------------------------------------------------

def simulate_transaction(
    envelope_xdr: str,
    rpc_url: Optional[str] = None,
    client: Optional[httpx.Client] = None,
) -> SimulationResponse:
    result = _rpc_call(
        "simulateTransaction",
        {"transaction": envelope_xdr},
        rpc_url=rpc_url,
        client=client,
    )
    return SimulationResponse.from_dict(result or {})


def send_transaction(
    envelope_xdr: str,
    rpc_url: Optional[str] = None,
    client: Optional[httpx.Client] = None,
) -> SendResponse:
    result = _rpc_call(
        "sendTransaction",
        {"transaction": envelope_xdr},
        rpc_url=rpc_url,
        client=client,
    )
    response = SendResponse.from_dict(result or {})
    log.debug("sent %s status=%s", response.hash, response.status)
    return response


def get_transaction(
    tx_hash: str,
    rpc_url: Optional[str] = None,
    client: Optional[httpx.Client] = None,
) -> TransactionInfo:
    result = _rpc_call("getTransaction", {"hash": tx_hash}, rpc_url=rpc_url, client=client)
    return TransactionInfo.from_dict(tx_hash, result or {})


def _pause(seconds: float, cancel: Optional[threading.Event]) -> bool:
    """Sleep up to ``seconds``. Returns True if cancelled meanwhile."""
    if cancel is None:
        if seconds > 0:
            time.sleep(seconds)
        return False
    return cancel.wait(seconds)


def wait_for_transaction(
    tx_hash: str,
    timeout: float,
    poll_interval: float = 1.0,
    cancel: Optional[threading.Event] = None,
    rpc_url: Optional[str] = None,
    client: Optional[httpx.Client] = None,
) -> TransactionInfo:
    """
    Poll getTransaction until the transaction leaves NOT_FOUND.

    Transport failures while polling are logged and retried until the
    deadline. JSON-RPC errors propagate.

    Args:
        tx_hash: Transaction hash
        timeout: Maximum wait time in seconds (required)
        poll_interval: Polling interval in seconds
        cancel: Event that aborts the wait when set
        rpc_url: RPC endpoint URL
        client: Reusable httpx client

    Returns:
        The first TransactionInfo whose status is not NOT_FOUND

    Raises:
        ConfirmationTimeout: If still NOT_FOUND when the deadline passes
        ConfirmationCancelled: If ``cancel`` is set before a terminal status
    """
    deadline = time.monotonic() + timeout
    attempt = 0
    last_error: Optional[Exception] = None

    while True:
        remaining = deadline - time.monotonic()
        if _pause(min(poll_interval, max(remaining, 0.0)), cancel):
            raise ConfirmationCancelled(f"Stopped waiting for transaction {tx_hash}")

        attempt += 1
        try:
            info = get_transaction(tx_hash, rpc_url=rpc_url, client=client)
        except httpx.TransportError as exc:
            last_error = exc
            log.warning("poll %d for %s failed: %s", attempt, tx_hash, exc)
        else:
            log.debug("poll %d for %s: %s", attempt, tx_hash, info.status)
            if info.status != TX_NOT_FOUND:
                return info

        if time.monotonic() >= deadline:
            detail = f" (last error: {last_error})" if last_error is not None else ""
            raise ConfirmationTimeout(
                f"Transaction {tx_hash} not confirmed within {timeout}s{detail}"
            )
