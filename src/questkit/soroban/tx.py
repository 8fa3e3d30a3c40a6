"""
Transaction Builder - Build, prepare, sign, submit and simulate Soroban calls.

Uses stellar-sdk for envelopes and signing and the httpx-based JSON-RPC
client for everything that touches the network. All outcomes that come back
from the network are normalized into ``InvokeResult``; local precondition
failures (bad config, unencodable arguments) raise before any I/O.
"""

from __future__ import annotations

import copy
import logging
import threading
from typing import Any, Callable, Optional, Sequence

import httpx
from stellar_sdk import Account, Keypair, TransactionBuilder, TransactionEnvelope
from stellar_sdk import xdr as stellar_xdr

from ..config import BASE_FEE, TX_VALIDITY_SECONDS, NetworkConfig
from ..domain.errors import (
    AccountNotFoundError,
    ConfirmationCancelled,
    ConfirmationTimeout,
    ErrorKind,
    InvokeError,
    QuestError,
    RpcError,
    SimulationError,
    parse_contract_error,
)
from ..domain.models import InvokeResult
from . import rpc
from .codec import to_python

log = logging.getLogger(__name__)

Decoder = Callable[[Any], Any]


def build_invoke_tx(
    contract_id: str,
    function_name: str,
    parameters: Sequence[stellar_xdr.SCVal],
    source_address: str,
    sequence: int,
    network_passphrase: str,
    base_fee: int = BASE_FEE,
) -> TransactionEnvelope:
    """
    Build an unsigned envelope holding one contract invocation.

    Args:
        contract_id: C... contract address
        function_name: Entry point to invoke
        parameters: Encoded SCVal arguments
        source_address: G... source account
        sequence: Current sequence of the source account (the builder uses +1)
        network_passphrase: Network passphrase
        base_fee: Inclusion fee in stroops

    Returns:
        Unsigned TransactionEnvelope with a fixed validity window
    """
    account = Account(source_address, sequence)
    return (
        TransactionBuilder(
            source_account=account,
            network_passphrase=network_passphrase,
            base_fee=base_fee,
        )
        .append_invoke_contract_function_op(
            contract_id=contract_id,
            function_name=function_name,
            parameters=list(parameters),
        )
        .set_timeout(TX_VALIDITY_SECONDS)
        .build()
    )


def assemble_transaction(
    envelope: TransactionEnvelope,
    simulation: rpc.SimulationResponse,
) -> TransactionEnvelope:
    """
    Attach simulation output (footprint, auth, resource fee) to an envelope.

    Raises:
        SimulationError: If the simulation failed or returned no usable data
    """
    if simulation.error:
        raise SimulationError(f"Simulation failed: {simulation.error}", raw=simulation.error)
    if not simulation.transaction_data or len(simulation.results) != 1:
        raise SimulationError("Simulation returned no transaction data")

    prepared = copy.deepcopy(envelope)
    prepared.signatures = []
    tx = prepared.transaction
    tx.soroban_data = stellar_xdr.SorobanTransactionData.from_xdr(simulation.transaction_data)
    tx.fee += simulation.min_resource_fee

    op = tx.operations[0]
    if not op.auth:
        op.auth = [
            stellar_xdr.SorobanAuthorizationEntry.from_xdr(entry)
            for entry in simulation.results[0].auth
        ]
    return prepared


def extract_return_value(info: rpc.TransactionInfo) -> Any:
    """Return value of a successful transaction (SCVal or base64 XDR), if any."""
    if info.return_value:
        return info.return_value
    if not info.result_meta_xdr:
        return None
    meta = stellar_xdr.TransactionMeta.from_xdr(info.result_meta_xdr)
    for version in ("v4", "v3"):
        body = getattr(meta, version, None)
        if body is not None and body.soroban_meta is not None:
            return body.soroban_meta.return_value
    return None


def contract_error_from_events(events: Sequence[str]) -> Optional[QuestError]:
    """Find the first contract error code carried in diagnostic event topics."""
    for raw in events:
        event = stellar_xdr.DiagnosticEvent.from_xdr(raw).event
        body = event.body.v0
        if body is None:
            continue
        for value in [*body.topics, body.data]:
            if value.type != stellar_xdr.SCValType.SCV_ERROR:
                continue
            if value.error.type == stellar_xdr.SCErrorType.SCE_CONTRACT:
                return QuestError.from_code(value.error.contract_code.uint32)
    return None


def _decode(value: Any, decode: Optional[Decoder]) -> Any:
    if decode is not None:
        return decode(value)
    return None if value is None else to_python(value)


def transaction_result(info: rpc.TransactionInfo, decode: Optional[Decoder] = None) -> InvokeResult:
    """Normalize a terminal getTransaction response."""
    if info.status == rpc.TX_SUCCESS:
        data = _decode(extract_return_value(info), decode)
        return InvokeResult.ok(data=data, hash=info.hash, status=info.status)

    code = contract_error_from_events(info.diagnostic_events)
    error = InvokeError(
        kind=ErrorKind.CONTRACT if code is not None else ErrorKind.FAILED,
        message=f"Transaction {info.status}",
        code=code,
        raw=info.result_xdr,
    )
    return InvokeResult.fail(error, hash=info.hash, status=info.status)


def _rejected(exc: Exception, kind: ErrorKind, hash: Optional[str] = None) -> InvokeResult:
    return InvokeResult.fail(InvokeError(kind=kind, message=str(exc)), hash=hash)


def confirm_submission(
    sent: rpc.SendResponse,
    timeout: float,
    poll_interval: float,
    cancel: Optional[threading.Event] = None,
    decode: Optional[Decoder] = None,
    rpc_url: Optional[str] = None,
    client: Optional[httpx.Client] = None,
) -> InvokeResult:
    """
    Turn a sendTransaction response into a final result.

    PENDING and DUPLICATE are confirmed by polling the same hash; every other
    status is terminal and returned as-is.
    """
    if sent.status not in (rpc.SEND_PENDING, rpc.SEND_DUPLICATE):
        if sent.status == rpc.SEND_SUCCESS:
            return InvokeResult.ok(hash=sent.hash, status=sent.status)
        error = InvokeError(
            kind=ErrorKind.REJECTED,
            message=f"Submission {sent.status}",
            raw=sent.error_result_xdr,
        )
        return InvokeResult.fail(error, hash=sent.hash, status=sent.status)

    try:
        info = rpc.wait_for_transaction(
            sent.hash,
            timeout=timeout,
            poll_interval=poll_interval,
            cancel=cancel,
            rpc_url=rpc_url,
            client=client,
        )
    except ConfirmationTimeout as exc:
        return _rejected(exc, ErrorKind.TIMEOUT, hash=sent.hash)
    except ConfirmationCancelled as exc:
        return _rejected(exc, ErrorKind.CANCELLED, hash=sent.hash)
    except RpcError as exc:
        return _rejected(exc, ErrorKind.RPC, hash=sent.hash)
    except httpx.HTTPError as exc:
        return _rejected(exc, ErrorKind.TRANSPORT, hash=sent.hash)

    return transaction_result(info, decode)


def submit_invocation(
    config: NetworkConfig,
    keypair: Keypair,
    function_name: str,
    parameters: Sequence[stellar_xdr.SCVal],
    decode: Optional[Decoder] = None,
    cancel: Optional[threading.Event] = None,
    client: Optional[httpx.Client] = None,
) -> InvokeResult:
    """
    Build, prepare, sign, send and confirm a contract invocation.

    Args:
        config: Network configuration (validated by the caller)
        keypair: Signing keypair; also the transaction source
        function_name: Entry point to invoke
        parameters: Encoded SCVal arguments
        decode: Converter for the return value
        cancel: Event that aborts confirmation polling
        client: Reusable httpx client

    Returns:
        InvokeResult with the transaction hash and decoded return value
    """
    url = config.rpc_url
    source = keypair.public_key

    try:
        sequence = rpc.get_account_sequence(source, rpc_url=url, client=client)
        envelope = build_invoke_tx(
            config.contract_id,
            function_name,
            parameters,
            source,
            sequence,
            config.network_passphrase,
        )
        simulation = rpc.simulate_transaction(envelope.to_xdr(), rpc_url=url, client=client)
        prepared = assemble_transaction(envelope, simulation)
        prepared.sign(keypair)
        sent = rpc.send_transaction(prepared.to_xdr(), rpc_url=url, client=client)
    except SimulationError as exc:
        code = exc.contract_error
        error = InvokeError(
            kind=ErrorKind.CONTRACT if code is not None else ErrorKind.REJECTED,
            message=str(exc),
            code=code,
            raw=exc.raw,
        )
        return InvokeResult.fail(error)
    except AccountNotFoundError as exc:
        return _rejected(exc, ErrorKind.REJECTED)
    except RpcError as exc:
        return _rejected(exc, ErrorKind.RPC)
    except httpx.HTTPError as exc:
        return _rejected(exc, ErrorKind.TRANSPORT)

    log.info("submitted %s as %s (%s)", function_name, sent.hash, sent.status)
    return confirm_submission(
        sent,
        timeout=config.confirm_timeout,
        poll_interval=config.poll_interval,
        cancel=cancel,
        decode=decode,
        rpc_url=url,
        client=client,
    )


def simulate_call(
    config: NetworkConfig,
    function_name: str,
    parameters: Sequence[stellar_xdr.SCVal],
    decode: Optional[Decoder] = None,
    client: Optional[httpx.Client] = None,
) -> InvokeResult:
    """
    Simulate a read-only call from the placeholder source and decode it.

    The source account is built locally; it is never loaded from the network.
    """
    envelope = build_invoke_tx(
        config.contract_id,
        function_name,
        parameters,
        config.simulation_source,
        0,
        config.network_passphrase,
    )

    try:
        simulation = rpc.simulate_transaction(envelope.to_xdr(), rpc_url=config.rpc_url, client=client)
    except RpcError as exc:
        return _rejected(exc, ErrorKind.RPC)
    except httpx.HTTPError as exc:
        return _rejected(exc, ErrorKind.TRANSPORT)

    if simulation.error:
        code = parse_contract_error(simulation.error)
        error = InvokeError(
            kind=ErrorKind.CONTRACT if code is not None else ErrorKind.REJECTED,
            message=simulation.error.splitlines()[0],
            code=code,
            raw=simulation.error,
        )
        return InvokeResult.fail(error)

    if not simulation.results:
        return InvokeResult.fail(InvokeError(kind=ErrorKind.REJECTED, message="No result returned"))

    return InvokeResult.ok(data=_decode(simulation.results[0].xdr, decode))
