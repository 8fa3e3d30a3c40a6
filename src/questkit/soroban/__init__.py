"""
Soroban - On-chain interaction layer for the Quest Manager contract.

Provides the JSON-RPC client, the argument/return codec, the entry-point
table, and the submit / simulate transaction paths.

Uses httpx for transport and stellar-sdk for XDR, ScVal and signing.
"""
