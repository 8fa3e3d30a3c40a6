"""
Commands - CLI command implementations for the Quest Manager client.

Each module corresponds to one or more top-level CLI commands:
- keygen:   Create and store a signing key for a role
- create:   Open a new quest (admin)
- manage:   register, mark-eligible, resolve, distribute, cancel
- inspect:  list, quest, user (read-only simulations)
- workflow: Smoke test against a deployed contract
"""
