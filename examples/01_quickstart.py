#!/usr/bin/env python3
"""Example: Quickstart

Demonstrates the offline half of agent-naming: deriving a canonical agent
name, hashing it, and round-tripping the agent identity text value.

Usage:
    python examples/01_quickstart.py

Requirements:
    pip install agent-naming
"""
from __future__ import annotations

import agent_naming
from agent_naming import (
    AgentIdentityRecord,
    agent_full_name,
    decode_agent_identity,
    encode_agent_identity,
    namehash,
)


def main() -> None:
    print(f"agent-naming version: {agent_naming.__version__}")

    # Step 1: Derive the full name of an agent under its organization
    name = agent_full_name("Acme", "ATL Test 1")
    print(f"Agent name: {name}")

    # Step 2: Hash it into the node used by registries and resolvers
    print(f"Node: 0x{namehash(name or '').hex()}")

    # Step 3: Encode an identity record as an agent-identity text value
    record = AgentIdentityRecord(
        chain_id=11155111,
        registry="0x0000000000000000000000000000000000000001",
        agent_id=42,
    )
    value = encode_agent_identity(record)
    print(f"agent-identity: {value}")

    # Step 4: Decode it back
    print(f"Decoded: {decode_agent_identity(value)}")

    print("\nQuickstart complete.")


if __name__ == "__main__":
    main()
