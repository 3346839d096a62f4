#!/usr/bin/env python3
"""Example: Resolve and prepare

Resolves an agent name on Ethereum Sepolia and prints the call batch
that would create it.  Nothing is submitted: the batch is handed to
whatever submission layer the caller uses.

Usage:
    AGENT_NAMING_ETH_SEPOLIA_RPC_URL=https://... \\
        python examples/02_resolve_and_prepare.py acme atl-test-1 0xYourAccount

Requirements:
    pip install agent-naming
"""
from __future__ import annotations

import asyncio
import json
import logging
import sys

from agent_naming import AgentNamingClient, agent_full_name, load_config_from_env

SEPOLIA = 11155111


async def run(org: str, agent: str, owner: str) -> None:
    config = load_config_from_env()
    async with AgentNamingClient(config) as client:
        name = agent_full_name(org, agent)
        if name is None:
            print(f"Cannot derive a name from {org!r} and {agent!r}")
            return

        # Step 1: Does the subdomain already exist?
        taken = await client.has_owner(SEPOLIA, org, agent)
        print(f"{name}: {'taken' if taken else 'available'}")

        # Step 2: Forward lookups
        account = await client.resolve_account(SEPOLIA, name)
        print(f"account:  {account.value if account else account.reason}")
        identity = await client.resolve_identity(SEPOLIA, name)
        print(f"identity: {identity.value if identity else identity.reason}")

        # Step 3: Build the create batch
        batch = await client.prepare_create_calls(
            SEPOLIA, org, agent, owner, url=f"https://{org}.example/agents/{agent}"
        )
        print(json.dumps(batch.to_list(), indent=2))


def main() -> None:
    if len(sys.argv) != 4:
        print(__doc__)
        sys.exit(1)
    logging.basicConfig(level=logging.DEBUG)
    asyncio.run(run(*sys.argv[1:4]))


if __name__ == "__main__":
    main()
