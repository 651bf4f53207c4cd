#!/usr/bin/env python3
"""
Submit one payload with the asyncio client and wait for it under an outer deadline.
"""
import asyncio
import os

from txsubmit_sdk import AsyncSubmitterClient, PRESETS, ReceiptTimeoutError, resolve_private_key


async def main():
    payload = os.environ.get("PAYLOAD", "deposit")
    rpc_url = os.environ.get("RPC_URL", "http://127.0.0.1:8545")

    async with AsyncSubmitterClient(rpc_url=rpc_url, priv_key=resolve_private_key()) as client:
        print(f"Block number: {await client.block_number()}")
        print(f"Signer address: {client.address}")

        handle = await client.submit(PRESETS[payload].to_request())
        print(f"{payload} tx: {handle}")

        # The wait is an ordinary coroutine, so it can be cancelled or bounded from outside
        try:
            receipt = await asyncio.wait_for(client.wait_for_receipt(handle, timeout=120), 30)
        except (asyncio.TimeoutError, ReceiptTimeoutError):
            print(f"{payload} receipt: still pending")
            return

        print(receipt.model_dump_json(by_alias=True, indent=2))


if __name__ == "__main__":
    asyncio.run(main())
