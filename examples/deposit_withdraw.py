#!/usr/bin/env python3
"""
Submit the deposit and withdraw payloads to a local node and report their receipts.
"""
import logging
import os

from txsubmit_sdk import (
    SubmitterClient,
    NetworkConfig,
    LocalSigner,
    PRESETS,
    DEFAULT_SEQUENCE,
    resolve_private_key,
    run_sequence,
)


def main():
    """
    Demonstrate the blocking client.

    This example shows how to:
    1. Initialize the client from a network configuration
    2. Print the current block and the signer address
    3. Submit deposit then withdraw, waiting for each receipt
    """
    logging.basicConfig(level=logging.INFO)

    network = os.environ.get("TXSUBMIT_NETWORK", "localnet")
    print("Available networks:")
    for network_name in NetworkConfig.load_networks().keys():
        print(f"  - {network_name}")
    print()

    # Reads TXSUBMIT_PRIVATE_KEY
    signer = LocalSigner(resolve_private_key())
    client = SubmitterClient.from_network(network=network, signer=signer)

    print(f"Block number: {client.block_number()}")
    print(f"Signer address: {client.address}")

    requests = {name: PRESETS[name].to_request() for name in DEFAULT_SEQUENCE}
    try:
        results = run_sequence(client, requests, timeout=60)
    except Exception as e:
        print(f"Error: {str(e)}")
        return

    for result in results:
        print(f"{result.name} tx: {result.handle}")
        if result.receipt is None:
            print(f"{result.name} receipt: not found within 60s")
        else:
            print(f"{result.name} receipt: status {result.receipt.status}, block {result.receipt.block_number}")


if __name__ == "__main__":
    main()
