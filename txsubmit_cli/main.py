"""
txsubmit command line tool.

    txsubmit info
    txsubmit run [deposit withdraw ...] [--payload-file FILE] [--to ADDRESS]
    txsubmit receipt TX_HASH [--wait]
"""
import argparse
import json
import logging
import os
import sys
from typing import Dict, List, Optional

from web3.exceptions import Web3Exception

from txsubmit_sdk import (
    DEFAULT_SEQUENCE,
    ReceiptTimeoutError,
    SubmitterClient,
    TransactionRequest,
    TxSubmitError,
    get_preset,
    load_payload_file,
    resolve_private_key,
    run_sequence,
    __version__,
)
from txsubmit_sdk.config import DEFAULT_NETWORK, NETWORK_ENV
from txsubmit_sdk.models import SubmissionResult

logger = logging.getLogger("txsubmit")

EXIT_OK = 0
EXIT_UNCONFIRMED = 1
EXIT_ERROR = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="txsubmit",
        description="Submit pre-encoded contract calls to an EVM node and report their receipts.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--network",
        default=os.environ.get(NETWORK_ENV, DEFAULT_NETWORK),
        help=f"Network from the packaged network list (default: ${NETWORK_ENV} or {DEFAULT_NETWORK})",
    )
    parser.add_argument("--rpc-url", help="RPC URL overriding the network default")
    parser.add_argument(
        "--key-file",
        help="File holding the hex private key (default: $TXSUBMIT_PRIVATE_KEY)",
    )
    parser.add_argument("--timeout", type=int, default=30, help="Per-request RPC timeout in seconds")
    parser.add_argument("--debug", action="store_true", help="Enable debug output")

    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("info", help="Show signer address, chain ID and current block")

    run = sub.add_parser("run", help="Submit payloads one after another")
    run.add_argument(
        "payloads",
        nargs="*",
        help=f"Preset names or names from --payload-file (default: {' '.join(DEFAULT_SEQUENCE)})",
    )
    run.add_argument("--payload-file", help="JSON file of named {to, data, value} payloads")
    run.add_argument("--to", help="Recipient for presets that have no fixed one")
    run.add_argument("--wait-timeout", type=float, default=120.0, help="Receipt polling deadline per transaction")
    run.add_argument("--poll-interval", type=float, default=0.5, help="First delay between receipt lookups")
    run.add_argument(
        "--fixed-delay",
        type=float,
        help="Wait this many seconds and check the receipt once instead of polling",
    )
    run.add_argument("--stop-on-revert", action="store_true", help="Stop after the first reverted transaction")
    run.add_argument("--json", action="store_true", help="Print results as JSON")

    receipt = sub.add_parser("receipt", help="Look up the receipt of a transaction")
    receipt.add_argument("tx_hash", help="Transaction hash")
    receipt.add_argument("--wait", action="store_true", help="Poll until the receipt appears")
    receipt.add_argument("--wait-timeout", type=float, default=120.0, help="Polling deadline in seconds")

    return parser


def resolve_requests(
    names: List[str],
    payload_file: Optional[str] = None,
    to: Optional[str] = None,
) -> Dict[str, TransactionRequest]:
    """
    Map requested names to requests, looking in the payload file first, then the presets.

    With no names, every payload in the file is used, or the default sequence
    when there is no file.
    """
    from_file = load_payload_file(payload_file) if payload_file else {}
    if not names:
        names = list(from_file) if from_file else list(DEFAULT_SEQUENCE)

    requests = {}
    for name in names:
        if name in from_file:
            requests[name] = from_file[name]
        else:
            requests[name] = get_preset(name).to_request(to=to)
    return requests


def make_client(args: argparse.Namespace) -> SubmitterClient:
    key = resolve_private_key(key_file=args.key_file)
    return SubmitterClient.from_network(
        args.network,
        priv_key=key,
        rpc_url=args.rpc_url,
        timeout=args.timeout,
    )


def _print_results(results: List[SubmissionResult], as_json: bool) -> None:
    if as_json:
        print(json.dumps([r.model_dump(mode="json", by_alias=True) for r in results], indent=2))
        return
    for r in results:
        print(f"{r.name} tx: {r.handle.tx_hash}")
        if r.receipt is None:
            print(f"{r.name} receipt: none")
        else:
            outcome = "success" if r.receipt.succeeded else "reverted"
            print(f"{r.name} receipt: {outcome} in block {r.receipt.block_number}, gas used {r.receipt.gas_used}")


def cmd_info(client: SubmitterClient, args: argparse.Namespace) -> int:
    print(f"address: {client.address}")
    print(f"chain id: {client.chain_id()}")
    print(f"block number: {client.block_number()}")
    return EXIT_OK


def cmd_run(client: SubmitterClient, args: argparse.Namespace) -> int:
    requests = resolve_requests(args.payloads, args.payload_file, args.to)
    client.assert_chain_id()
    logger.info(f"Submitting {', '.join(requests)} from {client.address}")
    results = run_sequence(
        client,
        requests,
        timeout=args.wait_timeout,
        poll_interval=args.poll_interval,
        fixed_delay=args.fixed_delay,
        stop_on_revert=args.stop_on_revert,
    )
    _print_results(results, args.json)
    all_ok = len(results) == len(requests) and all(r.receipt is not None and r.receipt.succeeded for r in results)
    return EXIT_OK if all_ok else EXIT_UNCONFIRMED


def cmd_receipt(client: SubmitterClient, args: argparse.Namespace) -> int:
    if args.wait:
        try:
            receipt = client.wait_for_receipt(args.tx_hash, timeout=args.wait_timeout)
        except ReceiptTimeoutError as e:
            logger.warning(str(e))
            receipt = None
    else:
        receipt = client.get_receipt(args.tx_hash)
    if receipt is None:
        print(f"No receipt for {args.tx_hash}")
        return EXIT_UNCONFIRMED
    print(receipt.model_dump_json(by_alias=True, indent=2))
    return EXIT_OK if receipt.succeeded else EXIT_UNCONFIRMED


COMMANDS = {
    "info": cmd_info,
    "run": cmd_run,
    "receipt": cmd_receipt,
}


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        client = make_client(args)
        return COMMANDS[args.command](client, args)
    except (TxSubmitError, Web3Exception, ValueError) as e:
        logger.error(str(e))
        if args.debug:
            logger.exception("Details")
        return EXIT_ERROR


def cli() -> None:
    sys.exit(main())


if __name__ == "__main__":
    cli()
