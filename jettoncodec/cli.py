#!/usr/bin/env python3
"""
jettoncodec — jetton cell-tree codec

Command-line interface for building jetton metadata and message bodies.

Usage:
    jettoncodec metadata [--name N] [--symbol S] ...   Build the on-chain content cell
    jettoncodec mint <owner> <amount>                   Encode a mint request
    jettoncodec burn <destination> <amount>             Encode a burn notification
    jettoncodec text <message>                          Encode a text command
    jettoncodec address [--owner A]                     Derive the minter address

Metadata flags default to TOKEN_NAME, TOKEN_DESCRIPTION, TOKEN_SYMBOL and
TOKEN_IMAGE from the environment.
"""

from __future__ import annotations

import argparse
import sys
import textwrap
from typing import Optional

from loguru import logger

from jettoncodec.cell import Address, Cell, begin_cell, from_nano, to_nano
from jettoncodec.config import DeployConfig, metadata_from_env
from jettoncodec.contract import Jetton
from jettoncodec.dispatch import encode_message
from jettoncodec.errors import JettonCodecError
from jettoncodec.graph import CellGraph
from jettoncodec.logging import init_logging
from jettoncodec.messages import BurnNotification, MintRequest, MessageEncoder
from jettoncodec.metadata import MetadataCellBuilder


# ============================================================================
# Formatting helpers
# ============================================================================

class C:
    """ANSI colors."""
    BOLD = "\033[1m"
    DIM = "\033[2m"
    RED = "\033[31m"
    GREEN = "\033[32m"
    CYAN = "\033[36m"
    RESET = "\033[0m"

    @staticmethod
    def off():
        C.BOLD = C.DIM = C.RED = C.GREEN = C.CYAN = C.RESET = ""


def header(text: str) -> str:
    return f"\n{C.BOLD}{C.CYAN}{'─' * 60}{C.RESET}\n{C.BOLD}  {text}{C.RESET}\n{C.BOLD}{C.CYAN}{'─' * 60}{C.RESET}"


def ok(text: str) -> str:
    return f"  {C.GREEN}✓{C.RESET} {text}"


def fail(text: str) -> str:
    return f"  {C.RED}✗{C.RESET} {text}"


def dim(text: str) -> str:
    return f"{C.DIM}{text}{C.RESET}"


def show_cell(cell: Cell) -> None:
    graph = CellGraph.from_cell(cell)
    stats = graph.stats()
    print(f"  Hash:  {cell.hash.hex()}")
    print(f"  Cells: {stats.unique_cells}  |  Bits: {stats.total_bits}  |  Depth: {stats.depth}")
    print()
    for line in cell.dump().splitlines():
        print(f"  {dim(line)}")


def parse_address(text: str) -> Address:
    try:
        return Address.parse(text)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e))


# ============================================================================
# Commands
# ============================================================================

def _metadata_from_args(args) -> dict[str, Optional[str]]:
    metadata = metadata_from_env()
    for key in metadata:
        value = getattr(args, key, None)
        if value is not None:
            metadata[key] = value
    return metadata


def cmd_metadata(args):
    """Build the on-chain content cell."""
    metadata = _metadata_from_args(args)
    cell = MetadataCellBuilder().build(metadata)

    print(header("METADATA"))
    for key, value in metadata.items():
        if value:
            print(ok(f"{key}: {value}"))
        else:
            print(f"  {dim(f'· {key}: (omitted)')}")
    print()
    show_cell(cell)


def cmd_mint(args):
    """Encode a mint request."""
    request = MintRequest(
        owner=args.owner,
        jetton_amount=args.amount,
        transfer_fee=to_nano(args.fee),
        query_id=args.query_id,
    )
    cell = MessageEncoder().mint(request)

    print(header(f"MINT: {args.amount} → {args.owner.to_raw()}"))
    print(f"  {dim(f'Fee: {from_nano(request.transfer_fee)} TON  |  Query: {request.query_id}')}")
    show_cell(cell)


def cmd_burn(args):
    """Encode a burn notification."""
    message = BurnNotification(args.query_id, args.amount, args.destination)
    cell = encode_message(message)

    print(header(f"BURN NOTIFICATION: {args.amount}"))
    show_cell(cell)


def cmd_text(args):
    """Encode a text command."""
    cell = encode_message(args.message)

    print(header(f"TEXT: {args.message!r}"))
    show_cell(cell)


def cmd_address(args):
    """Derive the minter address from metadata and code cells."""
    config = DeployConfig.from_env()
    owner = args.owner or config.owner
    if owner is None:
        raise ValueError("Owner address required (--owner or TOKEN_OWNER)")

    code = begin_cell().store_bytes(bytes.fromhex(args.code_hex)).end_cell()
    wallet_code = begin_cell().store_bytes(bytes.fromhex(args.wallet_code_hex)).end_cell()
    workchain = config.workchain if args.workchain is None else args.workchain

    jetton = Jetton.create_from_config(
        owner, _metadata_from_args(args), code, wallet_code, workchain
    )

    print(header("MINTER ADDRESS"))
    print(ok(f"Raw:      {jetton.address.to_raw()}"))
    print(ok(f"Friendly: {jetton.address.to_friendly()}"))
    print(f"  {dim(f'Deploy value: {from_nano(config.deploy_value)} TON')}")


# ============================================================================
# CLI setup
# ============================================================================

def _add_metadata_flags(p: argparse.ArgumentParser) -> None:
    p.add_argument("--name", help="Token name (default: $TOKEN_NAME)")
    p.add_argument("--description", help="Token description (default: $TOKEN_DESCRIPTION)")
    p.add_argument("--symbol", help="Token symbol (default: $TOKEN_SYMBOL)")
    p.add_argument("--image", help="Image URL, ASCII only (default: $TOKEN_IMAGE)")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="jettoncodec",
        description="jettoncodec — jetton cell-tree codec",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=textwrap.dedent("""
        examples:
          jettoncodec metadata --name MyJetton --symbol JET1
          jettoncodec mint 0:4f1c...e2 1000000000 --fee 0.05
          jettoncodec burn 0:4f1c...e2 500 --query-id 7
          jettoncodec text "Owner Claim"
        """),
    )
    parser.add_argument("--no-color", action="store_true", help="Disable colored output")
    parser.add_argument("--log-level", default="WARNING", help="Log level (default: WARNING)")

    sub = parser.add_subparsers(dest="command", help="Command to run")

    # metadata
    p = sub.add_parser("metadata", aliases=["meta"], help="Build the on-chain content cell")
    _add_metadata_flags(p)

    # mint
    p = sub.add_parser("mint", help="Encode a mint request")
    p.add_argument("owner", type=parse_address, help="Receiving owner address")
    p.add_argument("amount", type=int, help="Jetton amount in base units")
    p.add_argument("--fee", default="0.05", help="TON forwarded to the wallet (default: 0.05)")
    p.add_argument("--query-id", type=int, default=0, help="Query id (default: 0)")

    # burn
    p = sub.add_parser("burn", help="Encode a burn notification")
    p.add_argument("destination", type=parse_address, help="Response destination address")
    p.add_argument("amount", type=int, help="Burned amount in base units")
    p.add_argument("--query-id", type=int, default=0, help="Query id (default: 0)")

    # text
    p = sub.add_parser("text", help="Encode a text command")
    p.add_argument("message", help="Command text, e.g. 'Mint' or 'Owner Claim'")

    # address
    p = sub.add_parser("address", aliases=["addr"], help="Derive the minter address")
    p.add_argument("--owner", type=parse_address, help="Admin address (default: $TOKEN_OWNER)")
    p.add_argument("--code-hex", required=True, help="Minter code cell payload as hex")
    p.add_argument("--wallet-code-hex", required=True, help="Wallet code cell payload as hex")
    p.add_argument("--workchain", type=int, help="Workchain (default: $TOKEN_WORKCHAIN or 0)")
    _add_metadata_flags(p)

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.no_color:
        C.off()
    init_logging(args.log_level, colorize=not args.no_color)

    if not args.command:
        parser.print_help()
        return 0

    # Dispatch
    commands = {
        "metadata": cmd_metadata, "meta": cmd_metadata,
        "mint": cmd_mint,
        "burn": cmd_burn,
        "text": cmd_text,
        "address": cmd_address, "addr": cmd_address,
    }

    handler = commands[args.command]
    try:
        handler(args)
    except (JettonCodecError, ValueError) as e:
        logger.debug("Command {} failed: {!r}", args.command, e)
        print(fail(f"Error: {e}"))
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
