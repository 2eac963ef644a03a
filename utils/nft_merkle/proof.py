from __future__ import annotations

import argparse
import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence

from .address import Address, parse_address
from .cli import (
    EXIT_SUCCESS,
    EXIT_VERIFICATION_FAILED,
    add_common_arguments,
    run_command,
    utc_timestamp,
    write_text,
)
from .errors import LeafNotFoundError
from .hashing import to_hex
from .merkle_tree import MerkleTree, verify_hex_proof
from .whitelist import DATA_FILENAME, WhitelistData, load_whitelist_data


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProofRecord:
    """Contents of a ``proof_<prefix>.json`` file handed to a minter."""

    address: str
    proof: List[str]
    merkle_root: str
    verified: bool
    generated_at: str

    def to_json(self) -> dict:
        return {
            "address": self.address,
            "proof": list(self.proof),
            "merkleRoot": self.merkle_root,
            "verified": self.verified,
            "generatedAt": self.generated_at,
        }


def generate_proof(data: WhitelistData, address: Address) -> ProofRecord:
    """Rebuild the whitelist tree and prove ``address`` against the published root."""
    whitelisted = [parse_address(entry) for entry in data.addresses]
    if address not in whitelisted:
        raise LeafNotFoundError(f"Address {address} is not in the whitelist")
    tree = MerkleTree.from_addresses(whitelisted)
    rebuilt_root = to_hex(tree.root)
    if rebuilt_root != data.merkle_root:
        logger.warning(
            "Rebuilt root %s does not match published root %s", rebuilt_root, data.merkle_root
        )
    proof = [to_hex(node) for node in tree.prove(address.leaf)]
    return ProofRecord(
        address=address.value,
        proof=proof,
        merkle_root=data.merkle_root,
        verified=verify_hex_proof(proof, address.leaf, data.merkle_root),
        generated_at=utc_timestamp(),
    )


def proof_filename(address: Address) -> str:
    return f"proof_{address.value[2:8]}.json"


def write_proof(record: ProofRecord, out_dir: Path) -> Path:
    target = out_dir / proof_filename(Address(record.address))
    return write_text(target, json.dumps(record.to_json(), indent=2))


def _parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Generate the Merkle proof a whitelisted address needs to mint",
    )
    parser.add_argument("address", help="Address to prove, e.g. 0x1234...")
    parser.add_argument(
        "--data",
        type=Path,
        default=Path(os.getenv("WHITELIST_DATA", DATA_FILENAME)),
        help="Whitelist data written by nft-whitelist (default: whitelist_data.json)",
    )
    add_common_arguments(parser)
    return parser.parse_args(argv)


def _run(args: argparse.Namespace) -> int:
    address = parse_address(args.address)
    data = load_whitelist_data(args.data)
    record = generate_proof(data, address)
    target = write_proof(record, args.out_dir)

    print(f"Address: {record.address}")
    print(f"Merkle root: {record.merkle_root}")
    print("Proof:")
    print(json.dumps(record.proof, indent=2))
    print(f"Verification: {'valid' if record.verified else 'INVALID'}")
    print(f"Proof written to {target}")
    if not record.verified:
        logger.error("Proof for %s does not verify against %s", record.address, record.merkle_root)
        return EXIT_VERIFICATION_FAILED
    return EXIT_SUCCESS


def main(argv: Optional[Sequence[str]] = None) -> int:
    return run_command(_parse_args, _run, argv)


if __name__ == "__main__":
    raise SystemExit(main())
