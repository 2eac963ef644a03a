from __future__ import annotations

import argparse
import dataclasses
import json
import logging
import os
from collections import Counter
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence

from .address import Address, parse_address
from .cli import EXIT_SUCCESS, add_common_arguments, run_command, write_text
from .errors import EmptyInputError, MalformedAddressError, MissingArtifactError
from .hashing import to_hex
from .merkle_tree import MerkleTree


ROOT_FILENAME = "merkle_root.txt"
DATA_FILENAME = "whitelist_data.json"

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WhitelistData:
    """Contents of ``whitelist_data.json``.

    The ``tree`` dump is for people to read; proofs always rebuild the tree
    from ``addresses``.
    """

    merkle_root: str
    addresses: List[str]
    tree: str = ""

    @property
    def total_addresses(self) -> int:
        return len(self.addresses)

    def to_json(self) -> dict:
        return {
            "merkleRoot": self.merkle_root,
            "totalAddresses": self.total_addresses,
            "addresses": list(self.addresses),
            "tree": self.tree,
        }

    @classmethod
    def from_tree(cls, tree: MerkleTree, addresses: Sequence[Address]) -> "WhitelistData":
        return cls(
            merkle_root=to_hex(tree.root),
            addresses=[address.value for address in addresses],
            tree=tree.render(),
        )


def parse_whitelist(text: str) -> List[Address]:
    """Parse one address per line.

    Blank lines and lines that do not start with ``0x`` are skipped, so
    headers and comments are allowed. Duplicates are kept in place.
    """
    addresses: List[Address] = []
    for lineno, line in enumerate(text.splitlines(), start=1):
        entry = line.strip().lstrip("\ufeff")
        if not entry:
            continue
        if entry[:2].lower() != "0x":
            logger.debug("Skipping line %d: %r", lineno, entry)
            continue
        try:
            addresses.append(parse_address(entry))
        except MalformedAddressError as exc:
            raise MalformedAddressError(f"line {lineno}: {exc}") from None
    duplicates = [value for value, count in Counter(a.value for a in addresses).items() if count > 1]
    if duplicates:
        logger.warning(
            "%d address(es) appear more than once; proofs resolve to the first occurrence: %s",
            len(duplicates),
            ", ".join(duplicates),
        )
    return addresses


def read_whitelist(path: Path) -> List[Address]:
    if not path.is_file():
        raise MissingArtifactError(f'Whitelist file "{path}" not found')
    try:
        text = path.read_text(encoding="utf-8-sig")
    except UnicodeDecodeError as exc:
        raise MalformedAddressError(f'Whitelist file "{path}" is not UTF-8 text: {exc}') from None
    addresses = parse_whitelist(text)
    if not addresses:
        raise EmptyInputError(f'No valid addresses found in "{path}"')
    return addresses


def build_whitelist(addresses: Sequence[Address]) -> tuple[MerkleTree, WhitelistData]:
    if not addresses:
        raise EmptyInputError("Whitelist is empty")
    tree = MerkleTree.from_addresses(addresses)
    return tree, WhitelistData.from_tree(tree, addresses)


def write_whitelist_artifacts(data: WhitelistData, out_dir: Path) -> tuple[Path, Path]:
    root_path = write_text(out_dir / ROOT_FILENAME, data.merkle_root)
    data_path = write_text(out_dir / DATA_FILENAME, json.dumps(data.to_json(), indent=2))
    return root_path, data_path


def load_whitelist_data(path: Path) -> WhitelistData:
    if not path.is_file():
        raise MissingArtifactError(
            f'"{path}" not found; run nft-whitelist on your whitelist file first'
        )
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
        return WhitelistData(
            merkle_root=payload["merkleRoot"],
            addresses=list(payload["addresses"]),
            tree=payload.get("tree", ""),
        )
    except (ValueError, KeyError, TypeError) as exc:
        raise MissingArtifactError(f'"{path}" is not a whitelist data file: {exc}') from None


def _parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Build the whitelist Merkle tree and write its root",
    )
    parser.add_argument(
        "whitelist",
        nargs="?",
        type=Path,
        default=Path(os.getenv("WHITELIST_FILE", "whitelist.txt")),
        help="Text file with one address per line (default: whitelist.txt)",
    )
    parser.add_argument(
        "--proofs-out",
        type=Path,
        default=None,
        help="Also write the proof of every address to this JSON file",
    )
    add_common_arguments(parser)
    return parser.parse_args(argv)


def _run(args: argparse.Namespace) -> int:
    addresses = read_whitelist(args.whitelist)
    tree, data = build_whitelist(addresses)
    root_path, data_path = write_whitelist_artifacts(data, args.out_dir)
    logger.info("Built tree of depth %d over %d leaves", tree.depth, len(tree))

    print(f"Total addresses: {data.total_addresses}")
    print(f"Merkle root: {data.merkle_root}")
    print(f"Root written to {root_path}")
    print(f"Whitelist data written to {data_path}")
    if args.proofs_out is not None:
        proofs = {
            "merkleRoot": data.merkle_root,
            "proofs": [
                dict(dataclasses.asdict(proof), address=address.value)
                for address, proof in zip(addresses, tree.build_all_hex_proofs())
            ],
        }
        proofs_path = write_text(args.proofs_out, json.dumps(proofs, indent=2))
        print(f"Proofs written to {proofs_path}")
    print(f"Set WHITELIST_MERKLE_ROOT={data.merkle_root} before deploying")
    return EXIT_SUCCESS


def main(argv: Optional[Sequence[str]] = None) -> int:
    return run_command(_parse_args, _run, argv)


if __name__ == "__main__":
    raise SystemExit(main())
