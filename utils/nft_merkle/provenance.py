"""Provenance hash over a collection's metadata files.

Publishing the hash before the sale commits to the token order: anyone can
rerun the tool on the revealed metadata and compare.
"""

from __future__ import annotations

import argparse
import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional, Sequence

from .cli import EXIT_SUCCESS, add_common_arguments, run_command, utc_timestamp, write_text
from .errors import EmptyDirectoryError, MissingArtifactError
from .hashing import sha256, to_hex


TEXT_FILENAME = "provenance.txt"
DATA_FILENAME = "provenance_data.json"

ALGORITHMS = {
    "raw": "SHA256 of concatenated SHA256 digests",
    "hex": "SHA256 of concatenated SHA256 hashes",
}

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProvenanceRecord:
    provenance_hash: str
    file_hashes: List[str]
    files: List[str]
    algorithm: str
    generated_at: str

    @property
    def total_files(self) -> int:
        return len(self.files)

    def to_json(self) -> dict:
        return {
            "provenanceHash": self.provenance_hash,
            "totalFiles": self.total_files,
            "fileHashes": list(self.file_hashes),
            "files": list(self.files),
            "generatedAt": self.generated_at,
            "algorithm": self.algorithm,
        }


def _combine(digests: Sequence[bytes], concat: str) -> bytes:
    if concat == "raw":
        return b"".join(digests)
    if concat == "hex":
        # Earlier releases joined the hex text of each digest.
        return "".join(digest.hex() for digest in digests).encode("ascii")
    raise ValueError(f"concat must be one of {sorted(ALGORITHMS)}")


def provenance_hash(blobs: Iterable[bytes], *, concat: str = "raw") -> bytes:
    """Hash each blob, then hash the concatenated digests in the given order."""
    digests = [sha256(blob) for blob in blobs]
    if not digests:
        raise EmptyDirectoryError("Provenance requires at least one file")
    return sha256(_combine(digests, concat))


def list_metadata_files(directory: Path, suffix: str = ".json") -> List[Path]:
    if not directory.is_dir():
        raise MissingArtifactError(f'Directory "{directory}" not found')
    files = sorted(
        (path for path in directory.iterdir() if path.is_file() and path.name.endswith(suffix)),
        key=lambda path: path.name,
    )
    if not files:
        raise EmptyDirectoryError(f'No {suffix} files found in "{directory}"')
    return files


def compute_provenance(
    directory: Path, *, suffix: str = ".json", concat: str = "raw"
) -> ProvenanceRecord:
    files = list_metadata_files(directory, suffix)
    digests = []
    for position, path in enumerate(files):
        digest = sha256(path.read_bytes())
        logger.debug("%4d. %s -> %s", position, path.name, digest.hex())
        digests.append(digest)
    return ProvenanceRecord(
        provenance_hash=to_hex(sha256(_combine(digests, concat))),
        file_hashes=[digest.hex() for digest in digests],
        files=[path.name for path in files],
        algorithm=ALGORITHMS[concat],
        generated_at=utc_timestamp(),
    )


def write_provenance(record: ProvenanceRecord, out_dir: Path) -> tuple[Path, Path]:
    text_path = write_text(out_dir / TEXT_FILENAME, record.provenance_hash)
    data_path = write_text(out_dir / DATA_FILENAME, json.dumps(record.to_json(), indent=2))
    return text_path, data_path


def _parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Compute the provenance hash of a metadata directory",
    )
    parser.add_argument(
        "metadata_dir",
        nargs="?",
        type=Path,
        default=Path(os.getenv("METADATA_DIR", "metadata")),
        help="Directory holding one metadata file per token (default: metadata)",
    )
    parser.add_argument(
        "--suffix",
        default=".json",
        help="Only hash files whose name ends with this suffix (default: .json)",
    )
    parser.add_argument(
        "--concat",
        choices=sorted(ALGORITHMS),
        default="raw",
        help="Concatenate raw digests (default) or their hex text, as earlier releases did",
    )
    add_common_arguments(parser)
    return parser.parse_args(argv)


def _run(args: argparse.Namespace) -> int:
    logger.info("Using metadata directory %s", args.metadata_dir)
    record = compute_provenance(args.metadata_dir, suffix=args.suffix, concat=args.concat)
    text_path, data_path = write_provenance(record, args.out_dir)

    print(f"Total files: {record.total_files}")
    print(f"Algorithm: {record.algorithm}")
    print(f"Provenance hash: {record.provenance_hash}")
    print(f"Hash written to {text_path}")
    print(f"Full data written to {data_path}")
    print(f"Set PROVENANCE_HASH={record.provenance_hash} before the sale starts")
    return EXIT_SUCCESS


def main(argv: Optional[Sequence[str]] = None) -> int:
    return run_command(_parse_args, _run, argv)


if __name__ == "__main__":
    raise SystemExit(main())
