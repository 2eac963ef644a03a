"""Whitelist Merkle trees, mint proofs and provenance hashes for NFT drops."""

from .address import Address, encode_leaf, parse_address
from .errors import (
    EmptyDirectoryError,
    EmptyInputError,
    LeafNotFoundError,
    MalformedAddressError,
    MissingArtifactError,
    NftMerkleError,
)
from .merkle_tree import MerkleProof, MerkleTree, hash_pair, verify_hex_proof, verify_proof
from .provenance import ProvenanceRecord, compute_provenance, provenance_hash

__all__ = [
    "Address",
    "encode_leaf",
    "parse_address",
    "EmptyDirectoryError",
    "EmptyInputError",
    "LeafNotFoundError",
    "MalformedAddressError",
    "MissingArtifactError",
    "NftMerkleError",
    "MerkleProof",
    "MerkleTree",
    "hash_pair",
    "verify_hex_proof",
    "verify_proof",
    "ProvenanceRecord",
    "compute_provenance",
    "provenance_hash",
]
