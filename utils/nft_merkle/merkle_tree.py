"""Sorted-pair keccak Merkle trees for mint whitelists.

Parents are ``keccak(min(a, b) + max(a, b))`` so a proof carries no
left/right flags, matching OpenZeppelin's ``MerkleProof.verify``. A level with
an odd number of nodes carries its last node up unchanged.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Sequence

from .address import Address, encode_leaf
from .errors import EmptyInputError, LeafNotFoundError
from .hashing import HASH_LENGTH, from_hex, keccak, to_hex


@dataclass(frozen=True)
class MerkleProof:
    index: int
    leaf: str
    proof: List[str]


def hash_pair(left: bytes, right: bytes) -> bytes:
    if right < left:
        left, right = right, left
    return keccak(left + right)


class MerkleTree:
    def __init__(self, leaves: Sequence[bytes]) -> None:
        if not leaves:
            raise EmptyInputError("Merkle tree requires at least one leaf")
        for position, leaf in enumerate(leaves):
            if not isinstance(leaf, bytes) or len(leaf) != HASH_LENGTH:
                raise ValueError(f"Leaf {position} is not a {HASH_LENGTH}-byte hash")
        self.leaves: List[bytes] = list(leaves)
        self.layers: List[List[bytes]] = []
        self._build_layers()

    @classmethod
    def from_addresses(cls, addresses: Iterable[Address]) -> "MerkleTree":
        return cls([encode_leaf(address) for address in addresses])

    def _build_layers(self) -> None:
        current_layer = self.leaves
        self.layers = [current_layer]
        while len(current_layer) > 1:
            next_layer: List[bytes] = []
            for i in range(0, len(current_layer) - 1, 2):
                next_layer.append(hash_pair(current_layer[i], current_layer[i + 1]))
            if len(current_layer) % 2:
                next_layer.append(current_layer[-1])
            current_layer = next_layer
            self.layers.append(current_layer)

    def __len__(self) -> int:
        return len(self.leaves)

    @property
    def root(self) -> bytes:
        return self.layers[-1][0]

    @property
    def depth(self) -> int:
        return len(self.layers) - 1

    def index_of(self, leaf: bytes) -> int:
        """Index of the first occurrence of ``leaf``.

        Duplicate whitelist entries hash to the same leaf and cannot be told
        apart, so the earliest one wins.
        """
        try:
            return self.leaves.index(leaf)
        except ValueError:
            raise LeafNotFoundError(f"Leaf {to_hex(leaf)} is not in the tree") from None

    def get_proof(self, index: int) -> List[bytes]:
        if index < 0 or index >= len(self.leaves):
            raise IndexError("Leaf index out of range")
        proof: List[bytes] = []
        for layer in self.layers[:-1]:
            pair_index = index ^ 1
            # The carried-up last node of an odd layer has no partner.
            if pair_index < len(layer):
                proof.append(layer[pair_index])
            index //= 2
        return proof

    def prove(self, leaf: bytes) -> List[bytes]:
        return self.get_proof(self.index_of(leaf))

    def verify(self, proof: Sequence[bytes], leaf: bytes) -> bool:
        return verify_proof(proof, leaf, self.root)

    def build_hex_proof(self, index: int) -> MerkleProof:
        proof_bytes = self.get_proof(index)
        return MerkleProof(
            index=index,
            leaf=to_hex(self.leaves[index]),
            proof=[to_hex(node) for node in proof_bytes],
        )

    def build_all_hex_proofs(self) -> List[MerkleProof]:
        return [self.build_hex_proof(i) for i in range(len(self.leaves))]

    def render(self) -> str:
        """Draw the tree root first, one node per line."""
        lines = ["└─ " + self.root.hex()]
        self._render_children(self.depth, 0, "   ", lines)
        return "\n".join(lines)

    def _render_children(self, level: int, index: int, prefix: str, lines: List[str]) -> None:
        if level == 0:
            return
        below = self.layers[level - 1]
        children = [i for i in (2 * index, 2 * index + 1) if i < len(below)]
        for position, child in enumerate(children):
            last = position == len(children) - 1
            lines.append(prefix + ("└─ " if last else "├─ ") + below[child].hex())
            self._render_children(level - 1, child, prefix + ("   " if last else "│  "), lines)


def verify_proof(proof: Sequence[bytes], leaf: bytes, root: bytes) -> bool:
    """Fold ``proof`` up from ``leaf`` and compare with ``root``.

    Malformed input never raises; it simply fails verification.
    """
    if not _is_node(leaf) or not _is_node(root):
        return False
    try:
        siblings = list(proof)
    except TypeError:
        return False
    computed = leaf
    for sibling in siblings:
        if not _is_node(sibling):
            return False
        computed = hash_pair(computed, sibling)
    return computed == root


def verify_hex_proof(proof: Sequence[str], leaf: bytes, root: str) -> bool:
    try:
        siblings = [from_hex(node) for node in proof]
        root_bytes = from_hex(root)
    except (TypeError, ValueError):
        return False
    return verify_proof(siblings, leaf, root_bytes)


def _is_node(value: object) -> bool:
    return isinstance(value, bytes) and len(value) == HASH_LENGTH
