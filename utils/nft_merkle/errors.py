"""Errors raised by the whitelist, proof and provenance tooling."""

from __future__ import annotations


class NftMerkleError(Exception):
    """Base class for every error the command line tools report."""


class EmptyInputError(NftMerkleError, ValueError):
    pass


class EmptyDirectoryError(EmptyInputError):
    pass


class LeafNotFoundError(NftMerkleError, LookupError):
    pass


class MalformedAddressError(NftMerkleError, ValueError):
    pass


class MissingArtifactError(NftMerkleError, FileNotFoundError):
    pass
