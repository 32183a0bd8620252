from __future__ import annotations
from typing import List, Literal, Union
from pydantic import BaseModel, Field, field_validator
from pydantic import ConfigDict

from .crypto import B64D, from_hex, to_hex
from .merkle import HashDirection, Proof


def _check_hex(v: str) -> str:
    from_hex(v)
    return v.lower()


def _check_b64(v: str) -> str:
    B64D(v)
    return v


class ProofEntry(BaseModel):
    direction: Literal["L", "R"]
    sibling_hex: str

    @field_validator("sibling_hex")
    @classmethod
    def hex_digest(cls, v: str) -> str:
        return _check_hex(v)


class ProofDocument(BaseModel):
    """Portable inclusion proof.

    ``hashes`` is ordered leaf-to-root; ``direction`` names the side of the
    sibling in each concatenation.
    """

    algorithm: str = "sha256"
    tree_size: int = Field(ge=1)
    leaf_hex: str
    root_hex: str
    hashes: List[ProofEntry] = Field(default_factory=list)

    @field_validator("leaf_hex", "root_hex")
    @classmethod
    def hex_digests(cls, v: str) -> str:
        return _check_hex(v)

    @classmethod
    def from_proof(
        cls, proof: Proof, leaf: bytes, root: bytes, tree_size: int, algorithm: str
    ) -> "ProofDocument":
        return cls(
            algorithm=algorithm,
            tree_size=tree_size,
            leaf_hex=to_hex(leaf),
            root_hex=to_hex(root),
            hashes=[
                ProofEntry(direction=side.value, sibling_hex=to_hex(sib))
                for side, sib in proof
            ],
        )

    def to_proof(self) -> Proof:
        return entries_to_proof(self.hashes)


def entries_to_proof(entries: List[ProofEntry]) -> Proof:
    return Proof([(HashDirection(e.direction), from_hex(e.sibling_hex)) for e in entries])


class BuildRequest(BaseModel):
    """Ordered data blocks, base64 encoded."""

    model_config = ConfigDict(strict=True)

    blocks_b64: List[str]

    @field_validator("blocks_b64")
    @classmethod
    def non_empty_b64(cls, v: List[str]) -> List[str]:
        if not v:
            raise ValueError("at least one block is required")
        for b in v:
            _check_b64(b)
        return v

    def blocks(self) -> List[bytes]:
        return [B64D(b) for b in self.blocks_b64]


class ProveRequest(BuildRequest):
    block_b64: str

    @field_validator("block_b64")
    @classmethod
    def b64_block(cls, v: str) -> str:
        return _check_b64(v)


class VerifyRequest(BuildRequest):
    root_hex: str

    @field_validator("root_hex")
    @classmethod
    def hex_root(cls, v: str) -> str:
        return _check_hex(v)


class VerifyProofRequest(BaseModel):
    block_b64: str
    proof: Union[ProofDocument, List[ProofEntry]]
    root_hex: str

    @field_validator("block_b64")
    @classmethod
    def b64_block(cls, v: str) -> str:
        return _check_b64(v)

    @field_validator("root_hex")
    @classmethod
    def hex_root(cls, v: str) -> str:
        return _check_hex(v)

    def to_proof(self) -> Proof:
        if isinstance(self.proof, ProofDocument):
            return self.proof.to_proof()
        return entries_to_proof(self.proof)


class SignedRoot(BaseModel):
    """Signed tree head: a Merkle root attested with Ed25519."""

    algorithm: str
    tree_size: int
    merkle_root_hex: str
    ts: str
    signer_pubkey_b64: str
    signature_b64: str
