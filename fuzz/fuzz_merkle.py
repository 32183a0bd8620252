"""Fuzz harness for Merkle tree construction & inclusion proof round trips."""
from __future__ import annotations
import atheris
import sys

with atheris.instrument_imports():
    from merkleproof_api.merkle import MerkleTree, verify_proof


def TestOneInput(data: bytes):  # noqa: N802
    if not data:
        return
    # Split data deterministically into blocks (bounded count)
    # Use fixed-size chunks to avoid quadratic blowups.
    size = max(1, min(32, data[0]))
    blocks = [data[i : i + size] for i in range(1, min(len(data), 1 + size * 64), size)]
    if not blocks:
        return
    tree = MerkleTree.construct(blocks)
    if not MerkleTree.verify(blocks, tree.root):
        raise RuntimeError("rebuilt root differs")
    # Pick a block based on trailing byte
    block = blocks[data[-1] % len(blocks)]
    proof = tree.prove(block)
    if proof is None:
        raise RuntimeError("block of the dataset not found")
    if not verify_proof(block, proof, tree.root):
        raise RuntimeError("valid inclusion proof failed")


def main():
    atheris.Setup(sys.argv, TestOneInput, enable_python_coverage=True)
    atheris.Fuzz()


if __name__ == "__main__":
    main()
