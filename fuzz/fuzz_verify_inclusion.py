"""Inclusion proof fuzzing with mutated proofs."""
from __future__ import annotations
import atheris
import sys
import random

with atheris.instrument_imports():
    from merkleproof_api.merkle import HashDirection, MerkleTree, Proof, verify_proof


def TestOneInput(data: bytes):  # noqa: N802
    if len(data) < 8:
        return
    # Derive variable chunk size & mutation seed
    seed = int.from_bytes(data[:4], "little")
    random.seed(seed)
    chunk_len = 1 + (data[4] % 32)
    body = data[5:]
    blocks = [body[i : i + chunk_len] for i in range(0, min(len(body), chunk_len * 16), chunk_len)]
    if len(blocks) < 3 or len(set(blocks)) != len(blocks):
        return
    tree = MerkleTree.construct(blocks)
    block = blocks[seed % len(blocks)]
    proof = list(tree.prove(block).hashes)
    # With some probability, mutate one entry to exercise negative path
    if random.random() < 0.4 and proof:
        i = random.randrange(len(proof))
        side, sib = proof[i]
        if random.random() < 0.5:
            proof[i] = (side, bytes([sib[0] ^ 0x01]) + sib[1:])
        else:
            flipped = HashDirection.LEFT if side is HashDirection.RIGHT else HashDirection.RIGHT
            proof[i] = (flipped, sib)
        if verify_proof(block, Proof(proof), tree.root):
            raise RuntimeError("tampered proof unexpectedly verified")
    elif not verify_proof(block, Proof(proof), tree.root):
        raise RuntimeError("valid proof failed")


def main():
    atheris.Setup(sys.argv, TestOneInput, enable_python_coverage=True)
    atheris.Fuzz()


if __name__ == "__main__":
    main()
