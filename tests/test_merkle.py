import hashlib

import pytest

from merkleproof_api.crypto import get_hasher
from merkleproof_api.merkle import HashDirection, MerkleTree, Node, Proof, verify_proof

L, R = HashDirection.LEFT, HashDirection.RIGHT


def H(b: bytes) -> bytes:
    return hashlib.sha256(b).digest()


def HC(a: bytes, b: bytes) -> bytes:
    return H(a + b)


def example_data(n: int):
    return [bytes([i]) for i in range(n)]


def test_merkle_basic():
    leaves = [f"leaf-{i}".encode() for i in range(5)]
    tree = MerkleTree.construct(leaves)
    assert tree.root
    proof = tree.prove(leaves[2])
    assert verify_proof(leaves[2], proof, tree.root)


def test_single_block_root_is_leaf_digest():
    data = example_data(1)
    tree = MerkleTree.construct(data)
    assert tree.root == H(data[0])
    assert tree.root_node.is_leaf
    assert MerkleTree.verify(data, H(data[0]))


def test_single_block_proof_is_empty_not_missing():
    data = example_data(1)
    tree = MerkleTree.construct(data)
    proof = tree.prove(data[0])
    assert proof is not None
    assert len(proof) == 0
    assert verify_proof(data[0], proof, tree.root)
    assert tree.prove(b"\x01") is None


def test_known_roots():
    assert MerkleTree.construct(example_data(3)).root_hex == (
        "773a93ac37ea78b3f14ac31872c83886b0a0f1fec562c4e848e023c889c2ce9f"
    )
    assert MerkleTree.construct(example_data(4)).root_hex == (
        "9675e04b4ba9dc81b06e81731e2d21caa2c95557a85dcfa3fff70c9ff0f30b2e"
    )
    assert MerkleTree.construct(example_data(8)).root_hex == (
        "0727b310f87099c1ba2ec0ba408def82c308237c8577f0bdfd2643e9cc6b7578"
    )


def test_two_blocks():
    d = example_data(2)
    tree = MerkleTree.construct(d)
    assert tree.root == HC(H(d[0]), H(d[1]))
    assert tree.prove(d[0]).hashes == [(R, H(d[1]))]
    assert tree.prove(d[1]).hashes == [(L, H(d[0]))]


def test_verify_two_blocks():
    d = example_data(2)
    assert not MerkleTree.verify(d, H(d[0]))
    assert MerkleTree.verify(d, HC(H(d[0]), H(d[1])))
    # order matters
    assert not MerkleTree.verify(d, HC(H(d[1]), H(d[0])))


def test_odd_leaf_is_carried_up_unhashed():
    d = example_data(3)
    tree = MerkleTree.construct(d)
    assert tree.root == HC(HC(H(d[0]), H(d[1])), H(d[2]))
    # the carried leaf pairs directly with the left subtree
    assert tree.prove(d[2]).hashes == [(L, HC(H(d[0]), H(d[1])))]


def test_four_blocks_proof():
    d = example_data(4)
    tree = MerkleTree.construct(d)
    proof = tree.prove(d[0])
    assert proof.hashes == [(R, H(d[1])), (R, HC(H(d[2]), H(d[3])))]
    assert verify_proof(d[0], proof, tree.root)
    manual = Proof([(R, H(d[3])), (L, HC(H(d[0]), H(d[1])))])
    assert MerkleTree.verify_proof(d[2], manual, tree.root)


def test_eight_blocks_proofs():
    d = example_data(8)
    #                 h15(root)
    #         h13                 h14
    #    h9        h10       h11       h12
    # h1   h2   h3   h4   h5   h6   h7   h8
    h1, h2, h3, h4, h5, h6, h7, h8 = (H(b) for b in d)
    h9, h10, h11, h12 = HC(h1, h2), HC(h3, h4), HC(h5, h6), HC(h7, h8)
    h13, h14 = HC(h9, h10), HC(h11, h12)
    tree = MerkleTree.construct(d)
    assert tree.root == HC(h13, h14)
    assert tree.prove(d[1]).hashes == [(L, h1), (R, h10), (R, h14)]
    assert tree.prove(d[4]).hashes == [(R, h6), (R, h12), (L, h13)]


def test_five_blocks_carried_twice():
    d = example_data(5)
    h = [H(b) for b in d]
    a, b = HC(h[0], h[1]), HC(h[2], h[3])
    c = HC(a, b)
    tree = MerkleTree.construct(d)
    assert tree.root == HC(c, h[4])
    assert tree.prove(d[4]).hashes == [(L, c)]
    assert tree.prove(d[0]).hashes == [(R, h[1]), (R, b), (R, h[4])]
    assert tree.prove(d[2]).hashes == [(R, h[3]), (L, a), (R, h[4])]


def test_six_blocks_carried_internal_node_keeps_subtree():
    d = example_data(6)
    h = [H(b) for b in d]
    a, b, c = HC(h[0], h[1]), HC(h[2], h[3]), HC(h[4], h[5])
    top = HC(a, b)
    tree = MerkleTree.construct(d)
    assert tree.root == HC(top, c)
    assert tree.prove(d[4]).hashes == [(R, h[5]), (L, top)]
    assert tree.prove(d[5]).hashes == [(L, h[4]), (L, top)]


def test_seven_blocks():
    d = example_data(7)
    h = [H(b) for b in d]
    a, b, c = HC(h[0], h[1]), HC(h[2], h[3]), HC(h[4], h[5])
    left, right = HC(a, b), HC(c, h[6])
    tree = MerkleTree.construct(d)
    assert tree.root == HC(left, right)
    assert tree.prove(d[6]).hashes == [(L, c), (L, left)]


@pytest.mark.parametrize("n", list(range(1, 18)) + [31, 32, 33, 100])
def test_every_block_round_trips(n):
    d = [f"block-{i}".encode() for i in range(n)]
    tree = MerkleTree.construct(d)
    assert len(tree) == n
    assert list(tree.leaves()) == [H(b) for b in d]
    for b in d:
        proof = tree.prove(b)
        assert proof is not None
        assert verify_proof(b, proof, tree.root)


def test_determinism():
    d = example_data(11)
    assert MerkleTree.construct(d).root == MerkleTree.construct(list(d)).root


def test_single_byte_mutation_changes_root():
    d = [b"alpha", b"beta", b"gamma", b"delta", b"epsilon"]
    base = MerkleTree.construct(d).root
    for i, block in enumerate(d):
        for j in range(len(block)):
            mutated = bytearray(block)
            mutated[j] ^= 0x01
            changed = list(d)
            changed[i] = bytes(mutated)
            assert MerkleTree.construct(changed).root != base


def test_reordering_changes_root():
    d = example_data(4)
    assert MerkleTree.construct(d).root != MerkleTree.construct(d[::-1]).root


def test_missing_block_not_found():
    tree = MerkleTree.construct(example_data(8))
    assert tree.prove(b"\x08") is None
    assert tree.prove(b"") is None


def test_internal_digest_is_not_a_leaf():
    d = example_data(3)
    tree = MerkleTree.construct(d)
    # a block that hashes to nothing in the tree, even though internal values exist
    assert tree.prove(HC(H(d[0]), H(d[1]))) is None


def test_duplicate_blocks_prove_leftmost():
    d = [b"x", b"y", b"x", b"z"]
    tree = MerkleTree.construct(d)
    proof = tree.prove(b"x")
    assert proof.hashes[0] == (R, H(b"y"))
    assert verify_proof(b"x", proof, tree.root)


def test_tampered_proofs_rejected():
    d = example_data(7)
    tree = MerkleTree.construct(d)
    for block in d:
        proof = tree.prove(block)
        for i, (side, sib) in enumerate(proof.hashes):
            flipped_hash = list(proof.hashes)
            flipped_hash[i] = (side, bytes([sib[0] ^ 0x01]) + sib[1:])
            assert not verify_proof(block, Proof(flipped_hash), tree.root)
            flipped_side = list(proof.hashes)
            flipped_side[i] = (L if side == R else R, sib)
            assert not verify_proof(block, Proof(flipped_side), tree.root)


def test_wrong_block_or_root_rejected():
    d = example_data(4)
    tree = MerkleTree.construct(d)
    proof = tree.prove(d[1])
    assert not verify_proof(d[2], proof, tree.root)
    assert not verify_proof(d[1], proof, H(b"other"))
    assert not MerkleTree.verify(d, H(b"other"))


def test_malformed_proof_returns_false():
    d = example_data(2)
    tree = MerkleTree.construct(d)
    assert not verify_proof(d[0], Proof([("X", H(d[1]))]), tree.root)
    assert not verify_proof(d[0], Proof([(R, H(d[1]).hex())]), tree.root)
    assert not verify_proof(d[0], Proof([(R, H(d[1])[:16])]), tree.root)
    assert not verify_proof(d[0], Proof([(R, H(d[1]))]), "not-bytes")
    # plain string tags are accepted
    assert verify_proof(d[0], Proof([("R", H(d[1]))]), tree.root)


def test_empty_input_rejected():
    with pytest.raises(ValueError):
        MerkleTree.construct([])
    assert not MerkleTree.verify([], H(b""))


def test_node_requires_zero_or_two_children():
    leaf = Node(H(b"a"))
    assert leaf.is_leaf
    with pytest.raises(ValueError):
        Node(H(b"b"), left=leaf)
    parent = Node(HC(leaf.value, leaf.value), leaf, leaf)
    assert not parent.is_leaf


def test_alternate_hasher():
    d = example_data(5)
    h = get_hasher("sha3_256")
    tree = MerkleTree.construct(d, h)
    assert tree.algorithm == "sha3_256"
    assert tree.root != MerkleTree.construct(d).root
    assert MerkleTree.verify(d, tree.root, h)
    proof = tree.prove(d[3])
    assert verify_proof(d[3], proof, tree.root, h)
    assert not verify_proof(d[3], proof, tree.root)


def test_large_tree_proof_is_logarithmic():
    d = [i.to_bytes(4, "big") for i in range(1000)]
    tree = MerkleTree.construct(d)
    proof = tree.prove(d[999])
    assert len(proof) <= 10
    assert verify_proof(d[999], proof, tree.root)
