from __future__ import annotations
import enum
import logging
from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Sequence, Tuple

from .crypto import Hasher, hash_concat, sha256, to_hex

log = logging.getLogger(__name__)


class HashDirection(str, enum.Enum):
    """Side on which a sibling digest is concatenated while folding a proof."""

    LEFT = "L"
    RIGHT = "R"


@dataclass(frozen=True)
class Node:
    value: bytes
    left: Optional["Node"] = None
    right: Optional["Node"] = None

    def __post_init__(self):
        if (self.left is None) != (self.right is None):
            raise ValueError("node must have zero or two children")

    @property
    def is_leaf(self) -> bool:
        return self.left is None


@dataclass
class Proof:
    """Sibling digests from the leaf's neighbour up to the layer below the root."""

    hashes: List[Tuple[HashDirection, bytes]] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.hashes)

    def __iter__(self) -> Iterator[Tuple[HashDirection, bytes]]:
        return iter(self.hashes)


class MerkleTree:
    def __init__(self, root: Node, size: int, hasher: Hasher = sha256):
        self._root = root
        self._size = size
        self._hasher = hasher

    def __len__(self) -> int:
        return self._size

    @property
    def root(self) -> bytes:
        return self._root.value

    @property
    def root_hex(self) -> str:
        return to_hex(self._root.value)

    @property
    def root_node(self) -> Node:
        return self._root

    @property
    def hasher(self) -> Hasher:
        return self._hasher

    @property
    def algorithm(self) -> str:
        return getattr(self._hasher, "__name__", "custom")

    @classmethod
    def construct(cls, data: Sequence[bytes], hasher: Hasher = sha256) -> "MerkleTree":
        """Build the tree bottom-up from ordered data blocks.

        Nodes are paired left to right at every layer. When a layer has an odd
        number of nodes the last one moves up to the next layer as-is and is
        paired there.
        """
        if not data:
            raise ValueError("no data blocks")
        layer = [Node(hasher(bytes(block))) for block in data]
        while len(layer) > 1:
            nxt = []
            for i in range(0, len(layer) - 1, 2):
                left, right = layer[i], layer[i + 1]
                nxt.append(Node(hash_concat(hasher, left.value, right.value), left, right))
            if len(layer) % 2 == 1:
                nxt.append(layer[-1])  # carried up unchanged
            layer = nxt
        log.debug("built merkle tree: %d blocks, root=%s", len(data), to_hex(layer[0].value))
        return cls(layer[0], len(data), hasher)

    @classmethod
    def verify(
        cls, data: Sequence[bytes], claimed_root: bytes, hasher: Hasher = sha256
    ) -> bool:
        """Rebuild the tree from the full dataset and compare roots."""
        if not data:
            return False
        return cls.construct(data, hasher).root == claimed_root

    def prove(self, block: bytes) -> Optional[Proof]:
        """Return an inclusion proof for ``block`` or None if it is not a leaf.

        Leftmost match wins when a block occurs more than once.
        """
        target = self._hasher(bytes(block))
        # depth-first, left subtree before right; path holds entries root-down
        stack: List[Tuple[Node, Tuple[Tuple[HashDirection, bytes], ...]]] = [(self._root, ())]
        while stack:
            node, path = stack.pop()
            if node.is_leaf:
                if node.value == target:
                    log.debug("proof found: %d entries", len(path))
                    return Proof(list(reversed(path)))
                continue
            assert node.left is not None and node.right is not None
            stack.append((node.right, path + ((HashDirection.LEFT, node.left.value),)))
            stack.append((node.left, path + ((HashDirection.RIGHT, node.right.value),)))
        log.debug("proof not found for leaf %s", to_hex(target))
        return None

    @staticmethod
    def verify_proof(
        block: bytes, proof: Proof, claimed_root: bytes, hasher: Hasher = sha256
    ) -> bool:
        return verify_proof(block, proof, claimed_root, hasher)

    def leaves(self) -> Iterator[bytes]:
        """Leaf digests in left-to-right order."""
        stack = [self._root]
        while stack:
            node = stack.pop()
            if node.is_leaf:
                yield node.value
            else:
                stack.append(node.right)  # type: ignore[arg-type]
                stack.append(node.left)  # type: ignore[arg-type]


def verify_proof(
    block: bytes, proof: Proof, claimed_root: bytes, hasher: Hasher = sha256
) -> bool:
    """Fold the proof against H(block) leaf-to-root and compare with the root.

    Malformed entries (unknown side, non-bytes sibling) make the proof invalid
    rather than raising.
    """
    h = hasher(bytes(block))
    for side, sibling in proof.hashes:
        if not isinstance(sibling, (bytes, bytearray)):
            return False
        if side == HashDirection.LEFT:
            h = hash_concat(hasher, bytes(sibling), h)
        elif side == HashDirection.RIGHT:
            h = hash_concat(hasher, h, bytes(sibling))
        else:
            return False
    return h == claimed_root
