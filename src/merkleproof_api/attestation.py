from __future__ import annotations
import datetime
import logging
from pathlib import Path

from .crypto import jcs_dumps, ed25519_generate, ed25519_sign, B64
from .merkle import MerkleTree
from .models import SignedRoot

log = logging.getLogger(__name__)


def _now_iso() -> str:
    return datetime.datetime.now(datetime.timezone.utc).isoformat()


def signed_root_body(tree: MerkleTree, signer_pk_bytes: bytes) -> dict:
    return {
        "algorithm": tree.algorithm,
        "tree_size": len(tree),
        "merkle_root_hex": tree.root_hex,
        "ts": _now_iso(),
        "signer_pubkey_b64": B64(signer_pk_bytes),
    }


def make_signed_root(
    tree: MerkleTree, signer_sk_bytes: bytes, signer_pk_bytes: bytes
) -> SignedRoot:
    """Sign the RFC 8785 canonical form of the tree head with Ed25519."""
    body = signed_root_body(tree, signer_pk_bytes)
    sig = ed25519_sign(signer_sk_bytes, jcs_dumps(body))
    return SignedRoot(**{**body, "signature_b64": B64(sig)})


def load_signing_keys(sk_path: Path, pk_path: Path, allow_dev_keygen: bool = False):
    """Read the Ed25519 keypair, generating it only when dev keygen is allowed."""
    if not sk_path.exists() or not pk_path.exists():
        if not allow_dev_keygen:
            raise FileNotFoundError(
                "signing keypair not found; set MERKLEPROOF_ALLOW_DEV_KEYGEN=true to auto-generate for development"
            )
        sk_path.parent.mkdir(parents=True, exist_ok=True)
        pk_path.parent.mkdir(parents=True, exist_ok=True)
        sk, pk = ed25519_generate()
        sk_path.write_bytes(sk)
        pk_path.write_bytes(pk)
        log.warning("generated development signing keypair at %s", sk_path.parent)
    return sk_path.read_bytes(), pk_path.read_bytes()
