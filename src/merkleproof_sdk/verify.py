from typing import Any, Dict
from merkleproof_api.crypto import B64D, ed25519_verify, from_hex, get_hasher, jcs_dumps
from merkleproof_api.merkle import verify_proof
from merkleproof_api.models import ProofDocument


def verify_proof_document(proof_json: Dict[str, Any], block: bytes) -> bool:
    """Return True if ``block`` is included under the document's root.

    The document must name a supported algorithm and its ``leaf_hex`` must be
    the digest of ``block``. Any malformed field yields False.
    """
    try:
        doc = ProofDocument.model_validate(proof_json)
        h = get_hasher(doc.algorithm)
        if h(block) != from_hex(doc.leaf_hex):
            return False
        return verify_proof(block, doc.to_proof(), from_hex(doc.root_hex), h)
    except Exception:
        return False


def verify_signed_root(sth_json: Dict[str, Any]) -> bool:
    """Verify a signed tree head (Merkle root attestation)."""
    try:
        sig_b64 = sth_json["signature_b64"]
        pub_b64 = sth_json["signer_pubkey_b64"]
    except (KeyError, TypeError):
        return False
    body = {k: v for k, v in sth_json.items() if k != "signature_b64"}
    try:
        return ed25519_verify(B64D(pub_b64), jcs_dumps(body), B64D(sig_b64))
    except Exception:
        return False


def verify_inclusion(
    block: bytes, proof_json: Dict[str, Any], sth_json: Dict[str, Any]
) -> bool:
    """Check a proof document against a signed root.

    Requires a valid signature on the root, matching root/size/algorithm in
    both documents, and a proof that folds to that root.
    """
    if not verify_signed_root(sth_json):
        return False
    try:
        if proof_json["root_hex"].lower() != sth_json["merkle_root_hex"].lower():
            return False
        if proof_json.get("tree_size") != sth_json.get("tree_size"):
            return False
        if proof_json.get("algorithm", "sha256") != sth_json.get("algorithm"):
            return False
    except (KeyError, AttributeError, TypeError):
        return False
    return verify_proof_document(proof_json, block)
