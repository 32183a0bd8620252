from __future__ import annotations
import base64
import binascii
import hashlib
from typing import Callable, Tuple

import nacl.signing
import rfc8785

Hasher = Callable[[bytes], bytes]


def B64(b: bytes) -> str:
    """Base64-encode bytes to ASCII string."""
    return base64.b64encode(b).decode("ascii")


def B64D(s: str) -> bytes:
    """Decode base64 ASCII string to bytes with strict validation."""
    try:
        return base64.b64decode(s.encode("ascii"), validate=True)
    except Exception as e:
        raise ValueError("invalid base64") from e


def to_hex(b: bytes) -> str:
    return b.hex()


def from_hex(s: str) -> bytes:
    """Decode a hex digest; rejects odd lengths and non-hex characters."""
    try:
        return binascii.unhexlify(s.encode("ascii"))
    except Exception as e:
        raise ValueError("invalid hex") from e


def sha256(data: bytes) -> bytes:
    return hashlib.sha256(data).digest()


def get_hasher(name: str) -> Hasher:
    """Resolve a hashlib algorithm name to a fixed-size digest function.

    Extendable-output functions (shake_*) are rejected since their digest
    length is caller-chosen.
    """
    algo = name.lower().replace("-", "_")
    if algo == "sha256":
        return sha256
    if algo.startswith("shake") or algo not in hashlib.algorithms_available:
        raise ValueError(f"unsupported hash algorithm: {name}")

    def _h(data: bytes) -> bytes:
        return hashlib.new(algo, data).digest()

    _h.__name__ = algo
    return _h


def hash_concat(h: Hasher, left: bytes, right: bytes) -> bytes:
    """Digest of the raw concatenation left || right."""
    return h(left + right)


def jcs_dumps(obj) -> bytes:
    """Deterministic canonical JSON bytes per RFC8785."""
    return rfc8785.dumps(obj)


def ed25519_generate() -> Tuple[bytes, bytes]:
    sk = nacl.signing.SigningKey.generate()
    pk = sk.verify_key
    return (sk.encode(), pk.encode())


def ed25519_sign(sk_bytes: bytes, data: bytes) -> bytes:
    sk = nacl.signing.SigningKey(sk_bytes)
    sig = sk.sign(data).signature
    return sig


def ed25519_verify(pk_bytes: bytes, data: bytes, signature: bytes) -> bool:
    try:
        vk = nacl.signing.VerifyKey(pk_bytes)
        vk.verify(data, signature)
        return True
    except Exception:
        return False
