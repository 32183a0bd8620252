from __future__ import annotations
import datetime
import logging
from pathlib import Path
from typing import List, Type, TypeVar

from fastapi import FastAPI, Request, HTTPException
from pydantic import BaseModel, ValidationError

from .settings import settings
from .crypto import B64D, from_hex, get_hasher
from .merkle import MerkleTree, verify_proof
from .models import (
    BuildRequest,
    ProofDocument,
    ProveRequest,
    VerifyProofRequest,
    VerifyRequest,
)
from .attestation import load_signing_keys, make_signed_root
from .logutil import level_from_name, setup_logging
from .middleware.size_limit import SizeLimitMiddleware

setup_logging(level_from_name(settings.log_level))
log = logging.getLogger(__name__)

app = FastAPI(title="merkleproof")
app.add_middleware(SizeLimitMiddleware)

M = TypeVar("M", bound=BaseModel)


async def _parse(request: Request, model: Type[M]) -> M:
    ct = request.headers.get("content-type", "")
    if not ct.lower().startswith("application/json"):
        raise HTTPException(status_code=415, detail="unsupported content type")
    try:
        raw = await request.json()
    except Exception:
        raise HTTPException(status_code=400, detail="invalid JSON body")
    if not isinstance(raw, dict):
        raise HTTPException(status_code=400, detail="JSON object expected")
    try:
        return model(**raw)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=f"request schema invalid: {e.error_count()} error(s)")


def _hasher():
    try:
        return get_hasher(settings.hash_algorithm)
    except ValueError as e:
        log.error("bad hash algorithm configured: %s", settings.hash_algorithm)
        raise HTTPException(status_code=500, detail=str(e))


def _build(blocks: List[bytes]) -> MerkleTree:
    if len(blocks) > settings.max_blocks:
        raise HTTPException(status_code=413, detail="too many blocks")
    return MerkleTree.construct(blocks, _hasher())


@app.get("/healthz")
async def healthz():
    return {"ok": True, "ts": datetime.datetime.now(datetime.timezone.utc).isoformat()}


@app.post("/merkle/root")
async def merkle_root(request: Request):
    req = await _parse(request, BuildRequest)
    tree = _build(req.blocks())
    log.info("root computed over %d blocks", len(tree))
    return {"root_hex": tree.root_hex, "tree_size": len(tree), "algorithm": tree.algorithm}


@app.post("/merkle/verify")
async def merkle_verify(request: Request):
    req = await _parse(request, VerifyRequest)
    tree = _build(req.blocks())
    return {"valid": tree.root == from_hex(req.root_hex)}


@app.post("/merkle/prove")
async def merkle_prove(request: Request):
    req = await _parse(request, ProveRequest)
    tree = _build(req.blocks())
    block = B64D(req.block_b64)
    proof = tree.prove(block)
    if proof is None:
        raise HTTPException(status_code=404, detail="block not in tree")
    doc = ProofDocument.from_proof(
        proof, tree.hasher(block), tree.root, len(tree), tree.algorithm
    )
    return doc.model_dump()


@app.post("/merkle/verify-proof")
async def merkle_verify_proof(request: Request):
    req = await _parse(request, VerifyProofRequest)
    h = _hasher()
    if isinstance(req.proof, ProofDocument) and req.proof.algorithm != h.__name__:
        return {"valid": False}
    ok = verify_proof(B64D(req.block_b64), req.to_proof(), from_hex(req.root_hex), h)
    return {"valid": ok}


@app.post("/merkle/sign")
async def merkle_sign(request: Request):
    req = await _parse(request, BuildRequest)
    tree = _build(req.blocks())
    try:
        sk, pk = load_signing_keys(
            Path(settings.signing_key_path),
            Path(settings.signing_pubkey_path),
            settings.allow_dev_keygen,
        )
    except FileNotFoundError as e:
        log.error("signing keys unavailable: %s", e)
        raise HTTPException(status_code=503, detail="signing key unavailable")
    return make_signed_root(tree, sk, pk).model_dump()
