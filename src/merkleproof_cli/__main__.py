from __future__ import annotations
import json
import logging
import os
import pathlib
from typing import List, Optional
import typer
from rich import print

from merkleproof_api.crypto import ed25519_generate, get_hasher, from_hex
from merkleproof_api.logutil import level_from_name, setup_logging
from merkleproof_api.merkle import MerkleTree
from merkleproof_api.settings import settings

app = typer.Typer(add_completion=False, no_args_is_help=True)

ALGO_OPT = typer.Option(None, "--algorithm", "-a", help="hashlib algorithm (default from settings)")
LINES_OPT = typer.Option(False, "--lines", help="Treat every line of each file as one block")


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v")):
    setup_logging(logging.DEBUG if verbose else level_from_name(settings.log_level))


def _hasher(algorithm: Optional[str]):
    try:
        return get_hasher(algorithm or settings.hash_algorithm)
    except ValueError as e:
        raise typer.BadParameter(str(e))


def _read_blocks(paths: List[pathlib.Path], lines: bool) -> List[bytes]:
    blocks: List[bytes] = []
    for p in paths:
        raw = p.read_bytes()
        if lines:
            blocks.extend(raw.splitlines())
        else:
            blocks.append(raw)
    if not blocks:
        raise typer.BadParameter("no data blocks")
    return blocks


def _read_block(path: pathlib.Path, lines: bool) -> bytes:
    raw = path.read_bytes()
    if lines and raw.endswith(b"\n"):
        raw = raw[:-1]
        if raw.endswith(b"\r"):
            raw = raw[:-1]
    return raw


def _build(files: List[pathlib.Path], lines: bool, algorithm: Optional[str]) -> MerkleTree:
    return MerkleTree.construct(_read_blocks(files, lines), _hasher(algorithm))


@app.command()
def gen_keys(out_dir: str = typer.Option("./keys", help="Directory to write keypair")):
    os.makedirs(out_dir, exist_ok=True)
    sk, pk = ed25519_generate()
    (pathlib.Path(out_dir) / "ed25519_private.key").write_bytes(sk)
    (pathlib.Path(out_dir) / "ed25519_public.key").write_bytes(pk)
    print(f"[green]Wrote keys to {out_dir}[/green]")


@app.command()
def root(
    files: List[pathlib.Path] = typer.Argument(..., exists=True, dir_okay=False),
    lines: bool = LINES_OPT,
    algorithm: Optional[str] = ALGO_OPT,
):
    """Print the Merkle root of the given blocks."""
    tree = _build(files, lines, algorithm)
    print({"root_hex": tree.root_hex, "tree_size": len(tree), "algorithm": tree.algorithm})


@app.command()
def verify(
    files: List[pathlib.Path] = typer.Argument(..., exists=True, dir_okay=False),
    root_hex: str = typer.Option(..., "--root", help="Claimed root (hex)"),
    lines: bool = LINES_OPT,
    algorithm: Optional[str] = ALGO_OPT,
):
    """Rebuild the tree and compare it with a claimed root."""
    try:
        claimed = from_hex(root_hex)
    except ValueError:
        raise typer.BadParameter("root must be hex", param_hint="--root")
    ok = MerkleTree.verify(_read_blocks(files, lines), claimed, _hasher(algorithm))
    print({"valid": ok})
    if not ok:
        raise typer.Exit(code=1)


@app.command()
def prove(
    files: List[pathlib.Path] = typer.Argument(..., exists=True, dir_okay=False),
    block: pathlib.Path = typer.Option(..., "--block", exists=True, dir_okay=False),
    out: Optional[pathlib.Path] = typer.Option(None, help="Write proof JSON here"),
    lines: bool = LINES_OPT,
    algorithm: Optional[str] = ALGO_OPT,
):
    """Emit an inclusion proof for --block."""
    from merkleproof_api.models import ProofDocument

    tree = _build(files, lines, algorithm)
    data = _read_block(block, lines)
    proof = tree.prove(data)
    if proof is None:
        print("[red]Block not found in tree[/red]")
        raise typer.Exit(code=1)
    doc = ProofDocument.from_proof(proof, tree.hasher(data), tree.root, len(tree), tree.algorithm)
    text = json.dumps(doc.model_dump(), indent=2)
    if out is None:
        typer.echo(text)
    else:
        out.write_text(text)
        print(f"[green]Wrote proof ({len(proof)} hashes) to {out}[/green]")


@app.command()
def verify_proof(
    block: pathlib.Path = typer.Argument(..., exists=True, dir_okay=False),
    proof_path: pathlib.Path = typer.Argument(..., exists=True, dir_okay=False),
    root_hex: Optional[str] = typer.Option(None, "--root", help="Expected root (hex)"),
    lines: bool = typer.Option(False, "--lines", help="Strip the block's trailing newline"),
):
    """Check a proof JSON file against a block (and optionally a root)."""
    from merkleproof_sdk.verify import verify_proof_document

    obj = json.loads(proof_path.read_text())
    ok = verify_proof_document(obj, _read_block(block, lines))
    if ok and root_hex is not None:
        ok = str(obj.get("root_hex", "")).lower() == root_hex.lower()
    print({"valid": ok})
    if not ok:
        raise typer.Exit(code=1)


@app.command()
def sign_root(
    files: List[pathlib.Path] = typer.Argument(..., exists=True, dir_okay=False),
    out: pathlib.Path = typer.Option(pathlib.Path("sth.json"), help="Output JSON path"),
    lines: bool = LINES_OPT,
    algorithm: Optional[str] = ALGO_OPT,
):
    """Build the tree and write a signed tree head (STH)."""
    from merkleproof_api.attestation import load_signing_keys, make_signed_root

    tree = _build(files, lines, algorithm)
    try:
        sk, pk = load_signing_keys(
            pathlib.Path(settings.signing_key_path),
            pathlib.Path(settings.signing_pubkey_path),
            settings.allow_dev_keygen,
        )
    except FileNotFoundError as e:
        print(f"[red]{e}[/red]")
        raise typer.Exit(code=2)
    sth = make_signed_root(tree, sk, pk)
    out.write_text(json.dumps(sth.model_dump(), indent=2))
    print(f"[green]Wrote STH to {out}[/green]")


@app.command()
def verify_root(
    sth_path: pathlib.Path = typer.Argument(..., exists=True, dir_okay=False),
    proof_path: Optional[pathlib.Path] = typer.Option(None, "--proof", exists=True, dir_okay=False),
    block: Optional[pathlib.Path] = typer.Option(None, "--block", exists=True, dir_okay=False),
):
    """Verify an STH signature, and with --proof/--block an inclusion under it."""
    from merkleproof_sdk.verify import verify_inclusion, verify_signed_root

    sth = json.loads(sth_path.read_text())
    if (proof_path is None) != (block is None):
        raise typer.BadParameter("--proof and --block go together")
    if proof_path is not None and block is not None:
        ok = verify_inclusion(block.read_bytes(), json.loads(proof_path.read_text()), sth)
        print({"inclusion_valid": ok})
    else:
        ok = verify_signed_root(sth)
        print({"signature_valid": ok})
    if not ok:
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
