"""Fuzz harness for proof document parsing & offline verification.

Arbitrary fuzzer bytes are treated as (potential) JSON proof documents. The
SDK must answer with a boolean; any exception escaping it is a crash.
"""
from __future__ import annotations
import atheris
import json
import sys

with atheris.instrument_imports():
    from merkleproof_sdk.verify import verify_proof_document, verify_signed_root


def TestOneInput(data: bytes):  # noqa: N802 (Atheris entrypoint)
    fdp = atheris.FuzzedDataProvider(data)
    block = fdp.ConsumeBytes(fdp.ConsumeIntInRange(0, 64))
    try:
        obj = json.loads(fdp.ConsumeUnicodeNoSurrogates(4096))
    except ValueError:
        return
    if not isinstance(obj, dict):
        return
    if verify_proof_document(obj, block) not in (True, False):
        raise RuntimeError("non-boolean verification result")
    if verify_signed_root(obj) not in (True, False):
        raise RuntimeError("non-boolean signature result")


def main():
    atheris.Setup(sys.argv, TestOneInput, enable_python_coverage=True)
    atheris.Fuzz()


if __name__ == "__main__":
    main()
