import os
import sys
from pathlib import Path

import pytest

# Ensure the 'src' directory is on sys.path for imports in tests
ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

os.environ.setdefault("MERKLEPROOF_HASH_ALGORITHM", "sha256")


@pytest.fixture
def keys_dir(tmp_path, monkeypatch):
    """Point the signing key settings at a temp dir with dev keygen enabled."""
    from merkleproof_api.settings import settings

    d = tmp_path / "keys"
    monkeypatch.setattr(settings, "signing_key_path", str(d / "ed25519_private.key"))
    monkeypatch.setattr(settings, "signing_pubkey_path", str(d / "ed25519_public.key"))
    monkeypatch.setattr(settings, "allow_dev_keygen", True)
    return d
