from __future__ import annotations
from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    hash_algorithm: str = Field(default="sha256", alias="MERKLEPROOF_HASH_ALGORITHM")

    signing_key_path: str = Field(
        default="./keys/ed25519_private.key", alias="MERKLEPROOF_SIGNING_KEY_PATH"
    )
    signing_pubkey_path: str = Field(
        default="./keys/ed25519_public.key", alias="MERKLEPROOF_SIGNING_PUBKEY_PATH"
    )

    # Upper bound on blocks accepted per request by the HTTP service
    max_blocks: int = Field(default=65536, alias="MERKLEPROOF_MAX_BLOCKS")

    # Global request size limit enforced by middleware (bytes)
    max_request_bytes: int = Field(
        default=8388608, alias="MERKLEPROOF_MAX_REQUEST_BYTES"
    )

    allow_dev_keygen: bool = Field(default=False, alias="MERKLEPROOF_ALLOW_DEV_KEYGEN")

    log_level: str = Field(default="INFO", alias="MERKLEPROOF_LOG_LEVEL")

    class Config:
        env_file = ".env"
        case_sensitive = False


settings = Settings()  # load at import
