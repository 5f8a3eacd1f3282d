"""
Deployment configuration.

Token metadata and deploy parameters come from the environment:

    TOKEN_NAME, TOKEN_DESCRIPTION, TOKEN_SYMBOL, TOKEN_IMAGE
    TOKEN_OWNER       owner/admin address (raw or user-friendly)
    TOKEN_WORKCHAIN   workchain for the minter address, default 0
    DEPLOY_VALUE      TON attached to the deploy message, default 0.05
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from jettoncodec.cell import Address, to_nano


DEFAULT_DEPLOY_VALUE = "0.05"

METADATA_ENV = {
    "name": "TOKEN_NAME",
    "description": "TOKEN_DESCRIPTION",
    "symbol": "TOKEN_SYMBOL",
    "image": "TOKEN_IMAGE",
}


def metadata_from_env(environ: Optional[Mapping[str, str]] = None) -> dict[str, Optional[str]]:
    """Read only the four TOKEN_* metadata variables."""
    env = os.environ if environ is None else environ
    return {key: env.get(var) for key, var in METADATA_ENV.items()}


@dataclass(frozen=True)
class DeployConfig:
    name: Optional[str] = None
    description: Optional[str] = None
    symbol: Optional[str] = None
    image: Optional[str] = None
    owner: Optional[Address] = None
    workchain: int = 0
    deploy_value: int = to_nano(DEFAULT_DEPLOY_VALUE)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> DeployConfig:
        env = os.environ if environ is None else environ
        owner = env.get("TOKEN_OWNER")
        try:
            workchain = int(env.get("TOKEN_WORKCHAIN", "0"))
        except ValueError as e:
            raise ValueError(f"TOKEN_WORKCHAIN must be an integer: {e}") from e
        return cls(
            **metadata_from_env(env),
            owner=Address.parse(owner) if owner else None,
            workchain=workchain,
            deploy_value=to_nano(env.get("DEPLOY_VALUE", DEFAULT_DEPLOY_VALUE)),
        )

    @property
    def metadata(self) -> dict[str, Optional[str]]:
        return {key: getattr(self, key) for key in METADATA_ENV}
