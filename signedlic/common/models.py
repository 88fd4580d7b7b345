"""
Pydantic models for activation request/response validation.
"""

from __future__ import annotations

import base64
import binascii
from pathlib import Path  # noqa: TC003
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class TrialActivationRequest(BaseModel):
    device_id: str


class PurchaseActivationRequest(BaseModel):
    device_id: str
    license_key: str


class ActivationResponse(BaseModel):
    """Body of a 200 response from either activation endpoint.

    ``signed_license`` is base64 in JSON and decoded to raw envelope bytes.
    """

    model_config = ConfigDict(extra="ignore")

    signed_license: bytes | None = None
    activation_error: str | None = None

    @field_validator("signed_license", mode="before")
    @classmethod
    def decode_signed_license(cls, value: Any) -> Any:
        if value is None:
            return None
        if not isinstance(value, str):
            msg = "signed_license must be a base64 string"
            raise ValueError(msg)  # noqa: TRY004
        try:
            return base64.b64decode(value, validate=True)
        except binascii.Error as err:
            msg = f"signed_license is not valid base64: {err}"
            raise ValueError(msg) from err


class ClientConfig(BaseModel):
    trial_activation_url: str | None = None
    purchase_activation_url: str | None = None
    request_timeout: float | None = Field(default=None, gt=0)
    log_level: int | None = None
    data_dir: Path | None = None
    store_path: Path | None = None
    trusted_keys_dir: Path | None = None
    max_workers: int | None = Field(default=None, gt=0)
