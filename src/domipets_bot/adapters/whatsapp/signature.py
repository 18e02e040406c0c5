"""Validação de assinatura do webhook Meta (HMAC SHA-256)."""

from __future__ import annotations

import hashlib
import hmac
from collections.abc import Mapping
from dataclasses import dataclass

SIGNATURE_HEADER = "x-hub-signature-256"
_PREFIX = "sha256="


@dataclass(slots=True)
class SignatureResult:
    valid: bool
    skipped: bool = False
    error: str | None = None


def sign_body(raw_body: bytes, secret: str) -> str:
    """Assinatura no formato do header da Meta (usada também em testes)."""
    digest = hmac.new(secret.encode("utf-8"), raw_body, hashlib.sha256).hexdigest()
    return f"{_PREFIX}{digest}"


def verify_meta_signature(
    raw_body: bytes,
    headers: Mapping[str, str],
    secret: str | None,
) -> SignatureResult:
    """Valida a assinatura do webhook.

    Sem secret configurado a validação é ignorada (skipped); o app recusa
    esse modo quando ZERO_TRUST_MODE está ativo.
    """
    if not secret:
        return SignatureResult(valid=True, skipped=True)

    received = headers.get(SIGNATURE_HEADER)
    if not received:
        return SignatureResult(valid=False, error="missing_signature")
    if not received.startswith(_PREFIX):
        return SignatureResult(valid=False, error="invalid_signature_format")

    if not hmac.compare_digest(sign_body(raw_body, secret), received):
        return SignatureResult(valid=False, error="signature_mismatch")
    return SignatureResult(valid=True)
