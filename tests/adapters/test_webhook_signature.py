"""Validação de assinatura HMAC do webhook com e sem secret."""

from __future__ import annotations

import hashlib
import hmac

from domipets_bot.adapters.whatsapp.signature import sign_body, verify_meta_signature

BODY = b'{"object":"whatsapp_business_account","entry":[{"id":"1","changes":[]}]}'


class TestSignatureValidationWithSecret:
    """Testa validação com secret definido."""

    def test_valid_signature_passes(self):
        """Assinatura válida deve passar."""
        secret = "my_secret"
        expected_hash = hmac.new(secret.encode(), BODY, hashlib.sha256).hexdigest()
        headers = {"x-hub-signature-256": f"sha256={expected_hash}"}

        result = verify_meta_signature(BODY, headers, secret)

        assert result.valid
        assert not result.skipped

    def test_sign_body_matches_meta_format(self):
        assert verify_meta_signature(
            BODY, {"x-hub-signature-256": sign_body(BODY, "s")}, "s"
        ).valid

    def test_invalid_signature_fails(self):
        result = verify_meta_signature(BODY, {"x-hub-signature-256": "sha256=wrong"}, "s")

        assert not result.valid
        assert result.error == "signature_mismatch"

    def test_missing_signature_header_fails(self):
        result = verify_meta_signature(BODY, {}, "s")

        assert not result.valid
        assert result.error == "missing_signature"

    def test_malformed_signature_header_fails(self):
        result = verify_meta_signature(BODY, {"x-hub-signature-256": "md5=abc"}, "s")

        assert result.error == "invalid_signature_format"

    def test_tampered_body_fails(self):
        """Corpo alterado depois da assinatura não passa."""
        headers = {"x-hub-signature-256": sign_body(BODY, "s")}

        assert not verify_meta_signature(BODY + b" ", headers, "s").valid


class TestSignatureValidationWithoutSecret:
    def test_skipped_without_secret(self):
        """Sem secret a validação é pulada, não falha."""
        result = verify_meta_signature(BODY, {}, None)

        assert result.valid
        assert result.skipped
