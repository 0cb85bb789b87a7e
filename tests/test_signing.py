"""
Unit tests for ECDSA sign/verify over raw digests.

Tests:
- Sign/verify correctness on every curve
- Decimal wire form of (R, S)
- Rejection of wrong digests, keys and malformed values
- Digest width handling
"""

import hashlib
import os
from unittest.mock import patch

import pytest
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.asymmetric.utils import decode_dss_signature

from ecdhvault.exchange.curves import P224, P256, P384, P521, SUPPORTED_CURVES
from ecdhvault.exchange.errors import (
    InvalidHashLength, InvalidPublicKey, InvalidSignatureEncoding,
    RandomSourceFailure,
)
from ecdhvault.exchange.keypair import KeyPair
from ecdhvault.exchange.signing import (
    sign, sign_random, verify, verify_with_point, marshal_signature,
    prepare_digest, RANDOM_HASH_SIZE,
)


class TestSignVerify:
    """Tests for signing and verification."""

    def test_sign_verify(self):
        """A 64-byte digest signature verifies with the marshaled key."""
        for curve in SUPPORTED_CURVES.values():
            kp = KeyPair.generate(curve)
            digest = os.urandom(64)
            r, s = sign(kp, digest)
            assert verify(curve, r, s, digest, kp.marshal_public())

    def test_sign_random(self):
        """Self-signing path returns a 64-byte digest that verifies."""
        kp = KeyPair.generate()
        r, s, digest = sign_random(kp)
        assert len(digest) == RANDOM_HASH_SIZE
        assert verify(P256, r, s, digest, kp.marshal_public())

    def test_sign_random_entropy_failure(self):
        """Entropy failures surface as RandomSourceFailure."""
        kp = KeyPair.generate()
        with patch("secrets.token_bytes", side_effect=OSError("no entropy")):
            with pytest.raises(RandomSourceFailure):
                sign_random(kp)

    def test_signatures_randomized(self):
        """Signing the same digest twice gives different signatures."""
        kp = KeyPair.generate()
        digest = os.urandom(32)
        assert sign(kp, digest) != sign(kp, digest)

    def test_decimal_wire_form(self):
        """R and S travel as decimal strings."""
        kp = KeyPair.generate()
        r, s, digest = sign_random(kp)
        r_str, s_str = marshal_signature(r, s)
        assert r_str.isdigit() and s_str.isdigit()
        assert verify(P256, r_str, s_str, digest, kp.marshal_public())

    def test_verify_with_point(self):
        """Verification with a held point skips decoding."""
        kp = KeyPair.generate(P384)
        digest = hashlib.sha384(b"message").digest()
        r, s = sign(kp, digest)
        assert verify_with_point(P384, r, s, digest, kp.public_key)

    def test_interoperates_with_provider(self):
        """Signatures from the provider's hashing API verify here."""
        kp = KeyPair.generate()
        der = kp.private_key.sign(b"message", ec.ECDSA(hashes.SHA256()))
        r, s = decode_dss_signature(der)
        digest = hashlib.sha256(b"message").digest()
        assert verify(P256, r, s, digest, kp.marshal_public())


class TestVerifyRejects:
    """Tests for signatures that must not verify."""

    def test_wrong_digest(self):
        kp = KeyPair.generate()
        r, s, digest = sign_random(kp)
        assert not verify(P256, r, s, os.urandom(64), kp.marshal_public())

    def test_wrong_public_key(self):
        """Signature should not verify with another key."""
        kp1 = KeyPair.generate()
        kp2 = KeyPair.generate()
        r, s, digest = sign_random(kp1)
        assert not verify(P256, r, s, digest, kp2.marshal_public())

    def test_swapped_values(self):
        kp = KeyPair.generate()
        r, s, digest = sign_random(kp)
        assert not verify(P256, s, r, digest, kp.marshal_public())

    def test_out_of_range_values(self):
        """Zero, negative and >= n values return False."""
        kp = KeyPair.generate()
        r, s, digest = sign_random(kp)
        public_bytes = kp.marshal_public()
        assert not verify(P256, 0, s, digest, public_bytes)
        assert not verify(P256, r, 0, digest, public_bytes)
        assert not verify(P256, -r, s, digest, public_bytes)
        assert not verify(P256, r, P256.order, digest, public_bytes)
        assert not verify(P256, "-1", str(s), digest, public_bytes)

    def test_oversized_decimal_values(self):
        """Thousands of digits return False instead of raising."""
        kp = KeyPair.generate()
        r, s, digest = sign_random(kp)
        public_bytes = kp.marshal_public()
        huge = "1" * 5000
        assert not verify(P256, huge, str(s), digest, public_bytes)
        assert not verify(P256, str(r), huge, digest, public_bytes)
        assert not verify(P256, "-" + huge, str(s), digest, public_bytes)

    def test_zero_padded_values_verify(self):
        """Leading zeros do not count toward the digit limit."""
        kp = KeyPair.generate()
        r, s, digest = sign_random(kp)
        padded = "0" * 5000 + str(r)
        assert verify(P256, padded, str(s), digest, kp.marshal_public())

    def test_curve_mismatch(self):
        """A point on another curve never verifies."""
        kp = KeyPair.generate(P384)
        r, s, digest = sign_random(kp)
        assert not verify_with_point(P256, r, s, digest, kp.public_key)


class TestVerifyErrors:
    """Tests for hard failures during verification."""

    def test_malformed_r(self):
        """Non-decimal R is an encoding error, not False."""
        kp = KeyPair.generate()
        _, s, digest = sign_random(kp)
        with pytest.raises(InvalidSignatureEncoding):
            verify(P256, "12x4", str(s), digest, kp.marshal_public())

    def test_malformed_s(self):
        kp = KeyPair.generate()
        r, _, digest = sign_random(kp)
        for bad in ["", "0x10", None, 1.5, True]:
            with pytest.raises(InvalidSignatureEncoding):
                verify(P256, r, bad, digest, kp.marshal_public())

    def test_bad_public_key(self):
        """Undecodable public key raises InvalidPublicKey."""
        kp = KeyPair.generate()
        r, s, digest = sign_random(kp)
        with pytest.raises(InvalidPublicKey):
            verify(P256, r, s, digest, kp.marshal_public()[:-1])


class TestDigestWidths:
    """Tests for fitting digests to the provider."""

    def test_common_widths_on_p256(self):
        """Digests of many lengths sign and verify on P-256."""
        kp = KeyPair.generate()
        for length in [0, 1, 20, 28, 32, 48, 64, 100]:
            digest = os.urandom(length)
            r, s = sign(kp, digest)
            assert verify(P256, r, s, digest, kp.marshal_public())

    def test_long_digest_truncated_to_order(self):
        """Only the leftmost order-size bytes are signed."""
        kp = KeyPair.generate()
        digest = os.urandom(64)
        r, s = sign(kp, digest)
        assert verify(P256, r, s, digest[:32], kp.marshal_public())

    def test_short_digest_padding_keeps_value(self):
        """Left-padding does not change the signed integer."""
        data, _ = prepare_digest(P256, b"\x01\x02")
        assert len(data) == 28
        assert int.from_bytes(data, "big") == 0x0102

    def test_p224_widths(self):
        data, algorithm = prepare_digest(P224, os.urandom(64))
        assert len(data) == 28

    def test_p521_accepts_sha512(self):
        """P-521 signs 64-byte digests without truncation."""
        kp = KeyPair.generate(P521)
        digest = hashlib.sha512(b"message").digest()
        r, s = sign(kp, digest)
        assert verify(P521, r, s, digest, kp.marshal_public())

    def test_p521_rejects_order_width_digest(self):
        """No provider width fits a 66-byte digest on P-521."""
        kp = KeyPair.generate(P521)
        with pytest.raises(InvalidHashLength):
            sign(kp, os.urandom(66))

    def test_p521_rejects_long_digest(self):
        """Digests beyond 64 bytes cannot be fitted on P-521."""
        kp = KeyPair.generate(P521)
        with pytest.raises(InvalidHashLength):
            sign(kp, os.urandom(100))
