"""
Exception hierarchy for the key exchange module.

Every failure is raised synchronously to the caller. Provider exceptions
(from the cryptography package) are chained with ``raise ... from err``.
"""


class ECDHVaultError(Exception):
    """Base class for all errors raised by ecdhvault."""
    pass


class RandomSourceFailure(ECDHVaultError):
    """The OS entropy source could not supply random bytes."""
    pass


class UnsupportedCurve(ECDHVaultError, ValueError):
    """Requested curve is not in the registry."""
    pass


class InvalidKeyEncoding(ECDHVaultError, ValueError):
    """Malformed textual or byte input for a key or signature."""
    pass


class InvalidPrivateKey(InvalidKeyEncoding):
    """Private scalar is not a decimal integer in [1, n-1]."""
    pass


class InvalidPublicKey(InvalidKeyEncoding):
    """Public key bytes do not decode to a point on the curve."""
    pass


class KeyMismatch(InvalidPublicKey):
    """Supplied public point is not private_value * G."""
    pass


class InvalidSignatureEncoding(InvalidKeyEncoding):
    """R or S is not a decimal integer."""
    pass


class InvalidHashLength(ECDHVaultError, ValueError):
    """Digest length cannot be handed to the signature provider."""
    pass


class ECDHFailed(ECDHVaultError):
    """Scalar multiplication with the peer point failed."""
    pass


class InvalidKeySize(ECDHVaultError):
    """Derived key does not match the AES-256-GCM key size."""
    pass


class DecryptionError(ECDHVaultError):
    """Payload was rejected. Subclasses exist for diagnostics only."""
    pass


class InvalidInputTooShort(DecryptionError):
    """Payload is shorter than the nonce."""
    pass


class AuthenticationFailed(DecryptionError):
    """GCM tag did not verify."""
    pass
