# Key Exchange Module
"""
ECDH key agreement and what is built on it:
- Key pairs on the NIST prime curves (P-224, P-256, P-384, P-521)
- Shared secret derivation (ECDH)
- AES-256-GCM authenticated encryption with the shared secret
- ECDSA sign/verify over caller-supplied digests

Payload format: [nonce | ciphertext | tag]

Security notes:
- Fresh random nonce per encryption, never reused
- Peer public points are validated on decode
- DECIMAL_PREFIX key derivation is kept for wire compatibility only;
  prefer HKDF_SHA256 for new deployments
"""

from .errors import (
    ECDHVaultError,
    RandomSourceFailure,
    UnsupportedCurve,
    InvalidKeyEncoding,
    InvalidPrivateKey,
    InvalidPublicKey,
    KeyMismatch,
    InvalidSignatureEncoding,
    InvalidHashLength,
    ECDHFailed,
    InvalidKeySize,
    DecryptionError,
    InvalidInputTooShort,
    AuthenticationFailed,
)

from .curves import (
    Curve,
    P224,
    P256,
    P384,
    P521,
    DEFAULT_CURVE,
    SUPPORTED_CURVES,
    get_curve,
    curve_for,
)

from .shared_secret import (
    SharedSecret,
    KeyDerivation,
    DEFAULT_KDF,
    derive_key,
    hkdf_derive_key,
    generate_nonce,
)

from .keypair import (
    KeyPair,
    PublicKey,
    generate_key,
    unmarshal,
    unmarshal_public,
)

from .signing import (
    sign,
    sign_random,
    verify,
    verify_with_point,
    marshal_signature,
)

__all__ = [
    'ECDHVaultError',
    'RandomSourceFailure',
    'UnsupportedCurve',
    'InvalidKeyEncoding',
    'InvalidPrivateKey',
    'InvalidPublicKey',
    'KeyMismatch',
    'InvalidSignatureEncoding',
    'InvalidHashLength',
    'ECDHFailed',
    'InvalidKeySize',
    'DecryptionError',
    'InvalidInputTooShort',
    'AuthenticationFailed',
    'Curve',
    'P224',
    'P256',
    'P384',
    'P521',
    'DEFAULT_CURVE',
    'SUPPORTED_CURVES',
    'get_curve',
    'curve_for',
    'SharedSecret',
    'KeyDerivation',
    'DEFAULT_KDF',
    'derive_key',
    'hkdf_derive_key',
    'generate_nonce',
    'KeyPair',
    'PublicKey',
    'generate_key',
    'unmarshal',
    'unmarshal_public',
    'sign',
    'sign_random',
    'verify',
    'verify_with_point',
    'marshal_signature',
]
