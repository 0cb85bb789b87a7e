# ECDH Vault
"""
ECDH key agreement, ECDSA signatures and AES-256-GCM encryption
for two parties that exchange public keys out of band.

Example:
    alice = KeyPair.generate()
    bob = KeyPair.generate()

    # Exchange alice.marshal_public() / bob.marshal_public()
    secret = alice.generate_secret(bob.marshal_public())
    payload = secret.encrypt(b"Hello Bob!")

    # Bob derives the same secret
    assert bob.generate_secret(alice.public_key).decrypt(payload) == b"Hello Bob!"
"""

from .exchange import *  # noqa: F401,F403
from .exchange import __all__

__version__ = "1.0.0"
