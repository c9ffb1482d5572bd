"""
Signature and identifier utilities.

Clients prove control of a secp256k1 key pair by signing a message built from
the request fields. Public keys travel as the hex form of the 33-byte
compressed SEC1 point and signatures as the hex form of the 64-byte ``r || s``
pair; messages are hashed with SHA-256 and checked with ECDSA.
"""

import uuid
from typing import Tuple

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.asymmetric.utils import decode_dss_signature, encode_dss_signature

from utils.error_handling import AuthenticationError

CURVE = ec.SECP256K1()

# Encoded sizes in bytes
PUBLIC_KEY_SIZE = 33
SCALAR_SIZE = 32
SIGNATURE_SIZE = 2 * SCALAR_SIZE


def _from_hex(value, expected_size: int) -> bytes:
    if not isinstance(value, str):
        raise AuthenticationError()
    try:
        data = bytes.fromhex(value)
    except ValueError as e:
        raise AuthenticationError() from e
    if len(data) != expected_size:
        raise AuthenticationError()
    return data


def parse_public_key(pub_key: str) -> ec.EllipticCurvePublicKey:
    """
    Decode a hex compressed secp256k1 public key.

    Raises:
        AuthenticationError: If the key is not valid hex or not a curve point
    """
    data = _from_hex(pub_key, PUBLIC_KEY_SIZE)
    try:
        return ec.EllipticCurvePublicKey.from_encoded_point(CURVE, data)
    except ValueError as e:
        raise AuthenticationError() from e


def parse_signature(signature: str) -> bytes:
    """
    Decode a hex ``r || s`` signature into the DER form ``cryptography`` verifies.

    Raises:
        AuthenticationError: If the signature is not 64 bytes of hex
    """
    data = _from_hex(signature, SIGNATURE_SIZE)
    r = int.from_bytes(data[:SCALAR_SIZE], 'big')
    s = int.from_bytes(data[SCALAR_SIZE:], 'big')
    return encode_dss_signature(r, s)


def verify_signature(message: str, public_key: ec.EllipticCurvePublicKey, signature: bytes) -> bool:
    """
    Check a parsed signature over ``message``.

    Args:
        message (str): The exact signed text
        public_key: Key returned by parse_public_key
        signature (bytes): DER signature returned by parse_signature

    Returns:
        bool: True if the signature is valid for the key and message
    """
    try:
        public_key.verify(signature, message.encode('utf-8'), ec.ECDSA(hashes.SHA256()))
        return True
    except InvalidSignature:
        return False


def generate_keypair() -> Tuple[ec.EllipticCurvePrivateKey, str]:
    """Generate a secp256k1 private key and its hex compressed public key."""
    private_key = ec.generate_private_key(CURVE)
    pub_key = private_key.public_key().public_bytes(
        serialization.Encoding.X962,
        serialization.PublicFormat.CompressedPoint
    ).hex()
    return private_key, pub_key


def sign_message(private_key: ec.EllipticCurvePrivateKey, message: str) -> str:
    """Sign ``message`` and return the hex ``r || s`` signature."""
    der = private_key.sign(message.encode('utf-8'), ec.ECDSA(hashes.SHA256()))
    r, s = decode_dss_signature(der)
    return (r.to_bytes(SCALAR_SIZE, 'big') + s.to_bytes(SCALAR_SIZE, 'big')).hex()


def generate_uuid() -> str:
    """Return a fresh random identifier."""
    return str(uuid.uuid4())
