"""Commit hash used by commit() and reveal().

Wire format, shared with any client that builds commitments:

    commitment = SHA3-256( guess.to_bytes(32, "big") || salt )

where ``guess`` is an unsigned integer and ``salt`` is exactly 32 bytes.
The digest is 32 bytes.
"""

import hashlib
import secrets

COMMITMENT_SIZE = 32
SALT_SIZE = 32
MIN_GUESS = 0
MAX_GUESS = 1000


def compute_commitment(guess: int, salt: bytes) -> bytes:
    """Hash a guess together with its salt.

    Args:
        guess: The number being committed to. Must be non-negative.
        salt: 32 secret bytes chosen by the player.

    Returns:
        The 32-byte commitment.
    """
    if guess < 0:
        raise ValueError("guess must be non-negative")
    if len(salt) != SALT_SIZE:
        raise ValueError(f"salt must be {SALT_SIZE} bytes, got {len(salt)}")
    return hashlib.sha3_256(guess.to_bytes(32, "big") + bytes(salt)).digest()


def verify_commitment(commitment: bytes, guess: int, salt: bytes) -> bool:
    """Check that (guess, salt) opens the commitment."""
    if guess < 0 or not isinstance(salt, (bytes, bytearray)) or len(salt) != SALT_SIZE:
        return False
    return secrets.compare_digest(compute_commitment(guess, salt), commitment)


def new_salt() -> bytes:
    """Draw a fresh random salt."""
    return secrets.token_bytes(SALT_SIZE)


def salt_from_phrase(phrase: str) -> bytes:
    """Turn a memorable passphrase into a 32-byte salt."""
    return hashlib.sha3_256(phrase.encode("utf-8")).digest()
