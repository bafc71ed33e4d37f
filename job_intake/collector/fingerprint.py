"""Content fingerprinting for duplicate detection."""

import hashlib


def normalize_text(text: str) -> str:
    """Normalize message text for fingerprinting.

    Removes all whitespace (so reflowed or re-indented reposts match) and
    lower-cases the result.
    """
    return "".join(text.split()).lower()


def compute_fingerprint(text: str) -> str:
    """Compute the SHA-256 fingerprint of normalized message text.

    Args:
        text: The message text.

    Returns:
        A 64-character hex digest.
    """
    # Lone surrogates are hashed as their raw code units
    normalized = normalize_text(text).encode("utf-8", errors="surrogatepass")
    return hashlib.sha256(normalized).hexdigest()
