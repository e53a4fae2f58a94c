"""
Hashing utilities for cache keys.
"""
import hashlib


def compute_data_hash(data: str) -> str:
    """Compute SHA256 hash of a (data URL) string."""
    return hashlib.sha256(data.encode("utf-8")).hexdigest()


def compute_cache_key(data_hash: str, params: dict) -> str:
    """
    Compute cache key from a content hash and parameters.
    Params should be a dict of request parameters.
    """
    # Sort params for consistency
    param_str = "_".join(f"{k}={v}" for k, v in sorted(params.items()) if v)
    combined = f"{data_hash}_{param_str}"
    return hashlib.sha256(combined.encode()).hexdigest()
