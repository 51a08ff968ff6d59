"""Runtime configuration for query fingerprinting."""

from querydigest.config.limits import FingerprintLimits, get_fingerprint_limits

__all__ = ["FingerprintLimits", "get_fingerprint_limits"]
