"""Group SQL queries by their normalized structural fingerprint."""

from querydigest.errors import ErrorCode, FingerprintError, QueryTooLargeError, StructuralError
from querydigest.sql.fingerprint import fingerprint, fingerprint_checksum

__all__ = [
    "ErrorCode",
    "FingerprintError",
    "QueryTooLargeError",
    "StructuralError",
    "fingerprint",
    "fingerprint_checksum",
]
