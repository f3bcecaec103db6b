"""Shared utilities for the backend."""
from utils.iban import iban_checksum_ok, is_valid_iban, normalize_iban

__all__ = [
    "normalize_iban",
    "iban_checksum_ok",
    "is_valid_iban",
]
