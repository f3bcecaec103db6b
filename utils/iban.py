"""
IBAN normalisation and format checks (ISO 13616 mod-97).
"""
import re

_IBAN_RE = re.compile(r"^[A-Z]{2}[0-9]{2}[A-Z0-9]{11,30}$")


def normalize_iban(value: str) -> str:
    """Strip whitespace and upper-case, e.g. 'de89 3704 ...' -> 'DE893704...'."""
    return re.sub(r"\s+", "", value or "").upper()


def iban_checksum_ok(iban: str) -> bool:
    """Move the first four characters to the end, map letters to 10..35 and check mod 97 == 1."""
    rearranged = iban[4:] + iban[:4]
    digits = "".join(str(int(ch, 36)) for ch in rearranged)
    return int(digits) % 97 == 1


def is_valid_iban(value: str) -> bool:
    iban = normalize_iban(value)
    if not _IBAN_RE.match(iban):
        return False
    return iban_checksum_ok(iban)
