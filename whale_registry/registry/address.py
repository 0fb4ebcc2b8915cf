import re

from .errors import InvalidRecipient

Owner = str

ZERO_ADDRESS: Owner = "0x0"

# 20 byte addresses, shorter forms are read with implicit leading zeros
_ADDRESS_RE = re.compile(r"^0[xX]([0-9a-fA-F]{1,40})$")


def normalize_address(address: str) -> Owner:
    """
    Returns the canonical form of a hex address: lowercase, without leading zeros.
    Raises InvalidRecipient if the address is not well formed.
    """
    if not isinstance(address, str):
        raise InvalidRecipient(address)
    match = _ADDRESS_RE.match(address.strip())
    if match is None:
        raise InvalidRecipient(address)
    return hex(int(match.group(1), 16))


def is_zero_address(address: Owner) -> bool:
    return normalize_address(address) == ZERO_ADDRESS


def short_address(address: str) -> str:
    """
    Abbreviated form for log lines, e.g. 0x833...913
    """
    digits = address[2:].zfill(40)
    return f"0x{digits[:3]}...{digits[-3:]}"
