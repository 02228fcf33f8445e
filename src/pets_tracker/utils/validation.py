"""Validation and normalization helpers for addresses, hashes and hex quantities."""

from __future__ import annotations

from typing import Any


def is_hex_address(addr: Any) -> bool:
    """Return True if addr is a valid 0x address (42 chars)."""
    if not isinstance(addr, str):
        return False
    s = addr.strip()
    if len(s) != 42:
        return False
    if not s.startswith("0x"):
        return False
    try:
        int(s[2:], 16)
        return True
    except ValueError:
        return False


def is_tx_hash(x: Any) -> bool:
    """Return True if x looks like a transaction hash (0x + 64 hex chars)."""
    if not isinstance(x, str):
        return False
    s = x.strip()
    if not s.startswith("0x") or len(s) != 66:
        return False
    try:
        int(s[2:], 16)
        return True
    except ValueError:
        return False


def normalize_address(addr: str | None) -> str:
    """Return a lower-cased 0x address (empty string for None/blank)."""
    s = (addr or "").strip().lower()
    if s and not s.startswith("0x"):
        s = "0x" + s
    return s


def normalize_tx_hash(tx_hash: str) -> str:
    """Return the canonical form used as dedup key."""
    return tx_hash.strip().lower()


def address_to_topic(addr: str) -> str:
    """Left-pad an address to a 32-byte log topic."""
    hex_part = normalize_address(addr)[2:]
    if len(hex_part) != 40:
        raise ValueError(f"Invalid address length: {addr!r}")
    return "0x" + "0" * 24 + hex_part


def topic_to_address(topic: str) -> str:
    """Return the address held in the low 20 bytes of a 32-byte topic."""
    s = topic.strip().lower()
    if s.startswith("0x"):
        s = s[2:]
    if len(s) < 40:
        raise ValueError(f"Topic too short for an address: {topic!r}")
    return "0x" + s[-40:]


def parse_hex_quantity(value: Any) -> int:
    """Parse a JSON-RPC hex quantity ("0x1a") into an int. Raises ValueError."""
    if isinstance(value, int):
        return value
    if not isinstance(value, str) or not value.startswith("0x"):
        raise ValueError(f"Not a hex quantity: {value!r}")
    if value == "0x":
        return 0
    return int(value, 16)


def mask_address(addr: str | None) -> str:
    """Return a masked address for logging (e.g. 0x1234...abcd)."""
    if not addr or len(addr) < 10:
        return "***"
    return f"{addr[:6]}...{addr[-4:]}"
