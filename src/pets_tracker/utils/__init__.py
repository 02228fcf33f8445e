# -*- coding: utf-8 -*-
"""Utility modules."""

from pets_tracker.utils.validation import (
    address_to_topic,
    is_hex_address,
    is_tx_hash,
    mask_address,
    normalize_address,
    normalize_tx_hash,
    parse_hex_quantity,
    topic_to_address,
)

__all__ = [
    "address_to_topic",
    "is_hex_address",
    "is_tx_hash",
    "mask_address",
    "normalize_address",
    "normalize_tx_hash",
    "parse_hex_quantity",
    "topic_to_address",
]
