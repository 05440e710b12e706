"""
Deterministic state root hashing (v1).

This is intended for:
- debugging / audit (stable hashes for the same logical state),
- hosts that persist the ledger opaquely and want a tamper-evident digest,
- tests asserting that a rejected operation left the state untouched.
"""

from __future__ import annotations

from typing import Optional

from .balances import BalanceTable
from .canonical import domain_sep_bytes, encode_bytes, encode_str, encode_uvarint, sha256_hex
from .claims import ClaimLedger
from .reserves import ReserveLedger


STATE_ROOT_VERSION = 1


def _check_amount(name: str, value: object) -> int:
    if not isinstance(value, int) or isinstance(value, bool) or value < 0:
        raise ValueError(f"invalid {name}: {value!r}")
    return value


def _encode_reserves_section(reserves: ReserveLedger) -> bytes:
    out = bytearray()
    entries = sorted(reserves.get_all_reserves().items())
    out += encode_uvarint(len(entries))
    for (asset_a, asset_b), (reserve_a, reserve_b) in entries:
        out += encode_str(asset_a)
        out += encode_str(asset_b)
        out += encode_uvarint(_check_amount("reserve_a", reserve_a))
        out += encode_uvarint(_check_amount("reserve_b", reserve_b))
    return bytes(out)


def _encode_claims_section(claims: ClaimLedger) -> bytes:
    out = bytearray()
    entries = sorted(claims.get_all_balances().items())
    out += encode_uvarint(_check_amount("total_supply", claims.total_supply()))
    out += encode_uvarint(len(entries))
    for holder, amount in entries:
        out += encode_str(holder)
        out += encode_uvarint(_check_amount("claim balance", amount))
    return bytes(out)


def _encode_balances_section(balances: BalanceTable) -> bytes:
    out = bytearray()
    entries = sorted(balances.get_all_balances().items())
    out += encode_uvarint(len(entries))
    for (holder, asset), amount in entries:
        out += encode_str(holder)
        out += encode_str(asset)
        out += encode_uvarint(_check_amount("balance", amount))
    return bytes(out)


def compute_state_root(
    *,
    reserves: ReserveLedger,
    claims: ClaimLedger,
    balances: Optional[BalanceTable] = None,
) -> str:
    """
    Compute a deterministic state root hash for the pool ledgers.

    `balances` is optional since the asset ledger is usually owned by the host;
    pass it when the in-memory `AssetLedger` is in use.

    Returns a 0x-prefixed sha256 digest.
    """
    if not isinstance(reserves, ReserveLedger):
        raise TypeError("reserves must be a ReserveLedger")
    if not isinstance(claims, ClaimLedger):
        raise TypeError("claims must be a ClaimLedger")

    payload = (
        domain_sep_bytes("state_root", version=STATE_ROOT_VERSION)
        + b"RES"
        + encode_bytes(_encode_reserves_section(reserves))
        + b"CLM"
        + encode_bytes(_encode_claims_section(claims))
    )
    if balances is not None:
        if not isinstance(balances, BalanceTable):
            raise TypeError("balances must be a BalanceTable")
        payload += b"BAL" + encode_bytes(_encode_balances_section(balances))
    return sha256_hex(payload)
