"""
Share and fee math, mirrors the contract's integer formulas (floor division)
"""

from .config import MAX_BPS, VIRTUAL_SHARE_OFFSET


def convert_to_shares(percentage: int, total_supply: int, current_issued_percentage: int) -> int:
    """Convert a fill percentage (bps) to shares.

    The virtual offset keeps a first lender from skewing the share price with a
    dust fill before the next lender arrives. Rounding always favors the protocol.
    """
    denominator = max(current_issued_percentage, 1)
    return percentage * (total_supply + VIRTUAL_SHARE_OFFSET) // denominator


def scale_by_percentage(value: int, percentage: int) -> int:
    return value * percentage // MAX_BPS


def shares_to_percentage(shares: int, total_supply: int, current_issued_percentage: int) -> int:
    """Inverse of convert_to_shares, exact on a first fill and within 1 bps otherwise"""
    effective = max(current_issued_percentage, 1)
    return shares * effective // (total_supply + VIRTUAL_SHARE_OFFSET)


def calculate_fee_shares(shares: int, fee_bps: int) -> int:
    return shares * fee_bps // MAX_BPS
