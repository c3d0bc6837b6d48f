"""Utility functions for cpay."""

from cpay.utils.amount_parser import parse_amount, quantize_amount
from cpay.utils.mobile_number import normalize_mobile_number

__all__ = ["parse_amount", "quantize_amount", "normalize_mobile_number"]
