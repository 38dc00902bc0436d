"""Shared utilities for the backend."""
from utils.money import money_out, round_money

__all__ = [
    "money_out",
    "round_money",
]
