"""Utilities Package"""
from courtdesk.utils.error_handler import handle_db_exception, raise_for_transition
from courtdesk.utils.money import round_money, to_decimal, is_valid_amount

__all__ = [
    "handle_db_exception",
    "raise_for_transition",
    "round_money",
    "to_decimal",
    "is_valid_amount",
]
