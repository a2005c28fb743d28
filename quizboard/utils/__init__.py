"""
Utils Package
"""
from quizboard.utils.helpers import (
    now_utc,
    utc_to_local,
    round_half_up,
    rank_suffix
)
from quizboard.utils.logging_config import configure_logging

__all__ = [
    'now_utc',
    'utc_to_local',
    'round_half_up',
    'rank_suffix',
    'configure_logging'
]
