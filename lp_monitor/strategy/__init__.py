"""
Position strategy: range, fees, impermanent loss, rebalancing
"""

from .fee_accountant import FeeAccountant, RebalanceThreshold, UncollectedFees, rebalance_threshold
from .impermanent_loss import ImpermanentLoss, concentrated_impermanent_loss
from .range_calculator import calculate_band, calculate_optimal_band_width, is_in_range
from .rebalance_advisor import RebalanceAdvisor

__all__ = [
    "FeeAccountant",
    "UncollectedFees",
    "RebalanceThreshold",
    "rebalance_threshold",
    "ImpermanentLoss",
    "concentrated_impermanent_loss",
    "calculate_band",
    "calculate_optimal_band_width",
    "is_in_range",
    "RebalanceAdvisor",
]
