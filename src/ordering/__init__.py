"""Functional ordering: pointwise ranks, extremity measures and their combination."""

from .combined import combined_forder, forder
from .deviation import CurveScale, curve_scale, deviation, deviation_measure
from .measures import individual_forder, individual_measure, rank_matrix_cols
from .partial import PartialOrdering, combine_forder, partial_forder, partitioned_forder
from .pointwise import rank_continuous, rank_discrete

__all__ = [
    "combined_forder",
    "forder",
    "CurveScale",
    "curve_scale",
    "deviation",
    "deviation_measure",
    "individual_forder",
    "individual_measure",
    "rank_matrix_cols",
    "PartialOrdering",
    "combine_forder",
    "partial_forder",
    "partitioned_forder",
    "rank_continuous",
    "rank_discrete",
]
