"""
lgnet - LG unit networks, evaluated on a queue.

Submit networks, let workers evaluate them, watch the network grow.
"""

from lgnet.adapt import AdaptationPolicy, adapt
from lgnet.network import compute_network
from lgnet.units import associated_lg, looped_lg, simple_lg

__version__ = "0.1.0"
__all__ = [
    "AdaptationPolicy",
    "__version__",
    "adapt",
    "associated_lg",
    "compute_network",
    "looped_lg",
    "simple_lg",
]
