#!/usr/bin/env python3
"""
KUBERESERVE CALCULATOR - GKE Reserved CPU
-----------------------------------------
Reproduces GKE's kubeReserved.cpu computation so that a kubelet config
can be adjusted to the number of CPUs actually visible on the node.
See: https://cloud.google.com/kubernetes-engine/docs/concepts/cluster-architecture#memory_cpu

Author: KubeReserve Team
Date: 2026-10-19
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional, Tuple

from kubereserve.document.kubeconfig import KubeletConfig
from kubereserve.reservation.quantity import format_milli_cpu

logger = logging.getLogger("kubereserve.calculator")

# GKE sets 1060m (.94 allocatable CPU) on several small machine types
# (e2-medium, e2-small, ...) instead of applying the formula below.
GKE_CUSTOM_RESERVED_CPU = "1060m"
SMALL_SHAPE_MAX_CPUS = 2


@dataclass(frozen=True)
class ReservationTier:
    """Reserve `percentage` of every core index in [min_cpu, max_cpu)."""
    percentage: Decimal
    min_cpu: int
    max_cpu: Optional[int] = None  # None: every remaining core

    def milli_cpus(self, cpus: int) -> Decimal:
        upper = cpus if self.max_cpu is None else min(cpus, self.max_cpu)
        cores = max(0, upper - self.min_cpu)
        return 1000 * self.percentage * cores


GKE_RESERVATION_TIERS: Tuple[ReservationTier, ...] = (
    ReservationTier(Decimal("0.06"), 0, 1),     # 6% of the first core
    ReservationTier(Decimal("0.01"), 1, 2),     # 1% of the second core
    ReservationTier(Decimal("0.005"), 2, 4),    # 0.5% of the next two cores
    ReservationTier(Decimal("0.0025"), 4),      # 0.25% of the rest
)


def reserved_milli_cpus(cpus: int, tiers: Tuple[ReservationTier, ...] = GKE_RESERVATION_TIERS) -> int:
    """
    Sums every tier's share and truncates once, on the aggregate.
    Example: 8 CPUs -> 60 + 10 + 5*2 + 2.5*4 = 90
    """
    if cpus < 0:
        raise ValueError(f"CPU count must be non-negative, got {cpus}")
    total = sum((tier.milli_cpus(cpus) for tier in tiers), Decimal(0))
    return int(total)


def compute_reserved_cpu(config: KubeletConfig, cpus: int) -> str:
    """
    Returns the kubeReserved.cpu value for a node with `cpus` logical CPUs.

    On small shapes the current value is read first; if GKE already set its
    flat override there it is returned as is. Errors from that read propagate.
    The config is never modified.
    """
    if cpus < 0:
        raise ValueError(f"CPU count must be non-negative, got {cpus}")

    if cpus <= SMALL_SHAPE_MAX_CPUS:
        current = config.get_reserved_cpu()
        if current == GKE_CUSTOM_RESERVED_CPU:
            logger.info("Keeping GKE custom reservation %s for %d CPU(s)", current, cpus)
            return current

    reserved = format_milli_cpu(reserved_milli_cpus(cpus))
    logger.debug("Computed kubeReserved.cpu=%s for %d CPU(s)", reserved, cpus)
    return reserved
