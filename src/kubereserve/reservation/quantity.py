#!/usr/bin/env python3
"""
KUBERESERVE QUANTITY - Milli-CPU helpers
----------------------------------------
Parses and formats the CPU quantities kubelet accepts ("1060m", "2", "0.5").

Author: KubeReserve Team
Date: 2026-10-19
"""

import re
from decimal import Decimal

from kubereserve.core.errors import FieldTypeError

CPU_QUANTITY_PATTERN = re.compile(r'^\s*(\d+(?:\.\d+)?)(m?)\s*$')


def parse_milli_cpu(quantity: str) -> int:
    """
    Converts a CPU quantity to milli-CPUs, truncating sub-milli precision.
    Example: "1060m" -> 1060, "2" -> 2000, "0.5" -> 500
    """
    match = CPU_QUANTITY_PATTERN.match(str(quantity))
    if not match:
        raise FieldTypeError(f"Not a CPU quantity: {quantity!r}")
    number, milli = match.groups()
    amount = Decimal(number)
    if not milli:
        amount *= 1000
    return int(amount)


def format_milli_cpu(milli_cpus: int) -> str:
    return f"{int(milli_cpus)}m"


def allocatable_milli_cpu(cpus: int, reserved: str) -> int:
    """CPU left for pods once `reserved` is set aside, in milli-CPUs."""
    return cpus * 1000 - parse_milli_cpu(reserved)
