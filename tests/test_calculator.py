from decimal import Decimal

import pytest

from kubereserve.core.errors import FieldTypeError, PathError
from kubereserve.document.kubeconfig import KUBECONFIG_SUFFIX, KubeletConfig
from kubereserve.reservation.calculator import (
    GKE_CUSTOM_RESERVED_CPU,
    ReservationTier,
    compute_reserved_cpu,
    reserved_milli_cpus,
)
from kubereserve.reservation.quantity import allocatable_milli_cpu, format_milli_cpu, parse_milli_cpu

YAML_TEMPLATE = (
    "kubeReserved:\n"
    "  cpu: {}\n"
    "  ephemeral-storage: 41Gi\n"
    "  memory: 1019Mi"
) + KUBECONFIG_SUFFIX


def make_config(reserved: str) -> KubeletConfig:
    return KubeletConfig.from_bytes(YAML_TEMPLATE.format(reserved).encode())


@pytest.mark.parametrize("machine,cpus,allocatable,reserved", [
    ("c2-standard-16", 16, 15890, "0m"),
    ("n2-standard-8", 8, 7910, "0m"),
    ("n1-standard-32", 32, 31850, "0m"),
    ("e2-medium", 2, 940, GKE_CUSTOM_RESERVED_CPU),
    ("n2d-highcpu-64", 64, 63770, "0m"),
])
def test_matches_gke_allocatable(machine, cpus, allocatable, reserved):
    config = make_config(reserved)
    want = f"{cpus * 1000 - allocatable}m"
    assert compute_reserved_cpu(config, cpus) == want, machine


@pytest.mark.parametrize("cpus,want", [
    (0, "0m"),
    (1, "60m"),
    (2, "70m"),
    (3, "75m"),
    (4, "80m"),
    (5, "82m"),     # 82.5m truncated
    (6, "85m"),
    (7, "87m"),     # 87.5m truncated
])
def test_small_counts_without_override(cpus, want):
    assert compute_reserved_cpu(make_config("0m"), cpus) == want


@pytest.mark.parametrize("cpus", [0, 1, 2])
def test_override_kept_on_small_shapes(cpus):
    assert compute_reserved_cpu(make_config(GKE_CUSTOM_RESERVED_CPU), cpus) == GKE_CUSTOM_RESERVED_CPU


def test_override_ignored_above_two_cpus():
    assert compute_reserved_cpu(make_config(GKE_CUSTOM_RESERVED_CPU), 4) == "80m"


def test_small_shape_propagates_read_errors():
    config = KubeletConfig.from_bytes(b"kind: KubeletConfiguration\n")
    with pytest.raises(PathError):
        compute_reserved_cpu(config, 2)

    config = KubeletConfig.from_bytes(b"kubeReserved:\n  cpu: 1\n")
    with pytest.raises(FieldTypeError):
        compute_reserved_cpu(config, 1)


def test_large_shape_skips_the_read():
    config = KubeletConfig.from_bytes(b"kind: KubeletConfiguration\n")
    assert compute_reserved_cpu(config, 16) == "110m"
    assert "kubeReserved" not in config.tree


def test_compute_does_not_mutate_config():
    config = make_config("0m")
    before = config.to_bytes()
    compute_reserved_cpu(config, 64)
    assert config.to_bytes() == before


def test_negative_cpu_count_rejected():
    with pytest.raises(ValueError):
        compute_reserved_cpu(make_config("0m"), -1)
    with pytest.raises(ValueError):
        reserved_milli_cpus(-4)


def test_truncation_happens_on_the_aggregate():
    """
    Per-core 2.5m shares add up before truncating: 9 CPUs is 92.5m -> 92m,
    not 60 + 10 + 5*2 + 2*5 = 90m.
    """
    assert reserved_milli_cpus(9) == 92


def test_tier_outside_cpu_range_contributes_nothing():
    tier = ReservationTier(Decimal("0.005"), 2, 4)
    assert tier.milli_cpus(1) == 0
    assert tier.milli_cpus(3) == 5
    assert tier.milli_cpus(100) == 10


@pytest.mark.parametrize("quantity,milli", [
    ("1060m", 1060),
    ("0m", 0),
    ("2", 2000),
    ("0.5", 500),
    ("1.0005", 1000),
])
def test_parse_milli_cpu(quantity, milli):
    assert parse_milli_cpu(quantity) == milli


@pytest.mark.parametrize("quantity", ["", "abc", "10Mi", "-1", "1.5.2m"])
def test_parse_milli_cpu_rejects_garbage(quantity):
    with pytest.raises(FieldTypeError):
        parse_milli_cpu(quantity)


def test_allocatable_and_format():
    assert allocatable_milli_cpu(2, GKE_CUSTOM_RESERVED_CPU) == 940
    assert allocatable_milli_cpu(16, "110m") == 15890
    assert format_milli_cpu(230) == "230m"
