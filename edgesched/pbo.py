"""Pressure-based scaling, placement and routing of serverless function instances."""

from __future__ import annotations

import argparse
import math
import random
import time
from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass, field

COMPUTATION_COST_WEIGHT = 0.3
TRANSFER_COST_WEIGHT = 0.3
RETENTION_COST_WEIGHT = 0.1
LATENCY_WEIGHT = 0.4
RETENTION_THRESHOLD = 0.5
HIGH_RETENTION_COST = 0.1
LOW_RETENTION_COST = 0.05

TARGET_RTT = 70.0
MAX_CPU = 100.0
ROUTING_LATENCY_MIDPOINT = 35.0
MIN_LATENCY_FACTOR = 0.01
SCALE_UP_THRESHOLD = 0.5
SCALE_DOWN_THRESHOLD = 0.1
PLACEMENT_THRESHOLD = 0.5

NOISE_RANGE = (0.01, 0.05)
COMPUTATION_REQUIREMENT = 1000.0
DATA_SIZE = 0.02
LINK_RATE_OFFSET = 50.0


@dataclass
class ComputeUnit:
    """An edge or cloud server hosting function replicas."""

    id: str
    cpu_usage: float
    network_latency: float
    function_replicas: int
    max_capacity: int


@dataclass
class FunctionInstance:
    """A running instance of a serverless function on a compute unit."""

    id: str
    host: ComputeUnit


@dataclass(frozen=True)
class SlotReport:
    """Outcome of one simulated time slot."""

    slot: int
    total_cost: float
    total_latency: float
    execution_us: float
    placement: ComputeUnit | None
    routing: dict[str, dict[str, float]] = field(default_factory=dict)


def _logistic(x: float) -> float:
    if x >= 0:
        return 1.0 / (1.0 + math.exp(-x))
    z = math.exp(x)
    return z / (1.0 + z)


def request_pressure(request_count: int, max_requests: int) -> float:
    """Share of the request capacity in use."""
    return request_count / max_requests


def performance_pressure(rtt: float, target_rtt: float) -> float:
    """Logistic pressure that rises as round-trip time exceeds its target."""
    return _logistic(0.2 * (rtt - target_rtt))


def resource_pressure(cpu_usage: float, max_cpu: float) -> float:
    """Share of CPU in use."""
    return cpu_usage / max_cpu


def combined_pressure(p_req: float, p_rtt: float, p_res: float) -> float:
    """Overall pressure as the product of its components."""
    return p_req * p_rtt * p_res


def unit_pressure(unit: ComputeUnit) -> float:
    """Pressure on a compute unit from replicas, latency and CPU use."""
    return combined_pressure(
        request_pressure(unit.function_replicas, unit.max_capacity),
        performance_pressure(unit.network_latency, TARGET_RTT),
        resource_pressure(unit.cpu_usage, MAX_CPU),
    )


def computation_cost(requirement: float, power: float) -> float:
    """Cost of a computation relative to the available power."""
    return requirement / power


def retention_cost(data_size: float) -> float:
    """Retention cost, higher for data above the retention threshold."""
    if data_size > RETENTION_THRESHOLD:
        return HIGH_RETENTION_COST
    return LOW_RETENTION_COST


def transfer_cost(data_size: float, network_latency: float) -> float:
    """Cost of moving data over a link with the given latency."""
    return data_size / (network_latency + 1)


def latency(data_size: float, transfer_rate: float) -> float:
    """Time to move data at the given rate."""
    return data_size / transfer_rate


def scale_functions(
    units: Sequence[ComputeUnit], threshold_max: float, threshold_min: float
) -> None:
    """Add a replica on units under high pressure and remove one under low pressure."""
    for unit in units:
        pressure = unit_pressure(unit)
        if pressure > threshold_max and unit.function_replicas < unit.max_capacity:
            unit.function_replicas += 1
        elif pressure < threshold_min and unit.function_replicas > 1:
            unit.function_replicas -= 1


def find_best_placement(
    units: Sequence[ComputeUnit], threshold_max: float
) -> ComputeUnit | None:
    """Unit with spare capacity and the lowest pressure below the threshold, if any."""
    best: ComputeUnit | None = None
    lowest = threshold_max
    for unit in units:
        if unit.function_replicas >= unit.max_capacity:
            continue
        pressure = unit_pressure(unit)
        if pressure < lowest:
            lowest = pressure
            best = unit
    return best


def routing_weights(
    function_map: Mapping[str, Sequence[FunctionInstance]],
) -> dict[str, dict[str, float]]:
    """Traffic share per host for each function, favouring idle, well-connected hosts."""
    shares: dict[str, dict[str, float]] = {}
    for func_id, instances in function_map.items():
        weights: dict[str, float] = {}
        total = 0.0
        for instance in instances:
            host = instance.host
            latency_factor = max(
                MIN_LATENCY_FACTOR,
                _logistic(0.2 * (host.network_latency - ROUTING_LATENCY_MIDPOINT)),
            )
            cpu_factor = 1 - host.cpu_usage / MAX_CPU
            weight = latency_factor * cpu_factor * 100
            weights[host.id] = weight
            total += weight
        # A function whose hosts are all saturated gets no traffic anywhere.
        shares[func_id] = {
            host_id: (weight / total if total else 0.0) for host_id, weight in weights.items()
        }
    return shares


def simulate(
    units: Sequence[ComputeUnit],
    function_map: Mapping[str, Sequence[FunctionInstance]],
    slots: int,
    rng: random.Random | None = None,
) -> Iterator[SlotReport]:
    """Scale, place and route for each slot, yielding its noisy cost and latency."""
    rng = rng if rng is not None else random.Random()

    def noise() -> float:
        return rng.uniform(*NOISE_RANGE)

    for slot in range(slots):
        start = time.perf_counter()
        scale_functions(units, SCALE_UP_THRESHOLD, SCALE_DOWN_THRESHOLD)
        placement = find_best_placement(units, PLACEMENT_THRESHOLD)
        routing = routing_weights(function_map)

        total_cost = 0.0
        total_latency = 0.0
        for instances in function_map.values():
            for instance in instances:
                host = instance.host
                comp = computation_cost(COMPUTATION_REQUIREMENT, host.cpu_usage) * noise()
                ret = retention_cost(DATA_SIZE) * noise()
                trans = transfer_cost(DATA_SIZE, host.network_latency) * noise()
                lat = latency(DATA_SIZE, host.network_latency + LINK_RATE_OFFSET) * noise()

                total_cost += (
                    COMPUTATION_COST_WEIGHT * comp
                    + RETENTION_COST_WEIGHT * ret
                    + TRANSFER_COST_WEIGHT * trans
                    + LATENCY_WEIGHT * lat
                )
                total_latency += lat

        execution_us = (time.perf_counter() - start) * 1e6
        yield SlotReport(slot, total_cost, total_latency, execution_us, placement, routing)


def _example_setup() -> tuple[list[ComputeUnit], dict[str, list[FunctionInstance]]]:
    units = [
        ComputeUnit("Edge-1", 30.0, 50.0, 3, 10),
        ComputeUnit("Edge-2", 40.0, 60.0, 2, 10),
        ComputeUnit("Cloud", 70.0, 150.0, 5, 20),
    ]
    function_map = {
        "funcA": [FunctionInstance("inst1", units[0]), FunctionInstance("inst2", units[1])]
    }
    return units, function_map


def main(argv: Sequence[str] | None = None) -> int:
    """Run the example scenario and print per-slot cost, latency and execution time."""
    parser = argparse.ArgumentParser(description="Pressure-based function scaling.")
    parser.add_argument("--slots", type=int, default=5, help="number of time slots")
    parser.add_argument("--seed", type=int, default=None, help="random seed")
    args = parser.parse_args(argv)

    units, function_map = _example_setup()
    for report in simulate(units, function_map, args.slots, random.Random(args.seed)):
        print(f"\n--- Time Slot {report.slot} ---")
        print(f"Total Cost: {report.total_cost:g}")
        print(f"Total Latency: {report.total_latency * 1e6:g} microseconds")
        print(f"Execution Time: {int(report.execution_us)} microseconds.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())