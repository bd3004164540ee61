"""Service prefetching, request scheduling and transfer with load-driven sigmoid weights."""

from __future__ import annotations

import argparse
import math
import random
import time
from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field

GAMMA = 1.0
DELTA_C = 0.3
PREFETCH_COST_MULTIPLIER = 0.05
TRANSFER_COST_MULTIPLIER = 0.1
VARIATION_RANGE = (0.1, 0.3)
DEFAULT_SLOTS = 5

Weights = tuple[float, float, float, float]

__all__ = [
    "RSU",
    "ServiceRequest",
    "PrefetchedService",
    "Decisions",
    "SlotResult",
    "dynamic_weights",
    "system_load",
    "prefetch_services",
    "schedule_requests",
    "transfer_requests",
    "slot_costs",
    "run",
    "main",
]


@dataclass
class RSU:
    """A road-side unit with capacity and per-unit costs."""

    id: int
    max_capacity: float
    used_capacity: float
    retention_cost: float
    computation_cost: float
    preparation_cost: float


@dataclass
class ServiceRequest:
    """A service request with a computation load and a transfer demand."""

    id: int
    deadline: float
    computation_load: float
    transfer_cost: float
    preparation_cost: float
    demand: float
    distance_to_rsu: float


@dataclass
class PrefetchedService:
    """A service image that can be prefetched onto an RSU."""

    id: int
    size: float
    prefetch_cost: float


@dataclass
class Decisions:
    """Scheduling, retention, prefetching and transfer choices."""

    scheduling: dict[int, int] = field(default_factory=dict)
    retention: dict[int, bool] = field(default_factory=dict)
    prefetch: dict[int, bool] = field(default_factory=dict)
    transfer: dict[int, int] = field(default_factory=dict)


@dataclass(frozen=True)
class SlotResult:
    """Outcome of one time slot."""

    slot: int
    load: float
    weights: Weights
    total_cost: float
    total_latency: float
    scheduling_latency_us: float


def _logistic(x: float) -> float:
    if x >= 0:
        return 1.0 / (1.0 + math.exp(-x))
    z = math.exp(x)
    return z / (1.0 + z)


def dynamic_weights(load: float) -> Weights:
    """Normalised computation, retention, transfer and preparation weights for a load."""
    raw = [_logistic(GAMMA * (load - DELTA_C - offset)) for offset in (0.0, 0.1, 0.2, 0.3)]
    total = sum(raw)
    return tuple(w / total for w in raw)  # type: ignore[return-value]


def system_load(rsus: Sequence[RSU]) -> float:
    """Share of the total RSU capacity in use."""
    total = sum(rsu.max_capacity for rsu in rsus)
    used = sum(rsu.used_capacity for rsu in rsus)
    return used / total


def prefetch_services(
    rsus: Sequence[RSU], services: Sequence[PrefetchedService], decisions: Decisions
) -> None:
    """Prefetch onto each RSU every service that still fits in its spare capacity."""
    for rsu in rsus:
        remaining = rsu.max_capacity - rsu.used_capacity
        for service in services:
            if service.size <= remaining:
                decisions.prefetch[service.id] = True
                remaining -= service.size
                rsu.used_capacity += service.size


def schedule_requests(
    requests: Sequence[ServiceRequest],
    rsus: Sequence[RSU],
    weights: Sequence[float],
    decisions: Decisions,
) -> None:
    """Assign each request to the cheapest RSU that can still take its load."""
    w_c, w_r, w_tr, w_p = weights
    for request in requests:
        candidates = [
            rsu
            for rsu in rsus
            if rsu.used_capacity + request.computation_load <= rsu.max_capacity
        ]
        if not candidates:
            continue
        best = min(
            candidates,
            key=lambda rsu: w_c * rsu.computation_cost * request.computation_load
            + w_r * rsu.retention_cost
            + w_tr * request.transfer_cost
            + w_p * request.preparation_cost,
        )
        decisions.scheduling[request.id] = best.id
        best.used_capacity += request.computation_load


def transfer_requests(
    requests: Sequence[ServiceRequest], rsus: Sequence[RSU], decisions: Decisions
) -> None:
    """Move each request's demand to the RSU with the lowest distance-plus-workload cost."""
    for request in requests:
        candidates = [
            rsu for rsu in rsus if rsu.used_capacity + request.demand <= rsu.max_capacity
        ]
        if not candidates:
            continue
        best = min(
            candidates,
            key=lambda rsu: request.distance_to_rsu
            + TRANSFER_COST_MULTIPLIER * rsu.used_capacity / rsu.max_capacity,
        )
        decisions.transfer[request.id] = best.id
        best.used_capacity += request.demand


def slot_costs(
    requests: Sequence[ServiceRequest],
    rsus: Sequence[RSU],
    services: Sequence[PrefetchedService],
    decisions: Decisions,
) -> tuple[float, float]:
    """Total cost and total latency of the current placement and prefetches."""
    by_id = {rsu.id: rsu for rsu in rsus}
    total_cost = 0.0
    total_latency = 0.0
    for request in requests:
        try:
            rsu = by_id[decisions.scheduling[request.id]]
        except KeyError:
            raise KeyError(f"request {request.id} has no RSU assigned") from None
        total_cost += (
            rsu.computation_cost * request.computation_load
            + rsu.retention_cost
            + request.transfer_cost
            + request.preparation_cost
        )
        total_latency += request.computation_load * rsu.computation_cost + request.transfer_cost

    total_cost += sum(
        PREFETCH_COST_MULTIPLIER * service.prefetch_cost
        for service in services
        if decisions.prefetch.get(service.id, False)
    )
    return total_cost, total_latency


def run(
    slots: int,
    requests: Sequence[ServiceRequest],
    rsus: Sequence[RSU],
    services: Sequence[PrefetchedService],
    rng: random.Random | None = None,
    measure_latency: bool = True,
) -> Iterator[SlotResult]:
    """Simulate fluctuating slots, yielding each slot's cost and latency.

    When measure_latency is set, the wall-clock scheduling time in microseconds
    is added to the slot's latency.
    """
    rng = rng if rng is not None else random.Random()
    decisions = Decisions()

    def vary() -> float:
        return rng.uniform(*VARIATION_RANGE)

    for slot in range(slots):
        for request in requests:
            factor = vary()
            request.computation_load *= factor
            request.transfer_cost *= factor
        for rsu in rsus:
            rsu.computation_cost *= vary()
            rsu.retention_cost *= vary()

        load = system_load(rsus)
        weights = dynamic_weights(load)

        prefetch_services(rsus, services, decisions)

        start = time.perf_counter()
        schedule_requests(requests, rsus, weights, decisions)
        scheduling_us = (time.perf_counter() - start) * 1e6 if measure_latency else 0.0

        transfer_requests(requests, rsus, decisions)

        total_cost, total_latency = slot_costs(requests, rsus, services, decisions)
        yield SlotResult(
            slot=slot,
            load=load,
            weights=weights,
            total_cost=total_cost,
            total_latency=total_latency + scheduling_us,
            scheduling_latency_us=scheduling_us,
        )


def _example_setup() -> tuple[list[ServiceRequest], list[RSU], list[PrefetchedService]]:
    rsus = [
        RSU(0, 110.0, 0.0, 0.02, 0.03, 0.01),
        RSU(1, 120.0, 0.0, 0.04, 0.02, 0.025),
        RSU(2, 130.0, 0.0, 0.025, 0.05, 0.02),
    ]
    requests = [
        ServiceRequest(0, 4.0, 25.0, 0.025, 0.02, 10.0, 110.0),
        ServiceRequest(1, 5.0, 35.0, 0.035, 0.02, 15.0, 130.0),
        ServiceRequest(2, 2.0, 12.0, 0.015, 0.008, 5.0, 90.0),
    ]
    services = [
        PrefetchedService(0, 10.0, 2.0),
        PrefetchedService(1, 15.0, 3.0),
        PrefetchedService(2, 8.0, 1.5),
    ]
    return requests, rsus, services


def main(argv: Sequence[str] | None = None) -> int:
    """Run the example scenario and print per-slot cost and latency."""
    parser = argparse.ArgumentParser(description="Prefetch-aware RSU scheduling.")
    parser.add_argument("--slots", type=int, default=DEFAULT_SLOTS, help="number of time slots")
    parser.add_argument("--seed", type=int, default=None, help="random seed")
    parser.add_argument(
        "--no-scheduling-latency",
        dest="measure_latency",
        action="store_false",
        help="leave measured scheduling time out of the latency",
    )
    args = parser.parse_args(argv)

    requests, rsus, services = _example_setup()
    overall = 0.0
    for result in run(
        args.slots, requests, rsus, services, random.Random(args.seed), args.measure_latency
    ):
        overall += result.scheduling_latency_us
        print(f"Time Slot {result.slot}: Total Cost = {result.total_cost:g}")
        print(f"Time Slot {result.slot}: Total Latency = {result.total_latency:g} microseconds")
    if args.measure_latency:
        print(f"Overall Latency across all time slots: {overall:g} microseconds")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())