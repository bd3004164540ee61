"""Load-adaptive request scheduling and container retention across roadside units."""

from __future__ import annotations

import argparse
import time
from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field

BASE_WEIGHT_C = 0.3
BASE_WEIGHT_R = 0.3
BASE_WEIGHT_TR = 0.3
BASE_WEIGHT_P = 0.3
RETENTION_THRESHOLD = 0.5
LOW_LOAD_LIMIT = 0.4
MEDIUM_LOAD_LIMIT = 0.7
INITIAL_WEIGHTS = (0.5, 0.2, 0.2, 0.1)

Weights = tuple[float, float, float, float]


@dataclass
class RSU:
    """A roadside unit with a computing capacity and per-unit costs."""

    id: int
    max_capacity: float
    used_capacity: float
    retention_cost: float
    computation_cost: float
    preparation_cost: float


@dataclass
class ServiceRequest:
    """A service request to be placed on a roadside unit."""

    id: int
    deadline: float
    computation_load: float
    transfer_cost: float
    preparation_cost: float
    distance_to_rsu: float


@dataclass
class Decisions:
    """Scheduling (request id to RSU id) and retention (RSU id to flag) choices."""

    scheduling: dict[int, int] = field(default_factory=dict)
    retention: dict[int, bool] = field(default_factory=dict)


@dataclass(frozen=True)
class SlotResult:
    """Outcome of one time slot."""

    slot: int
    load: float
    weights: Weights
    total_cost: float
    latency_us: float


@dataclass
class WeightAdapter:
    """Derives cost weights from system load, reacting to the slope of load change."""

    previous_load: float = 0.0
    previous_weights: Weights = INITIAL_WEIGHTS

    def calculate(self, load: float) -> Weights:
        """Return normalised weights for the given load and remember it."""
        slope = (load - self.previous_load) / self.previous_load if self.previous_load != 0.0 else 0.0

        if load <= LOW_LOAD_LIMIT:
            raw = INITIAL_WEIGHTS
        elif load <= MEDIUM_LOAD_LIMIT:
            raw = (
                0.4 + slope * 0.1,
                0.3 + slope * 0.05,
                0.2 - slope * 0.05,
                0.1 - slope * 0.05,
            )
        else:
            raw = (
                0.3 + slope * 0.1,
                0.4 + slope * 0.1,
                0.2 - slope * 0.05,
                0.1 - slope * 0.05,
            )

        total = sum(raw)
        weights: Weights = tuple(w / total for w in raw)  # type: ignore[assignment]

        self.previous_load = load
        self.previous_weights = weights
        return weights


def system_load(rsus: Sequence[RSU]) -> float:
    """Fraction of the total capacity currently in use."""
    total = sum(rsu.max_capacity for rsu in rsus)
    if total == 0:
        raise ValueError("total RSU capacity is zero")
    return sum(rsu.used_capacity for rsu in rsus) / total


def compute_cost(request: ServiceRequest, rsu: RSU, weights: Sequence[float]) -> float:
    """Weighted cost of serving a request on an RSU."""
    w_c, w_r, w_tr, w_p = weights
    return (
        w_c * rsu.computation_cost * request.computation_load
        + w_r * rsu.retention_cost
        + w_tr * request.transfer_cost
        + w_p * request.preparation_cost
    )


def schedule_requests(
    requests: Sequence[ServiceRequest],
    rsus: Sequence[RSU],
    weights: Sequence[float],
    decisions: Decisions,
) -> None:
    """Place each request on the cheapest RSU that still has room for it."""
    for request in requests:
        candidates = [
            rsu for rsu in rsus if rsu.used_capacity + request.computation_load <= rsu.max_capacity
        ]
        if not candidates:
            continue
        best = min(candidates, key=lambda rsu: compute_cost(request, rsu, weights))
        decisions.scheduling[request.id] = best.id
        best.used_capacity += request.computation_load


def retain_containers(rsus: Sequence[RSU], decisions: Decisions, load: float) -> None:
    """Keep containers warm on cheap RSUs unless the system is heavily loaded."""
    for rsu in rsus:
        decisions.retention[rsu.id] = (
            load <= MEDIUM_LOAD_LIMIT and rsu.retention_cost <= RETENTION_THRESHOLD
        )


def compute_total_cost(
    requests: Sequence[ServiceRequest], rsus: Sequence[RSU], decisions: Decisions
) -> float:
    """Total cost of the current placement using the base weights."""
    by_id = {rsu.id: rsu for rsu in rsus}
    total = 0.0
    for request in requests:
        try:
            rsu = by_id[decisions.scheduling[request.id]]
        except KeyError:
            raise KeyError(f"request {request.id} has no RSU assigned") from None
        total += (
            BASE_WEIGHT_C * rsu.computation_cost * request.computation_load
            + BASE_WEIGHT_R * rsu.retention_cost
            + BASE_WEIGHT_TR * request.transfer_cost
            + BASE_WEIGHT_P * request.preparation_cost
        )
    return total


def run(
    slots: int, requests: Sequence[ServiceRequest], rsus: Sequence[RSU]
) -> Iterator[SlotResult]:
    """Run the scheduler for a number of time slots, yielding each slot's result."""
    adapter = WeightAdapter()
    decisions = Decisions()
    for slot in range(slots):
        load = system_load(rsus)
        weights = adapter.calculate(load)

        start = time.perf_counter()
        schedule_requests(requests, rsus, weights, decisions)
        retain_containers(rsus, decisions, load)
        latency_us = (time.perf_counter() - start) * 1e6

        yield SlotResult(
            slot=slot,
            load=load,
            weights=weights,
            total_cost=compute_total_cost(requests, rsus, decisions),
            latency_us=latency_us,
        )


def _example_setup() -> tuple[list[ServiceRequest], list[RSU]]:
    rsus = [
        RSU(0, 110.0, 0.0, 0.02, 0.03, 0.01),
        RSU(1, 120.0, 0.0, 0.04, 0.02, 0.025),
        RSU(2, 130.0, 0.0, 0.025, 0.05, 0.02),
    ]
    requests = [
        ServiceRequest(0, 4.0, 25.0, 0.025, 0.02, 110.0),
        ServiceRequest(1, 5.0, 35.0, 0.035, 0.02, 130.0),
        ServiceRequest(2, 2.0, 12.0, 0.015, 0.008, 90.0),
    ]
    return requests, rsus


def main(argv: Sequence[str] | None = None) -> int:
    """Run the example scenario and print per-slot cost and latency."""
    parser = argparse.ArgumentParser(description="Load-adaptive RSU scheduling.")
    parser.add_argument("--slots", type=int, default=5, help="number of time slots")
    args = parser.parse_args(argv)

    requests, rsus = _example_setup()
    for result in run(args.slots, requests, rsus):
        print(
            f"Time Slot {result.slot}: Total Cost = {result.total_cost:g}, "
            f"Overall Latency = {result.latency_us:g} microseconds"
        )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())