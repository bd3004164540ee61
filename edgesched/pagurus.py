"""Container sharing between serverless functions through idle zygote containers."""

from __future__ import annotations

import argparse
import random
import time
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum

DEFAULT_SLOTS = 5
COST_VARIATION = (0.1, 0.3)
ZYGOTE_CONVERSION_COST = 0.1
FORK_COST = 0.05
BALANCE_COST = 0.05
INVOCATION_COST = 0.02
COLD_START_COST = 0.3


class ContainerType(Enum):
    """Role a container plays for its function."""

    PRIVATE = "private"
    ZYGOTE = "zygote"
    HELPER = "helper"


@dataclass
class Container:
    """A container belonging to one function."""

    function_name: str
    kind: ContainerType
    is_idle: bool


class PagurusManager:
    """Tracks containers per function and the cost and latency of each time slot."""

    def __init__(self, slots: int = DEFAULT_SLOTS, rng: random.Random | None = None) -> None:
        self.function_containers: dict[str, list[Container]] = {}
        self.function_dependencies: dict[str, set[str]] = {}
        self.cost_per_slot: list[float] = [0.0] * slots
        self.latencies: list[float] = [0.0] * slots
        self.rng = rng if rng is not None else random.Random()

    def _variation(self) -> float:
        return self.rng.uniform(*COST_VARIATION)

    def _charge(self, slot: int, cost: float, start: float) -> None:
        self.cost_per_slot[slot] += cost
        self.latencies[slot] += (time.perf_counter() - start) * 1e6

    def identify_idle_containers(self, slot: int) -> None:
        """Turn every idle private container into a zygote."""
        start = time.perf_counter()
        cost = 0.0
        for containers in self.function_containers.values():
            for container in containers:
                if container.is_idle and container.kind is ContainerType.PRIVATE:
                    container.kind = ContainerType.ZYGOTE
                    cost += ZYGOTE_CONVERSION_COST + self._variation()
        self._charge(slot, cost, start)

    def fork_zygote(self, function_name: str, target_function: str, slot: int) -> None:
        """Fork the first zygote of one function into a busy helper for another."""
        start = time.perf_counter()
        cost = 0.0
        containers = self.function_containers.get(function_name, [])
        if any(c.kind is ContainerType.ZYGOTE for c in containers):
            self.function_containers.setdefault(target_function, []).append(
                Container(target_function, ContainerType.HELPER, False)
            )
            cost = FORK_COST + self._variation()
        self._charge(slot, cost, start)

    def select_function_to_help(self, function_name: str) -> str | None:
        """Pick at random a function allowed to lend a container, or None."""
        candidates = sorted(self.function_dependencies.get(function_name, ()))
        if not candidates:
            return None
        return self.rng.choice(candidates)

    def balance_functions(self, slot: int) -> None:
        """Charge the load balancer's cost for a slot."""
        self.cost_per_slot[slot] += BALANCE_COST + self._variation()

    def add_container(self, function_name: str, kind: ContainerType) -> None:
        """Add an idle container of the given kind to a function."""
        self.function_containers.setdefault(function_name, []).append(
            Container(function_name, ContainerType(kind), True)
        )

    def setup_function_dependencies(self) -> None:
        """Let FunctionA and FunctionB lend containers to each other."""
        self.function_dependencies.setdefault("FunctionA", set()).add("FunctionB")
        self.function_dependencies.setdefault("FunctionB", set()).add("FunctionA")

    def simulate_function_invocation(self, function_name: str, slot: int) -> None:
        """Serve an invocation from a busy container, a helper fork or a cold start."""
        start = time.perf_counter()
        containers = self.function_containers.get(function_name, [])
        if any(not c.is_idle for c in containers):
            self._charge(slot, INVOCATION_COST + self._variation(), start)
            return

        cost = 0.0
        helper = self.select_function_to_help(function_name)
        if helper is not None:
            self.fork_zygote(helper, function_name, slot)
        else:
            cost = COLD_START_COST + self._variation()
            self.add_container(function_name, ContainerType.PRIVATE)
        self._charge(slot, cost, start)

    def report(self) -> list[str]:
        """One line per slot with its total cost and latency."""
        return [
            f"Time Slot {slot}: Total Cost = {cost:.6f}, Latency = {lat:.6f} microseconds"
            for slot, (cost, lat) in enumerate(zip(self.cost_per_slot, self.latencies))
        ]


def main(argv: Sequence[str] | None = None) -> int:
    """Run the example two-function scenario and print per-slot totals."""
    parser = argparse.ArgumentParser(description="Zygote-based container sharing.")
    parser.add_argument("--slots", type=int, default=DEFAULT_SLOTS, help="number of time slots")
    parser.add_argument("--seed", type=int, default=None, help="random seed")
    args = parser.parse_args(argv)

    manager = PagurusManager(args.slots, random.Random(args.seed))
    manager.setup_function_dependencies()
    manager.add_container("FunctionA", ContainerType.PRIVATE)
    manager.add_container("FunctionB", ContainerType.PRIVATE)

    for slot in range(args.slots):
        manager.identify_idle_containers(slot)
        manager.simulate_function_invocation("FunctionA", slot)
        manager.simulate_function_invocation("FunctionB", slot)
        manager.balance_functions(slot)

    for line in manager.report():
        print(line)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())