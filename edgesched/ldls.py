"""Layer-aware task scheduling on edge nodes with a simple learned policy."""

from __future__ import annotations

import argparse
import math
import random
from collections import defaultdict
from collections.abc import Sequence
from dataclasses import dataclass, field, replace

LEARNING_RATE = 0.01
DISCOUNT_FACTOR = 0.9
EPSILON = 0.1
MAX_ITERATIONS = 300

BASE_WEIGHT_C = 0.05
BASE_WEIGHT_R = 0.05
BASE_WEIGHT_TR = 0.05
RETENTION_THRESHOLD = 0.3

BANDWIDTH_FLUCTUATION = (10.0, 100.0)
DATA_SIZE_FLUCTUATION = (0.95, 1.05)
COST_WEIGHT_FLUCTUATION = (0.9, 1.1)
EXTRA_FLUCTUATION = (0.9, 1.1)
LAYER_FLUCTUATION = (0.95, 1.05)
ACTION_FLUCTUATION = (0.95, 1.05)
COST_SCALE = (0.1, 1.5)
TOTAL_FLUCTUATION = (0.02, 0.09)
DEFAULT_SLOTS = 5


@dataclass
class Layer:
    """An image layer."""

    id: int
    size: float
    exists_locally: bool
    download_time: float


@dataclass
class Image:
    """A container image made of layers."""

    id: int
    layers: list[int] = field(default_factory=list)


@dataclass
class EdgeNode:
    """An edge node with the layers it holds locally."""

    id: int
    cpu_frequency: float
    bandwidth: float
    storage_capacity: float
    max_containers: int
    local_layers: list[int] = field(default_factory=list)


@dataclass
class Task:
    """A task asking for an image, with its data size and computation need."""

    id: int
    requested_image: int
    cpu_requirement: float
    data_size: float
    computation_requirement: float


class LDLS:
    """Schedules tasks towards nodes that already hold their image layers."""

    def __init__(
        self,
        nodes: Sequence[EdgeNode],
        images: Sequence[Image],
        layers: Sequence[Layer],
        tasks: Sequence[Task],
        rng: random.Random | None = None,
    ) -> None:
        self.nodes = list(nodes)
        self.images = list(images)
        self.layers = {layer.id: layer for layer in layers}
        self.tasks = [replace(task) for task in tasks]
        self.policy: defaultdict[int, float] = defaultdict(float)
        self.rng = rng if rng is not None else random.Random()

    def _uniform(self, bounds: tuple[float, float]) -> float:
        return self.rng.uniform(*bounds)

    def _distance(self, node: EdgeNode) -> float:
        return math.fabs(node.storage_capacity - self.nodes[0].storage_capacity)

    def extract_features(self, task: Task, node: EdgeNode) -> float:
        """Noisy total size of the task's image layers the node already holds."""
        score = 0.0
        local = set(node.local_layers)
        for layer_id in self.images[task.requested_image].layers:
            if layer_id in local:
                layer = self.layers.get(layer_id)
                size = layer.size if layer is not None else 0.0
                score += size * self._uniform(LAYER_FLUCTUATION)
        return score

    def schedule_task(self, task: Task) -> int | None:
        """Id of the node with the best layer-reuse value, or None if none can take it."""
        best_node: int | None = None
        best_score = -math.inf
        for node in self.nodes:
            if node.max_containers <= 0 or node.storage_capacity <= 0:
                continue
            feature = self.extract_features(task, node)
            factor = self._uniform(ACTION_FLUCTUATION)
            value = feature / (node.cpu_frequency * node.bandwidth) * factor
            if value > best_score:
                best_score = value
                best_node = node.id
        return best_node

    def computation_cost(self, task: Task, node: EdgeNode) -> float:
        """Noisy cost of running the task on the node."""
        cost = task.computation_requirement / node.cpu_frequency * self._uniform(COST_WEIGHT_FLUCTUATION)
        return cost * self._uniform(EXTRA_FLUCTUATION)

    def retention_cost(self, task: Task) -> float:
        """Noisy cost of keeping the task's container, higher for large data."""
        base = 0.03 if task.data_size > RETENTION_THRESHOLD else 0.02
        cost = base * self._uniform(COST_WEIGHT_FLUCTUATION)
        return cost * self._uniform(EXTRA_FLUCTUATION)

    def transfer_cost(self, task: Task, node: EdgeNode) -> float:
        """Noisy cost of moving the task's data to the node."""
        bandwidth = node.bandwidth * self._uniform(BANDWIDTH_FLUCTUATION) * 0.8
        cost = task.data_size / (bandwidth + self._distance(node)) * self._uniform(COST_WEIGHT_FLUCTUATION)
        return cost * self._uniform(EXTRA_FLUCTUATION)

    def latency(self, task: Task, node: EdgeNode) -> float:
        """Time to move the task's data to the node."""
        return task.data_size / (node.bandwidth + self._distance(node))

    def total_cost(self) -> float:
        """Weighted cost of all tasks on all nodes for one slot; task data sizes drift."""
        scale = self._uniform(COST_SCALE)
        total = 0.0
        for task in self.tasks:
            for node in self.nodes:
                task.data_size *= self._uniform(DATA_SIZE_FLUCTUATION)
                cost = (
                    BASE_WEIGHT_C * self.computation_cost(task, node)
                    + BASE_WEIGHT_R * self.retention_cost(task)
                    + BASE_WEIGHT_TR * self.transfer_cost(task, node)
                )
                total += cost * scale
        return total * self._uniform(TOTAL_FLUCTUATION)

    def optimize_policy(self) -> None:
        """Reinforce the nodes chosen for each task with a decaying step."""
        for iteration in range(MAX_ITERATIONS):
            for task in self.tasks:
                selected = self.schedule_task(task)
                if selected is not None:
                    self.policy[selected] += LEARNING_RATE / (iteration + 1)

    def execute(self, slots: int = DEFAULT_SLOTS) -> list[tuple[int, float, float]]:
        """Optimise the policy, then return (slot, total cost, total latency) per slot."""
        self.optimize_policy()
        results = []
        for slot in range(slots):
            cost = self.total_cost()
            total_latency = sum(self.latency(task, node) for task in self.tasks for node in self.nodes)
            results.append((slot, cost, total_latency))
        return results


def _example_setup() -> LDLS:
    nodes = [
        EdgeNode(0, 1.2, 100.0, 15.0, 10, [1, 2]),
        EdgeNode(1, 0.9, 80.0, 10.0, 8, [3, 4]),
    ]
    layers = [
        Layer(1, 2.5, True, 0.0),
        Layer(2, 3.0, True, 0.0),
        Layer(3, 1.5, True, 0.0),
        Layer(4, 4.0, False, 5.0),
    ]
    images = [Image(0, [1, 2]), Image(1, [3, 4])]
    tasks = [Task(0, 0, 0.8, 1000.0, 50.0), Task(1, 1, 1.0, 1500.0, 100.0)]
    return LDLS(nodes, images, layers, tasks)


def main(argv: Sequence[str] | None = None) -> int:
    """Run the example scenario and print per-slot cost and latency."""
    parser = argparse.ArgumentParser(description="Layer-aware edge task scheduling.")
    parser.add_argument("--slots", type=int, default=DEFAULT_SLOTS, help="number of time slots")
    parser.add_argument("--seed", type=int, default=None, help="random seed")
    args = parser.parse_args(argv)

    scheduler = _example_setup()
    scheduler.rng = random.Random(args.seed)
    for slot, cost, total_latency in scheduler.execute(args.slots):
        print(f"Time Slot {slot}: Total Cost = {cost:g}")
        print(f"Time Slot {slot} Total Latency = {total_latency:g} seconds")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())