# edgesched

Small, self-contained simulations of scheduling strategies for edge and
serverless computing. Each module models one strategy over a number of time
slots and reports cost and latency per slot. There are no dependencies
beyond the Python standard library (Python 3.10 or later).

| Module | Strategy |
| --- | --- |
| `edgesched.onco` | Load-adaptive weighted request scheduling and container retention on roadside units |
| `edgesched.pbo` | Pressure-based scaling, placement and routing of function replicas |
| `edgesched.pagurus` | Idle-container reuse through zygote and helper containers |
| `edgesched.ldls` | Layer-aware task scheduling on edge nodes with a learned policy |
| `edgesched.prefetch` | Sigmoid-weighted scheduling with service prefetching and request transfer |

## Installation

```
pip install .
```

For running the tests:

```
pip install ".[test]"
pytest
```

## Command line

Each command runs its module's built-in example scenario and prints the
cost and latency of every time slot:

```
edgesched-onco
edgesched-pbo
edgesched-pagurus
edgesched-ldls
edgesched-prefetch
```

All commands take `--slots N` (default 5). The randomised ones
(`edgesched-pbo`, `edgesched-pagurus`, `edgesched-ldls`,
`edgesched-prefetch`) also take `--seed N` for a reproducible run.
`edgesched-prefetch` takes `--no-scheduling-latency` to leave the measured
wall-clock scheduling time out of the reported latency; without it, the
command also prints the overall scheduling latency across all slots.

Latencies reported by `edgesched-onco`, `edgesched-pbo`, `edgesched-pagurus`
and `edgesched-prefetch` include measured wall-clock time, so they differ
between runs even with the same seed.

## Library use

The building blocks can be used directly. With the load-adaptive scheduler,
`run` is a generator yielding one `SlotResult` (slot, load, weights,
total cost, latency in microseconds) per slot:

```python
from edgesched.onco import RSU, ServiceRequest, run

rsus = [
    RSU(id=0, max_capacity=110.0, used_capacity=0.0,
        retention_cost=0.02, computation_cost=0.03, preparation_cost=0.01),
    RSU(id=1, max_capacity=120.0, used_capacity=0.0,
        retention_cost=0.04, computation_cost=0.02, preparation_cost=0.025),
]
requests = [
    ServiceRequest(id=0, deadline=4.0, computation_load=25.0,
                   transfer_cost=0.025, preparation_cost=0.02, distance_to_rsu=110.0),
]

for result in run(3, requests, rsus):
    print(result.slot, result.total_cost)
```

The simulations update the objects they are given: scheduled load is added
to each RSU's `used_capacity`, and `prefetch.run` also scales request and
RSU costs from slot to slot.

The pressure model exposes its pieces as plain functions:

```python
from edgesched.pbo import ComputeUnit, unit_pressure, find_best_placement

units = [ComputeUnit("Edge-1", 30.0, 50.0, 3, 10), ComputeUnit("Cloud", 70.0, 150.0, 5, 20)]
print(unit_pressure(units[0]))
print(find_best_placement(units, 0.5))
```

`pbo.routing_weights` returns, for each function, the share of traffic each
host should receive.

The container-sharing model keeps its state in a `PagurusManager`;
`report()` returns one text line per slot:

```python
import random
from edgesched.pagurus import ContainerType, PagurusManager

manager = PagurusManager(slots=3, rng=random.Random(1))
manager.setup_function_dependencies()
manager.add_container("FunctionA", ContainerType.PRIVATE)
manager.add_container("FunctionB", ContainerType.PRIVATE)
for slot in range(3):
    manager.identify_idle_containers(slot)
    manager.simulate_function_invocation("FunctionA", slot)
    manager.simulate_function_invocation("FunctionB", slot)
    manager.balance_functions(slot)
print("\n".join(manager.report()))
```

`LDLS.execute(slots)` trains the node policy and returns a list of
`(slot, total cost, total latency)` tuples.

The stochastic simulations (`pbo.simulate`, `prefetch.run`, `PagurusManager`,
`LDLS`) accept or hold a `random.Random` instance, so their random draws can
be made reproducible by seeding it.

## What it does not do

These are numeric models only. The package does not start, stop or inspect
real containers, talk to servers or roadside units, or store results
anywhere; the commands print to standard output and the functions return
plain Python values.