import random

import pytest

from edgesched.pagurus import Container, ContainerType, PagurusManager, main


def make_manager(seed=1):
    return PagurusManager(rng=random.Random(seed))


def test_add_container_is_idle_and_of_given_kind():
    manager = make_manager()
    manager.add_container("FunctionA", ContainerType.PRIVATE)
    assert manager.function_containers["FunctionA"] == [
        Container("FunctionA", ContainerType.PRIVATE, True)
    ]


def test_add_container_accepts_kind_value():
    manager = make_manager()
    manager.add_container("F", "zygote")
    assert manager.function_containers["F"][0].kind is ContainerType.ZYGOTE


def test_identify_idle_converts_private_to_zygote():
    manager = make_manager()
    manager.add_container("FunctionA", ContainerType.PRIVATE)
    manager.add_container("FunctionB", ContainerType.PRIVATE)
    manager.identify_idle_containers(0)
    kinds = [c.kind for cs in manager.function_containers.values() for c in cs]
    assert kinds == [ContainerType.ZYGOTE, ContainerType.ZYGOTE]
    assert 0.4 <= manager.cost_per_slot[0] <= 0.8
    assert manager.latencies[0] >= 0.0


def test_identify_idle_leaves_busy_containers():
    manager = make_manager()
    manager.function_containers["F"] = [Container("F", ContainerType.PRIVATE, False)]
    manager.identify_idle_containers(1)
    assert manager.function_containers["F"][0].kind is ContainerType.PRIVATE
    assert manager.cost_per_slot[1] == 0.0


def test_select_without_dependencies_is_none():
    assert make_manager().select_function_to_help("FunctionA") is None


def test_select_after_setup():
    manager = make_manager()
    manager.setup_function_dependencies()
    assert manager.select_function_to_help("FunctionA") == "FunctionB"
    assert manager.select_function_to_help("FunctionB") == "FunctionA"


def test_fork_without_zygote_does_nothing():
    manager = make_manager()
    manager.add_container("FunctionB", ContainerType.PRIVATE)
    manager.fork_zygote("FunctionB", "FunctionA", 0)
    assert "FunctionA" not in manager.function_containers
    assert manager.cost_per_slot[0] == 0.0


def test_invocation_uses_helper_fork():
    manager = make_manager()
    manager.setup_function_dependencies()
    manager.add_container("FunctionA", ContainerType.PRIVATE)
    manager.add_container("FunctionB", ContainerType.PRIVATE)
    manager.identify_idle_containers(0)
    before = manager.cost_per_slot[0]
    manager.simulate_function_invocation("FunctionA", 0)
    helpers = [c for c in manager.function_containers["FunctionA"] if c.kind is ContainerType.HELPER]
    assert len(helpers) == 1
    assert helpers[0].is_idle is False
    assert 0.15 <= manager.cost_per_slot[0] - before <= 0.35


def test_invocation_cold_start_adds_private_container():
    manager = make_manager()
    manager.simulate_function_invocation("FunctionA", 2)
    containers = manager.function_containers["FunctionA"]
    assert containers == [Container("FunctionA", ContainerType.PRIVATE, True)]
    assert 0.4 <= manager.cost_per_slot[2] <= 0.6


def test_invocation_on_busy_container_adds_nothing():
    manager = make_manager()
    manager.function_containers["F"] = [Container("F", ContainerType.HELPER, False)]
    manager.simulate_function_invocation("F", 3)
    assert len(manager.function_containers["F"]) == 1
    assert 0.12 <= manager.cost_per_slot[3] <= 0.32


def test_balance_functions_cost_range():
    manager = make_manager()
    manager.balance_functions(4)
    assert 0.15 <= manager.cost_per_slot[4] <= 0.35


def test_slot_out_of_range_raises():
    with pytest.raises(IndexError):
        make_manager().balance_functions(5)


def test_report_lines():
    manager = PagurusManager(slots=3, rng=random.Random(0))
    lines = manager.report()
    assert len(lines) == 3
    assert lines[0] == "Time Slot 0: Total Cost = 0.000000, Latency = 0.000000 microseconds"


def _seeded_costs(seed):
    manager = make_manager(seed)
    manager.setup_function_dependencies()
    manager.add_container("FunctionA", ContainerType.PRIVATE)
    manager.add_container("FunctionB", ContainerType.PRIVATE)
    for slot in range(5):
        manager.identify_idle_containers(slot)
        manager.simulate_function_invocation("FunctionA", slot)
        manager.simulate_function_invocation("FunctionB", slot)
        manager.balance_functions(slot)
    return list(manager.cost_per_slot)


def test_seeded_runs_have_same_costs():
    first = _seeded_costs(7)
    second = _seeded_costs(7)
    assert len(first) == 5
    assert all(cost >= 0.15 for cost in first)
    assert first == second


def test_main_prints_each_slot(capsys):
    assert main(["--seed", "3"]) == 0
    lines = capsys.readouterr().out.strip().splitlines()
    assert len(lines) == 5
    assert all(line.startswith(f"Time Slot {i}: Total Cost = ") for i, line in enumerate(lines))