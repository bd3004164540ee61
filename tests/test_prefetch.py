import random

import pytest

from edgesched.prefetch import (
    PREFETCH_COST_MULTIPLIER,
    RSU,
    Decisions,
    PrefetchedService,
    ServiceRequest,
    dynamic_weights,
    main,
    prefetch_services,
    run,
    schedule_requests,
    slot_costs,
    system_load,
    transfer_requests,
)


def _rsus():
    return [
        RSU(0, 110.0, 0.0, 0.02, 0.03, 0.01),
        RSU(1, 120.0, 0.0, 0.04, 0.02, 0.025),
        RSU(2, 130.0, 0.0, 0.025, 0.05, 0.02),
    ]


def _requests():
    return [
        ServiceRequest(0, 4.0, 25.0, 0.025, 0.02, 10.0, 110.0),
        ServiceRequest(1, 5.0, 35.0, 0.035, 0.02, 15.0, 130.0),
        ServiceRequest(2, 2.0, 12.0, 0.015, 0.008, 5.0, 90.0),
    ]


def _services():
    return [
        PrefetchedService(0, 10.0, 2.0),
        PrefetchedService(1, 15.0, 3.0),
        PrefetchedService(2, 8.0, 1.5),
    ]


@pytest.mark.parametrize("load", [0.0, 0.3, 0.5, 1.0, 2.0])
def test_dynamic_weights_normalised_and_decreasing(load):
    weights = dynamic_weights(load)
    assert len(weights) == 4
    assert sum(weights) == pytest.approx(1.0)
    assert weights[0] > weights[1] > weights[2] > weights[3] > 0


def test_dynamic_weights_shift_with_load():
    low = dynamic_weights(0.0)
    high = dynamic_weights(1.0)
    assert high[0] / high[3] != pytest.approx(low[0] / low[3]) or high == low
    assert low[0] > 0.25


def test_system_load_fraction():
    rsus = [RSU(0, 100.0, 25.0, 0, 0, 0), RSU(1, 100.0, 25.0, 0, 0, 0)]
    assert system_load(rsus) == pytest.approx(0.25)


def test_prefetch_fills_spare_capacity_in_order():
    rsu = RSU(0, 30.0, 0.0, 0.0, 0.0, 0.0)
    decisions = Decisions()
    prefetch_services([rsu], _services(), decisions)
    assert rsu.used_capacity == pytest.approx(25.0)
    assert decisions.prefetch == {0: True, 1: True}


def test_prefetch_skips_full_rsu():
    rsu = RSU(0, 30.0, 30.0, 0.0, 0.0, 0.0)
    decisions = Decisions()
    prefetch_services([rsu], _services(), decisions)
    assert decisions.prefetch == {}
    assert rsu.used_capacity == 30.0


def test_schedule_picks_cheapest_rsu_with_room():
    cheap_but_full = RSU(0, 10.0, 9.0, 0.0, 0.0, 0.0)
    dear = RSU(1, 100.0, 0.0, 5.0, 5.0, 0.0)
    cheaper = RSU(2, 100.0, 0.0, 1.0, 1.0, 0.0)
    request = ServiceRequest(7, 1.0, 5.0, 0.0, 0.0, 1.0, 1.0)
    decisions = Decisions()
    schedule_requests([request], [cheap_but_full, dear, cheaper], dynamic_weights(0.0), decisions)
    assert decisions.scheduling == {7: 2}
    assert cheaper.used_capacity == 5.0
    assert dear.used_capacity == 0.0


def test_transfer_prefers_least_loaded_rsu():
    busy = RSU(0, 100.0, 80.0, 0, 0, 0)
    idle = RSU(1, 100.0, 10.0, 0, 0, 0)
    request = ServiceRequest(3, 1.0, 1.0, 0.0, 0.0, 15.0, 50.0)
    decisions = Decisions()
    transfer_requests([request], [busy, idle], decisions)
    assert decisions.transfer == {3: 1}
    assert idle.used_capacity == 25.0
    assert busy.used_capacity == 80.0


def test_transfer_skips_when_no_room():
    rsu = RSU(0, 10.0, 8.0, 0, 0, 0)
    request = ServiceRequest(3, 1.0, 1.0, 0.0, 0.0, 5.0, 50.0)
    decisions = Decisions()
    transfer_requests([request], [rsu], decisions)
    assert decisions.transfer == {}
    assert rsu.used_capacity == 8.0


def test_slot_costs_unassigned_request_raises():
    with pytest.raises(KeyError):
        slot_costs(_requests(), _rsus(), _services(), Decisions())


def test_slot_costs_prefetch_adds_multiplier_share():
    requests, rsus, services = _requests(), _rsus(), _services()
    decisions = Decisions(scheduling={0: 0, 1: 1, 2: 2})
    base_cost, base_latency = slot_costs(requests, rsus, services, decisions)
    decisions.prefetch[1] = True
    cost, latency = slot_costs(requests, rsus, services, decisions)
    assert cost - base_cost == pytest.approx(PREFETCH_COST_MULTIPLIER * services[1].prefetch_cost)
    assert latency == base_latency


def test_slot_costs_latency_excludes_retention_and_preparation():
    request = ServiceRequest(0, 1.0, 0.0, 0.0, 0.25, 0.0, 0.0)
    rsu = RSU(0, 10.0, 0.0, 0.5, 0.0, 0.0)
    cost, latency = slot_costs([request], [rsu], [], Decisions(scheduling={0: 0}))
    assert cost == pytest.approx(0.75)
    assert latency == 0.0


def test_run_is_reproducible_with_seed():
    first = list(run(5, _requests(), _rsus(), _services(), random.Random(3), False))
    second = list(run(5, _requests(), _rsus(), _services(), random.Random(3), False))
    assert [r.total_cost for r in first] == [r.total_cost for r in second]
    assert [r.slot for r in first] == [0, 1, 2, 3, 4]


def test_run_without_latency_measurement():
    for result in run(3, _requests(), _rsus(), _services(), random.Random(1), False):
        assert result.scheduling_latency_us == 0.0
        assert sum(result.weights) == pytest.approx(1.0)
        assert result.total_cost > 0


def test_run_measured_latency_included():
    for result in run(2, _requests(), _rsus(), _services(), random.Random(1), True):
        assert result.scheduling_latency_us >= 0.0
        assert result.total_latency >= result.scheduling_latency_us


def test_run_scales_request_load_down():
    requests = _requests()
    list(run(1, requests, _rsus(), _services(), random.Random(5), False))
    for request, original in zip(requests, _requests()):
        assert 0.1 * original.computation_load <= request.computation_load
        assert request.computation_load <= 0.3 * original.computation_load


def test_run_first_slot_load_is_zero():
    results = list(run(2, _requests(), _rsus(), _services(), random.Random(2), False))
    assert results[0].load == 0.0
    assert results[1].load > 0.0


def test_main_prints_each_slot(capsys):
    assert main(["--slots", "3", "--seed", "4"]) == 0
    out = capsys.readouterr().out
    assert out.count("Total Cost =") == 3
    assert "Overall Latency across all time slots" in out


def test_main_without_latency(capsys):
    assert main(["--slots", "2", "--seed", "4", "--no-scheduling-latency"]) == 0
    out = capsys.readouterr().out
    assert out.count("Total Latency =") == 2
    assert "Overall Latency" not in out