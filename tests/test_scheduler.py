import logging

import pytest

from global_monitor.scheduler import RefreshScheduler, Source


def make_scheduler() -> RefreshScheduler:
    return RefreshScheduler(
        [Source("finance", 15), Source("sports", 30), Source("news", 60)]
    )


def test_source_requires_positive_interval():
    with pytest.raises(ValueError):
        Source("broken", 0)
    with pytest.raises(ValueError):
        Source("broken", -5)


def test_duplicate_source_names_rejected():
    with pytest.raises(ValueError):
        RefreshScheduler([Source("a", 1), Source("a", 2)])


@pytest.mark.parametrize("now", [0.0, 1.0, 1e9])
def test_never_refreshed_source_is_always_due(now):
    scheduler = make_scheduler()
    assert scheduler.is_due("finance", now)
    assert scheduler.due(now) == ["finance", "sports", "news"]
    assert scheduler.needs_full_load()


def test_due_window_is_half_open():
    scheduler = make_scheduler()
    scheduler.mark_refreshed("sports", 100.0)

    for now in (100.0, 110.0, 129.999):
        assert not scheduler.is_due("sports", now)
    assert scheduler.is_due("sports", 130.0)
    assert scheduler.is_due("sports", 500.0)


def test_sources_are_independent():
    scheduler = make_scheduler()
    for name in scheduler.names:
        scheduler.mark_refreshed(name, 0.0)

    assert scheduler.due(16.0) == ["finance"]
    assert scheduler.due(30.0) == ["finance", "sports"]
    assert scheduler.due(60.0) == ["finance", "sports", "news"]
    assert not scheduler.needs_full_load()


def test_last_success_never_moves_backwards():
    scheduler = make_scheduler()
    scheduler.mark_refreshed("news", 50.0)
    scheduler.mark_refreshed("news", 40.0)
    assert scheduler.last_success("news") == 50.0
    scheduler.mark_refreshed("news", 70.0)
    assert scheduler.last_success("news") == 70.0


def test_reset_all_forces_full_load():
    scheduler = make_scheduler()
    for name in scheduler.names:
        scheduler.mark_refreshed(name, 10.0)

    scheduler.reset_all()

    assert scheduler.needs_full_load()
    assert all(scheduler.last_success(name) is None for name in scheduler.names)
    assert scheduler.due(10.0) == ["finance", "sports", "news"]


def test_in_flight_source_is_not_due_until_settled():
    scheduler = make_scheduler()
    scheduler.begin("finance")
    assert scheduler.in_flight("finance")
    assert not scheduler.is_due("finance", 0.0)

    scheduler.mark_refreshed("finance", 5.0)
    assert not scheduler.in_flight("finance")
    assert scheduler.is_due("finance", 20.0)

    scheduler.begin("sports")
    scheduler.abandon("sports")
    assert scheduler.is_due("sports", 0.0)


def test_unknown_source_raises_key_error():
    scheduler = make_scheduler()
    with pytest.raises(KeyError):
        scheduler.is_due("weather", 0.0)


def test_ages_report_elapsed_time():
    scheduler = make_scheduler()
    scheduler.mark_refreshed("finance", 10.0)
    ages = scheduler.ages(25.0)
    assert ages == {"finance": 15.0, "sports": None, "news": None}


def test_out_of_order_refresh_is_logged(caplog):
    scheduler = make_scheduler()
    scheduler.mark_refreshed("news", 50.0)

    with caplog.at_level(logging.DEBUG, logger="global_monitor.scheduler"):
        scheduler.mark_refreshed("news", 40.0)

    assert scheduler.last_success("news") == 50.0
    assert any("news" in record.getMessage() for record in caplog.records)
