import threading

import pytest

from tdpkit.stats import Mean, Median


def test_mean():
    m = Mean()
    assert m.get() == 0.0

    m.record(5)
    assert m.get() == 5.0

    m.record(6)
    assert m.get() == 5.5

    m.record(-10)
    assert m.get() == 1 / 3


def test_mean_merge():
    a = Mean()
    a.record(5)
    b = Mean()
    b.record(6)
    b.record(-10)
    a.merge(b)
    assert a.get() == 1 / 3
    assert b.get() == -2.0


def test_mean_concurrent_records():
    m = Mean()

    def worker():
        for _ in range(1000):
            m.record(2)

    threads = [threading.Thread(target=worker) for _ in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert m.get() == 2.0


def test_median_empty():
    assert Median(100).get() == 0.0


def test_median_odd_and_even():
    m = Median(100)
    for sample in (3, 1, 2):
        m.record(sample)
    assert m.get() == 2.0
    m.record(4)
    assert m.get() == 2.5


def test_median_forgets_old_samples():
    m = Median(4)
    for sample in (1, 2, 3, 4, 100, 100, 100):
        m.record(sample)
    assert m.get() == 100.0


def test_median_rejects_empty_window():
    with pytest.raises(ValueError):
        Median(0)