import json
from datetime import datetime, timezone

import pytest

from slidekit.bus import MessageBus
from slidekit.metric import Combiner, Metric, build_instance_id


class FakeRedis:
    def __init__(self):
        self.hashes = {}

    def hset(self, name, key, value):
        self.hashes.setdefault(name, {})[str(key).encode()] = str(value).encode()
        return 1

    def hgetall(self, name):
        return dict(self.hashes.get(name, {}))


class IntCombiner(Combiner):
    def combine(self, value, acc):
        return (acc or 0) + int(value)


class MapIntCombiner(Combiner):
    def combine(self, value, acc):
        acc = {} if acc is None else acc
        for key, number in json.loads(value).items():
            acc[int(key)] = acc.get(int(key), 0) + number
        return acc


@pytest.fixture
def bus():
    return MessageBus(environ={}, client=FakeRedis())


def test_save_value(bus):
    metric = Metric(bus, "test1", IntCombiner(), 1)
    metric.save("3")
    assert metric.get() == 3


def test_save_value_on_different_instances(bus):
    m1 = Metric(bus, "test2", IntCombiner(), 1)
    m2 = Metric(bus, "test2", IntCombiner(), 1)
    m1.save("2")
    m2.save("3")
    assert m1.get() == 5
    assert m2.get() == 5


def test_ignore_old_instances(bus):
    def old_now():
        return datetime(2023, 1, 1, 5, 15, 0, tzinfo=timezone.utc)

    old_instance = Metric(bus, "test3", IntCombiner(), 1, old_now)
    old_instance.save("2")

    current = Metric(bus, "test3", IntCombiner(), 1)
    current.save("3")

    assert current.get() == 3


def test_combine_json_map(bus):
    m1 = Metric(bus, "test4", MapIntCombiner(), 1)
    m2 = Metric(bus, "test4", MapIntCombiner(), 1)
    m1.save(json.dumps({1: 2, 3: 4}))
    m2.save(json.dumps({1: 1, 2: 2}))
    assert m1.get() == {1: 3, 2: 2, 3: 4}


def test_no_values_gives_none(bus):
    assert Metric(bus, "empty", IntCombiner(), 1).get() is None


def test_save_writes_timestamp(bus):
    moment = datetime(2023, 1, 1, 5, 15, 0, tzinfo=timezone.utc)
    metric = Metric(bus, "stamp", IntCombiner(), 1, lambda: moment)
    metric.save("1")
    stored = bus.client.hashes["metric-stamp-timestamp"][metric.instance_id.encode()]
    assert stored == b"1672550100"
    assert bus.client.hashes["metric-stamp-values"][metric.instance_id.encode()] == b"1"


def test_combine_error_propagates(bus):
    metric = Metric(bus, "bad", IntCombiner(), 1)
    metric.save("abc")
    with pytest.raises(ValueError):
        metric.get()


def test_build_instance_id():
    instance_id = build_instance_id(lambda: datetime(2023, 1, 1, 5, 15, 0, tzinfo=timezone.utc))
    prefix, suffix = instance_id[:20], instance_id[20:]
    assert prefix == "2023-01-01T05:15:00-"
    assert len(suffix) == 8
    assert suffix.isascii() and suffix.isalnum()


def test_instance_ids_differ(bus):
    ids = {Metric(bus, "ids", IntCombiner(), 1).instance_id for _ in range(20)}
    assert len(ids) == 20