"""
LLC缓存模型测试
"""

import pytest

from core.models.scheduling_object import SortCriterion
from core.network.id_mapper import AddressRegistry
from simulator.llc_buffer_model import LlcBufferModel


@pytest.fixture
def llc(clock, gw_address):
    return LlcBufferModel(clock, gw_address, seed=7)


class TestBuffering:
    """测试入队和缓存统计"""

    def test_enqueue(self, llc, ut_addresses):
        a = ut_addresses[0]
        llc.enqueue(a, 1500)
        llc.enqueue(a, 500)

        assert llc.get_buffered_bytes(a) == 2000
        assert llc.get_total_buffered_bytes() == 2000
        assert llc.bytes_enqueued == 2000

    def test_unknown_destination(self, llc, ut_addresses):
        assert llc.get_buffered_bytes(ut_addresses[0]) == 0

    def test_nonpositive_size(self, llc, ut_addresses):
        with pytest.raises(ValueError):
            llc.enqueue(ut_addresses[0], 0)

    def test_destinations_attached_to_registry(self, clock, gw_address, ut_addresses):
        registry = AddressRegistry()
        llc = LlcBufferModel(clock, gw_address, registry=registry)

        llc.add_destination(ut_addresses[0])
        llc.enqueue(ut_addresses[1], 10)
        llc.add_destination(ut_addresses[0])

        assert registry.lookup_ut_id(ut_addresses[0]) == 0
        assert registry.lookup_ut_id(ut_addresses[1]) == 1
        assert registry.lookup_trace_id(ut_addresses[1]) == 1


class TestSchedulingObjects:
    """测试候选对象和排序准则"""

    def test_empty_buffers_are_not_candidates(self, llc, ut_addresses):
        llc.add_destination(ut_addresses[0])
        llc.enqueue(ut_addresses[1], 10)

        candidates = llc.get_scheduling_objects(SortCriterion.NO_SORT)

        assert [c.mac_address for c in candidates] == [ut_addresses[1]]

    def test_no_sort_keeps_creation_order(self, llc, ut_addresses):
        for address, size in zip(ut_addresses[:3], [10, 300, 20]):
            llc.enqueue(address, size)

        candidates = llc.get_scheduling_objects(SortCriterion.NO_SORT)

        assert [c.buffered_bytes for c in candidates] == [10, 300, 20]

    def test_load_sort(self, llc, ut_addresses):
        for address, size in zip(ut_addresses[:3], [10, 300, 20]):
            llc.enqueue(address, size)

        candidates = llc.get_scheduling_objects(SortCriterion.BUFFERING_LOAD_SORT)

        assert [c.buffered_bytes for c in candidates] == [300, 20, 10]

    def test_delay_sort(self, clock, llc, ut_addresses):
        a, b = ut_addresses[:2]
        clock.schedule(0.001, llc.enqueue, b, 10)
        clock.schedule(0.002, llc.enqueue, a, 10)
        llc.add_destination(a)
        clock.run()

        candidates = llc.get_scheduling_objects(SortCriterion.BUFFERING_DELAY_SORT)

        assert [c.mac_address for c in candidates] == [b, a]

    def test_priority_sort(self, llc, ut_addresses):
        a, b, c = ut_addresses[:3]
        llc.add_destination(a, priority=2)
        llc.add_destination(b, priority=1)
        llc.add_destination(c, is_control=True, priority=9)
        for address in (a, b, c):
            llc.enqueue(address, 10)

        candidates = llc.get_scheduling_objects(SortCriterion.PRIORITY_SORT)

        assert [x.mac_address for x in candidates] == [c, b, a]
        assert candidates[0].is_control

    def test_random_sort_is_permutation(self, llc, ut_addresses):
        for address in ut_addresses:
            llc.enqueue(address, 10)

        candidates = llc.get_scheduling_objects(SortCriterion.RANDOM_SORT)

        assert sorted(c.mac_address for c in candidates) == sorted(ut_addresses)

    def test_random_sort_reproducible_with_seed(self, clock, gw_address, ut_addresses):
        orders = []
        for _ in range(2):
            llc = LlcBufferModel(clock, gw_address, seed=11)
            for address in ut_addresses:
                llc.enqueue(address, 10)
            orders.append([c.mac_address for c in llc.get_scheduling_objects(SortCriterion.RANDOM_SORT)])

        assert orders[0] == orders[1]


class TestTxOpportunity:
    """测试发送机会协商"""

    def test_takes_whole_sdus(self, llc, gw_address, ut_addresses):
        a = ut_addresses[0]
        llc.enqueue(a, 100, label="p1")
        llc.enqueue(a, 200, label="p2")

        opportunity = llc.notify_tx_opportunity(302, a)

        assert opportunity.unit.size == 300
        assert opportunity.bytes_left == 0
        assert opportunity.unit.source_address == gw_address
        assert opportunity.unit.dest_address == a
        assert opportunity.unit.label == "p1,p2"

    def test_segments_last_sdu(self, llc, ut_addresses):
        a = ut_addresses[0]
        llc.enqueue(a, 1000)

        opportunity = llc.notify_tx_opportunity(400, a)

        assert opportunity.unit.size == 400
        assert opportunity.bytes_left == 600
        assert llc.get_buffered_bytes(a) == 600
        assert llc.bytes_dequeued == 400

    def test_no_data(self, llc, ut_addresses):
        opportunity = llc.notify_tx_opportunity(100, ut_addresses[0])

        assert opportunity.unit is None
        assert opportunity.bytes_left == 0

    def test_nonpositive_budget(self, llc, ut_addresses):
        with pytest.raises(ValueError):
            llc.notify_tx_opportunity(0, ut_addresses[0])
