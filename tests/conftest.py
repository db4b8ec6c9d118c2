"""
Pytest 配置文件

定义前向链路测试共用的 fixtures 和协作方替身
"""

from typing import Dict, List, Optional, Set, Tuple

import pytest

from core.dynamic_scheduler.event_loop import EventScheduler
from core.models.packet import DataUnit, Mac48Address, MacTag
from core.models.scheduling_object import SchedulingCandidate, SortCriterion
from scheduler.forward_link.interfaces import (
    BufferStatusProvider,
    DataSourceNegotiator,
    TransmissionSink,
    TxOpportunity,
)


class FakeLlc(BufferStatusProvider, DataSourceNegotiator):
    """按脚本返回候选对象和数据单元的LLC替身

    每个地址的积压按请求字节数取出；starved中的地址协商时不返回数据。
    """

    def __init__(self, own_address: Mac48Address):
        self.own_address = own_address
        self.backlog: Dict[Mac48Address, int] = {}
        self.control: Set[Mac48Address] = set()
        self.starved: Set[Mac48Address] = set()
        self.sort_requests: List[SortCriterion] = []
        self.negotiations: List[Tuple[int, Mac48Address]] = []

    def add(self, address: Mac48Address, size: int, is_control: bool = False) -> None:
        self.backlog[address] = self.backlog.get(address, 0) + size
        if is_control:
            self.control.add(address)

    def get_scheduling_objects(self, sort_criterion: SortCriterion) -> List[SchedulingCandidate]:
        self.sort_requests.append(sort_criterion)
        return [
            SchedulingCandidate(address, size, address in self.control)
            for address, size in self.backlog.items()
            if size > 0
        ]

    def notify_tx_opportunity(self, max_bytes: int, address: Mac48Address) -> TxOpportunity:
        self.negotiations.append((max_bytes, address))
        available = self.backlog.get(address, 0)
        if address in self.starved or available == 0:
            return TxOpportunity(unit=None, bytes_left=available)

        taken = min(max_bytes, available)
        self.backlog[address] = available - taken
        unit = DataUnit(size=taken, mac_tag=MacTag(self.own_address, address))
        return TxOpportunity(unit=unit, bytes_left=self.backlog[address])


class FakeSink(TransmissionSink):
    """记录发送调用的物理层替身"""

    def __init__(self):
        self.sent: List[Tuple[List[DataUnit], int, float]] = []

    def send_frame(self, payload: List[DataUnit], carrier_id: int, duration: float) -> None:
        self.sent.append((payload, carrier_id, duration))


@pytest.fixture
def clock() -> EventScheduler:
    return EventScheduler()


@pytest.fixture
def gw_address() -> Mac48Address:
    return Mac48Address.from_string("00:00:00:00:ff:00")


@pytest.fixture
def ut_addresses() -> List[Mac48Address]:
    return [Mac48Address(value) for value in range(1, 6)]


@pytest.fixture
def fake_llc(gw_address) -> FakeLlc:
    return FakeLlc(gw_address)


@pytest.fixture
def fake_sink() -> FakeSink:
    return FakeSink()


def make_unit(size: int, dest: Optional[Mac48Address] = None,
              source: Optional[Mac48Address] = None) -> DataUnit:
    """构造带MAC标签的数据单元（dest为None时不带标签）"""
    if dest is None:
        return DataUnit(size=size)
    return DataUnit(size=size, mac_tag=MacTag(source or Mac48Address(0xAA), dest))
