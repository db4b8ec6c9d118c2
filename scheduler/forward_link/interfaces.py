"""
前向链路调度器的协作接口

MAC调度器通过以下接口与外部协作方交互：
- BufferStatusProvider: LLC缓存状态（提供每轮的调度候选对象）
- DataSourceNegotiator: LLC发送机会协商（按字节预算取出数据单元）
- TransmissionSink: 物理层发送
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional

from core.models.packet import DataUnit, Mac48Address
from core.models.scheduling_object import SchedulingCandidate, SortCriterion


@dataclass(frozen=True)
class TxOpportunity:
    """
    发送机会协商结果

    Attributes:
        unit: 取出的数据单元，None表示本次没有数据（正常结果）
        bytes_left: 协商后该终端剩余的缓存字节数
    """
    unit: Optional[DataUnit]
    bytes_left: int


class BufferStatusProvider(ABC):
    """缓存状态提供方"""

    @abstractmethod
    def get_scheduling_objects(self, sort_criterion: SortCriterion) -> List[SchedulingCandidate]:
        """
        获取本轮调度候选对象

        Args:
            sort_criterion: 排序准则（比较规则由提供方实现）

        Returns:
            按准则排序的候选对象列表
        """


class DataSourceNegotiator(ABC):
    """数据源协商方"""

    @abstractmethod
    def notify_tx_opportunity(self, max_bytes: int, address: Mac48Address) -> TxOpportunity:
        """
        通知发送机会

        Args:
            max_bytes: 本次最多可取出的字节数（大于0）
            address: 目的终端地址

        Returns:
            TxOpportunity: 数据单元（可能为None）及剩余缓存字节数
        """


class TransmissionSink(ABC):
    """帧发送方（物理层）"""

    @abstractmethod
    def send_frame(self, payload: List[DataUnit], carrier_id: int, duration: float) -> None:
        """
        发送一帧

        Args:
            payload: 帧内数据单元
            carrier_id: 载波ID
            duration: 帧传输时长（秒）
        """
