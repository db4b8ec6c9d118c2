"""
调度对象模型

LLC层在每个调度轮次提供的候选对象，以及候选排序准则。
"""

from dataclasses import dataclass
from enum import Enum

from .packet import Mac48Address


class SortCriterion(Enum):
    """
    调度对象排序准则（比较规则由LLC层实现，MAC层只传递准则）

    Attributes:
        NO_SORT: 不排序，保持LLC提供的顺序
        BUFFERING_DELAY_SORT: 按缓存时延排序
        BUFFERING_LOAD_SORT: 按缓存负载排序
        RANDOM_SORT: 随机排序
        PRIORITY_SORT: 按优先级排序
    """
    NO_SORT = "no_sort"
    BUFFERING_DELAY_SORT = "buffering_delay_sort"
    BUFFERING_LOAD_SORT = "buffering_load_sort"
    RANDOM_SORT = "random_sort"
    PRIORITY_SORT = "priority_sort"


@dataclass(frozen=True)
class SchedulingCandidate:
    """
    调度候选对象（单个终端在一个调度轮次内的待发送积压）

    Attributes:
        mac_address: 终端地址
        buffered_bytes: 缓存字节数
        is_control: 是否控制类数据
    """
    mac_address: Mac48Address
    buffered_bytes: int
    is_control: bool = False

    def __post_init__(self):
        if self.buffered_bytes < 0:
            raise ValueError(
                f"buffered_bytes must be non-negative, got {self.buffered_bytes}"
            )
