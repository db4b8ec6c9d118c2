"""
恒定比特率（CBR）业务源

按固定间隔向LLC缓存写入固定大小的SDU，驱动前向链路仿真。
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from core.dynamic_scheduler.event_loop import EventId, EventScheduler
from core.models.packet import Mac48Address

from .llc_buffer_model import LlcBufferModel


@dataclass
class CbrTrafficConfig:
    """
    CBR业务配置

    Attributes:
        packet_size_bytes: SDU大小（字节）
        interval_seconds: 发包间隔（秒）
        start_seconds: 首包时间（秒）
        is_control: 是否控制类业务
        priority: 调度优先级（越小越优先）
    """
    packet_size_bytes: int = 512
    interval_seconds: float = 0.001
    start_seconds: float = 0.0
    is_control: bool = False
    priority: int = 0

    def __post_init__(self):
        """验证配置"""
        if self.packet_size_bytes <= 0:
            raise ValueError("packet_size_bytes must be positive")
        if self.interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        if self.start_seconds < 0:
            raise ValueError("start_seconds must be non-negative")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'CbrTrafficConfig':
        return cls(
            packet_size_bytes=int(data.get('packet_size_bytes', 512)),
            interval_seconds=float(data.get('interval_seconds', 0.001)),
            start_seconds=float(data.get('start_seconds', 0.0)),
            is_control=bool(data.get('is_control', False)),
            priority=int(data.get('priority', 0)),
        )


class CbrTrafficSource:
    """CBR业务源：周期性地向一个目的终端写入SDU"""

    def __init__(
        self,
        event_scheduler: EventScheduler,
        llc: LlcBufferModel,
        destination: Mac48Address,
        config: Optional[CbrTrafficConfig] = None
    ):
        self.event_scheduler = event_scheduler
        self.llc = llc
        self.destination = destination
        self.config = config or CbrTrafficConfig()
        self.packets_sent = 0
        self._pending: Optional[EventId] = None

        self.llc.add_destination(destination, self.config.is_control, self.config.priority)

    def start(self) -> None:
        if self._pending is None:
            self._pending = self.event_scheduler.schedule(self.config.start_seconds, self._send)

    def stop(self) -> None:
        self.event_scheduler.cancel(self._pending)
        self._pending = None

    def _send(self) -> None:
        self.packets_sent += 1
        self.llc.enqueue(
            self.destination,
            self.config.packet_size_bytes,
            label=f"{self.destination}#{self.packets_sent}"
        )
        self._pending = self.event_scheduler.schedule(self.config.interval_seconds, self._send)
