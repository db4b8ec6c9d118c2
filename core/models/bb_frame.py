"""
BBFrame模型 - 前向链路传输帧

BBFrame是一次发送机会中聚合多个数据单元的容器，容量由帧长度类型决定：
- 短帧 (SHORT):  16200 bits = 2025 Bytes
- 常规帧 (NORMAL): 64800 bits = 8100 Bytes

约束：已打包数据单元大小之和始终不超过帧容量，容量只减不增。
"""

from enum import Enum
from typing import List, Optional

from .packet import DataUnit


SHORT_FRAME_LENGTH_BYTES = 2025
NORMAL_FRAME_LENGTH_BYTES = 8100

DEFAULT_MODCOD = 3

# 默认帧时长（秒），由配置覆盖
DEFAULT_SHORT_FRAME_DURATION_SECONDS = 0.00025
DEFAULT_NORMAL_FRAME_DURATION_SECONDS = 0.001


class FrameOverflowError(Exception):
    """帧容量约束被破坏（数据单元超出剩余容量或帧已关闭）"""
    pass


class FrameType(Enum):
    """
    帧长度类型

    Attributes:
        SHORT_FRAME: 短帧，2025字节
        NORMAL_FRAME: 常规帧，8100字节
    """
    SHORT_FRAME = "short"
    NORMAL_FRAME = "normal"

    @property
    def length_in_bytes(self) -> int:
        """帧字节容量"""
        if self is FrameType.SHORT_FRAME:
            return SHORT_FRAME_LENGTH_BYTES
        return NORMAL_FRAME_LENGTH_BYTES


class BbFrame:
    """
    BBFrame - 容量受限的数据单元容器

    Example:
        >>> frame = BbFrame(mod_cod=3, frame_type=FrameType.SHORT_FRAME)
        >>> frame.add_transmit_data(DataUnit(size=1000), is_control=False)
        1025
        >>> frame.get_bytes_left()
        1025
    """

    def __init__(
        self,
        mod_cod: int = DEFAULT_MODCOD,
        frame_type: FrameType = FrameType.NORMAL_FRAME,
        duration_seconds: Optional[float] = None,
        control_overhead_bytes: int = 0
    ):
        """
        初始化BBFrame

        Args:
            mod_cod: 调制编码方式标识
            frame_type: 帧长度类型
            duration_seconds: 帧传输时长（秒），未指定时使用该类型的默认时长
            control_overhead_bytes: 控制类数据单元的固定额外计费字节

        Raises:
            ValueError: 参数无效
        """
        if not isinstance(frame_type, FrameType):
            raise ValueError(f"Invalid frame type: {frame_type!r}")
        if control_overhead_bytes < 0:
            raise ValueError("control_overhead_bytes must be non-negative")

        if duration_seconds is None:
            duration_seconds = (
                DEFAULT_SHORT_FRAME_DURATION_SECONDS
                if frame_type is FrameType.SHORT_FRAME
                else DEFAULT_NORMAL_FRAME_DURATION_SECONDS
            )

        self.mod_cod = mod_cod
        self.frame_type = frame_type
        self.capacity_bytes = frame_type.length_in_bytes
        self.control_overhead_bytes = control_overhead_bytes
        self._duration_seconds = duration_seconds
        self._free_bytes = self.capacity_bytes
        self._transmit_data: List[DataUnit] = []
        self._closed = False

    def add_transmit_data(self, unit: DataUnit, is_control: bool) -> int:
        """
        向帧中追加数据单元

        数据单元按其大小扣减剩余容量，控制类单元额外扣减固定开销。

        Args:
            unit: 数据单元
            is_control: 是否控制类数据

        Returns:
            int: 追加后的剩余容量，非正值表示帧已满

        Raises:
            FrameOverflowError: 帧已关闭，或数据单元大于剩余容量
        """
        if self._closed:
            raise FrameOverflowError("Cannot add data to a closed frame")
        if unit.size > self._free_bytes:
            raise FrameOverflowError(
                f"Unit of {unit.size} bytes exceeds remaining frame capacity "
                f"({self._free_bytes} of {self.capacity_bytes} bytes)"
            )

        cost = unit.size
        if is_control:
            cost += self.control_overhead_bytes

        self._transmit_data.append(unit)
        self._free_bytes -= cost
        return self._free_bytes

    def get_bytes_left(self) -> int:
        """剩余容量（字节），控制类开销可能使其为负"""
        return self._free_bytes

    def get_duration(self) -> float:
        """帧传输时长（秒）"""
        return self._duration_seconds

    def get_transmit_data(self) -> List[DataUnit]:
        """帧内数据单元（副本）"""
        return list(self._transmit_data)

    def get_packed_bytes(self) -> int:
        """已打包数据单元大小之和"""
        return sum(unit.size for unit in self._transmit_data)

    def get_fill_ratio(self) -> float:
        """填充率 (0-1)"""
        return self.get_packed_bytes() / self.capacity_bytes

    def is_empty(self) -> bool:
        return not self._transmit_data

    def close(self) -> None:
        """关闭帧，之后不可再追加"""
        self._closed = True

    @property
    def closed(self) -> bool:
        return self._closed

    def __len__(self) -> int:
        return len(self._transmit_data)

    def __repr__(self) -> str:
        return (
            f"BbFrame(type={self.frame_type.name}, mod_cod={self.mod_cod}, "
            f"units={len(self._transmit_data)}, bytes_left={self._free_bytes})"
        )
