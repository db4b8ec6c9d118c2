"""
网关MAC配置

显式的、构造时验证的前向链路调度配置，可由字典（YAML/JSON配置文件）构建。
"""

from dataclasses import dataclass, asdict
from enum import Enum
from typing import Any, Dict, Type, TypeVar

from .bb_frame import (
    DEFAULT_MODCOD,
    DEFAULT_NORMAL_FRAME_DURATION_SECONDS,
    DEFAULT_SHORT_FRAME_DURATION_SECONDS,
)
from .scheduling_object import SortCriterion


class FrameConfigError(Exception):
    """前向链路调度配置错误（致命，不可恢复）"""
    pass


class FrameUsageMode(Enum):
    """
    BBFrame使用模式

    Attributes:
        SHORT_FRAMES: 只使用短帧
        NORMAL_FRAMES: 只使用常规帧（默认）
        SHORT_AND_NORMAL_FRAMES: 根据待发送字节数自适应选择
    """
    SHORT_FRAMES = "short_frames"
    NORMAL_FRAMES = "normal_frames"
    SHORT_AND_NORMAL_FRAMES = "short_and_normal_frames"


_E = TypeVar('_E', bound=Enum)


def _parse_enum(enum_cls: Type[_E], value: Any, field_name: str) -> _E:
    """按值或名称解析枚举，失败时抛出FrameConfigError"""
    if isinstance(value, enum_cls):
        return value
    if isinstance(value, str):
        text = value.strip()
        for member in enum_cls:
            if text.lower() == member.value or text.upper() == member.name:
                return member
    valid = [m.value for m in enum_cls]
    raise FrameConfigError(f"Invalid {field_name}: {value!r}. Must be one of {valid}")


@dataclass
class GwMacConfig:
    """
    网关MAC（前向链路调度器）配置

    Attributes:
        tx_interval_seconds: 帧发送间隔（秒），默认2ms
        dummy_frame_sending_on: 帧队列为空时是否发送填充帧
        bb_frame_usage_mode: BBFrame使用模式
        scheduling_start_threshold_seconds: 调度轮次开始阈值时间（保留）
        scheduling_stop_threshold_seconds: 调度轮次停止阈值时间（保留）
        sort_criterion: 调度对象排序准则
        mod_cod: 帧使用的调制编码方式
        carrier_id: 前向链路载波ID
        control_overhead_bytes: 控制类数据单元的额外计费字节
        short_frame_duration_seconds: 短帧传输时长（秒）
        normal_frame_duration_seconds: 常规帧传输时长（秒）
    """
    tx_interval_seconds: float = 0.002
    dummy_frame_sending_on: bool = False
    bb_frame_usage_mode: FrameUsageMode = FrameUsageMode.NORMAL_FRAMES
    scheduling_start_threshold_seconds: float = 0.005
    scheduling_stop_threshold_seconds: float = 0.015
    sort_criterion: SortCriterion = SortCriterion.NO_SORT
    mod_cod: int = DEFAULT_MODCOD
    carrier_id: int = 0
    control_overhead_bytes: int = 117
    short_frame_duration_seconds: float = DEFAULT_SHORT_FRAME_DURATION_SECONDS
    normal_frame_duration_seconds: float = DEFAULT_NORMAL_FRAME_DURATION_SECONDS

    def __post_init__(self):
        """验证配置值的有效性"""
        self.bb_frame_usage_mode = _parse_enum(
            FrameUsageMode, self.bb_frame_usage_mode, "bb_frame_usage_mode"
        )
        self.sort_criterion = _parse_enum(
            SortCriterion, self.sort_criterion, "sort_criterion"
        )

        if self.tx_interval_seconds <= 0:
            raise FrameConfigError("tx_interval_seconds must be positive")
        if self.scheduling_start_threshold_seconds < 0:
            raise FrameConfigError("scheduling_start_threshold_seconds must be non-negative")
        if self.scheduling_stop_threshold_seconds < self.scheduling_start_threshold_seconds:
            raise FrameConfigError(
                "scheduling_stop_threshold_seconds must not be smaller than "
                "scheduling_start_threshold_seconds"
            )
        if self.mod_cod < 0:
            raise FrameConfigError("mod_cod must be non-negative")
        if self.carrier_id < 0:
            raise FrameConfigError("carrier_id must be non-negative")
        if self.control_overhead_bytes < 0:
            raise FrameConfigError("control_overhead_bytes must be non-negative")
        if self.short_frame_duration_seconds <= 0 or self.normal_frame_duration_seconds <= 0:
            raise FrameConfigError("frame durations must be positive")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'GwMacConfig':
        """
        从字典构建配置

        Args:
            data: 配置字典，未知字段会被拒绝

        Returns:
            GwMacConfig: 配置对象

        Raises:
            FrameConfigError: 未知字段或无效值
        """
        known = set(cls.__dataclass_fields__)
        unknown = set(data) - known
        if unknown:
            raise FrameConfigError(f"Unknown gw_mac config fields: {sorted(unknown)}")
        return cls(**data)

    def to_dict(self) -> Dict[str, Any]:
        result = asdict(self)
        result['bb_frame_usage_mode'] = self.bb_frame_usage_mode.value
        result['sort_criterion'] = self.sort_criterion.value
        return result
