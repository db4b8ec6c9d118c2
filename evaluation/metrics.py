"""
前向链路性能指标计算模块

根据MAC发送轨迹计算帧利用率等指标
"""

from typing import List, Dict, Any, Optional
from dataclasses import dataclass
import numpy as np

from core.models.bb_frame import FrameType
from simulator.transmission_recorder import FrameTraceRecord


@dataclass
class FrameMetrics:
    """
    前向链路性能指标数据类

    Attributes:
        frame_count: 发送帧数（含填充帧）
        dummy_frame_count: 填充帧数
        short_frame_count: 短帧数（不含填充帧）
        normal_frame_count: 常规帧数
        unit_count: 数据单元数（不含填充帧）
        payload_bytes: 数据字节数（不含填充帧）
        mean_fill_ratio: 数据帧平均填充率 (0-1)
        min_fill_ratio: 数据帧最小填充率 (0-1)
        airtime_utilization: 数据帧占用时长 / 仿真时长 (0-1)
        throughput_bps: 数据吞吐量 (bit/s)
    """
    frame_count: int = 0
    dummy_frame_count: int = 0
    short_frame_count: int = 0
    normal_frame_count: int = 0
    unit_count: int = 0
    payload_bytes: int = 0
    mean_fill_ratio: float = 0.0
    min_fill_ratio: float = 0.0
    airtime_utilization: float = 0.0
    throughput_bps: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        """转换为字典"""
        return {
            'frame_count': self.frame_count,
            'dummy_frame_count': self.dummy_frame_count,
            'short_frame_count': self.short_frame_count,
            'normal_frame_count': self.normal_frame_count,
            'unit_count': self.unit_count,
            'payload_bytes': self.payload_bytes,
            'mean_fill_ratio': self.mean_fill_ratio,
            'min_fill_ratio': self.min_fill_ratio,
            'airtime_utilization': self.airtime_utilization,
            'throughput_bps': self.throughput_bps,
        }

    def __str__(self) -> str:
        """字符串表示"""
        return (
            f"FrameMetrics(\n"
            f"  发送帧数: {self.frame_count} (填充帧 {self.dummy_frame_count})\n"
            f"  短帧/常规帧: {self.short_frame_count}/{self.normal_frame_count}\n"
            f"  数据字节: {self.payload_bytes}\n"
            f"  平均填充率: {self.mean_fill_ratio:.2%}\n"
            f"  最小填充率: {self.min_fill_ratio:.2%}\n"
            f"  空口占用率: {self.airtime_utilization:.2%}\n"
            f"  吞吐量: {self.throughput_bps / 1e6:.3f} Mbit/s\n"
            f")"
        )


class FrameMetricsCalculator:
    """前向链路性能指标计算器"""

    def __init__(self, elapsed_seconds: float):
        """
        初始化

        Args:
            elapsed_seconds: 仿真时长（秒）

        Raises:
            ValueError: 仿真时长不为正
        """
        if elapsed_seconds <= 0:
            raise ValueError("elapsed_seconds must be positive")
        self.elapsed_seconds = elapsed_seconds

    def calculate_all(self, records: List[FrameTraceRecord]) -> FrameMetrics:
        """
        计算所有性能指标

        Args:
            records: 帧发送轨迹

        Returns:
            FrameMetrics: 性能指标
        """
        metrics = FrameMetrics()
        metrics.frame_count = len(records)

        data_records = [r for r in records if not r.is_dummy]
        metrics.dummy_frame_count = metrics.frame_count - len(data_records)
        metrics.short_frame_count = sum(
            1 for r in data_records if r.frame_type is FrameType.SHORT_FRAME
        )
        metrics.normal_frame_count = len(data_records) - metrics.short_frame_count
        metrics.unit_count = sum(r.unit_count for r in data_records)
        metrics.payload_bytes = sum(r.packed_bytes for r in data_records)

        fill_ratios = self._fill_ratios(data_records)
        if fill_ratios is not None:
            metrics.mean_fill_ratio = float(np.mean(fill_ratios))
            metrics.min_fill_ratio = float(np.min(fill_ratios))

        airtime = float(np.sum([r.duration for r in data_records])) if data_records else 0.0
        metrics.airtime_utilization = min(airtime / self.elapsed_seconds, 1.0)
        metrics.throughput_bps = metrics.payload_bytes * 8 / self.elapsed_seconds

        return metrics

    @staticmethod
    def _fill_ratios(records: List[FrameTraceRecord]) -> Optional[np.ndarray]:
        """数据帧填充率数组"""
        if not records:
            return None
        packed = np.array([r.packed_bytes for r in records], dtype=float)
        capacity = np.array([r.capacity_bytes for r in records], dtype=float)
        return packed / capacity
