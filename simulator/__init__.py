"""
前向链路仿真环境

为网关MAC调度器提供LLC缓存、业务源和发送记录
"""

from .llc_buffer_model import LlcBufferModel, DestinationBuffer
from .traffic_generator import CbrTrafficConfig, CbrTrafficSource
from .transmission_recorder import (
    TransmissionRecord,
    TransmissionRecorder,
    FrameTraceRecord,
    FrameTraceCollector,
)

__all__ = [
    'LlcBufferModel',
    'DestinationBuffer',
    'CbrTrafficConfig',
    'CbrTrafficSource',
    'TransmissionRecord',
    'TransmissionRecorder',
    'FrameTraceRecord',
    'FrameTraceCollector',
]
