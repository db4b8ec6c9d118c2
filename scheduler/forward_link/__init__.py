"""
前向链路调度器子模块

- interfaces.py: 协作方接口 (BufferStatusProvider, DataSourceNegotiator, TransmissionSink)
- frame_builder.py: BbFrameBuilder 帧长度选择和填充帧
- gw_mac_scheduler.py: GwMacScheduler 周期调度和贪心装箱
"""

from .interfaces import (
    BufferStatusProvider,
    DataSourceNegotiator,
    TransmissionSink,
    TxOpportunity,
)
from .frame_builder import BbFrameBuilder, InvalidFrameUsageModeError
from .gw_mac_scheduler import (
    GwMacScheduler,
    GwMacStatistics,
    FramePackingResult,
    MacTagMissingError,
    CONTROL_MIN_REQUIRED_BYTES,
    DATA_MIN_REQUIRED_BYTES,
    TX_OPPORTUNITY_MARGIN_BYTES,
)

__all__ = [
    'BufferStatusProvider',
    'DataSourceNegotiator',
    'TransmissionSink',
    'TxOpportunity',
    'BbFrameBuilder',
    'InvalidFrameUsageModeError',
    'GwMacScheduler',
    'GwMacStatistics',
    'FramePackingResult',
    'MacTagMissingError',
    'CONTROL_MIN_REQUIRED_BYTES',
    'DATA_MIN_REQUIRED_BYTES',
    'TX_OPPORTUNITY_MARGIN_BYTES',
]
