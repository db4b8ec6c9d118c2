"""核心数据模型"""

from .packet import Mac48Address, MacTag, DataUnit
from .bb_frame import (
    BbFrame, FrameType, FrameOverflowError,
    SHORT_FRAME_LENGTH_BYTES, NORMAL_FRAME_LENGTH_BYTES,
)
from .scheduling_object import SchedulingCandidate, SortCriterion
from .gw_mac_config import GwMacConfig, FrameUsageMode, FrameConfigError

__all__ = [
    'Mac48Address', 'MacTag', 'DataUnit',
    'BbFrame', 'FrameType', 'FrameOverflowError',
    'SHORT_FRAME_LENGTH_BYTES', 'NORMAL_FRAME_LENGTH_BYTES',
    'SchedulingCandidate', 'SortCriterion',
    'GwMacConfig', 'FrameUsageMode', 'FrameConfigError',
]
