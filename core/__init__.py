"""
核心模块 - 卫星网关前向链路

包含数据模型、事件循环、地址注册表等核心功能
"""

from .models.packet import Mac48Address, MacTag, DataUnit
from .models.bb_frame import BbFrame, FrameType
from .models.gw_mac_config import GwMacConfig, FrameUsageMode

__all__ = [
    'Mac48Address', 'MacTag', 'DataUnit',
    'BbFrame', 'FrameType',
    'GwMacConfig', 'FrameUsageMode',
]
