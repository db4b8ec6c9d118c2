"""
BBFrame构建策略

根据帧使用模式选择帧长度类型，并构建填充帧（dummy frame）。
"""

from typing import Optional
import logging

from core.models.bb_frame import (
    BbFrame,
    FrameType,
    SHORT_FRAME_LENGTH_BYTES,
    DEFAULT_MODCOD,
    DEFAULT_NORMAL_FRAME_DURATION_SECONDS,
    DEFAULT_SHORT_FRAME_DURATION_SECONDS,
)
from core.models.gw_mac_config import FrameConfigError, FrameUsageMode, GwMacConfig
from core.models.packet import DataUnit, Mac48Address, MacTag

logger = logging.getLogger(__name__)


class InvalidFrameUsageModeError(FrameConfigError):
    """无法识别的帧使用模式（致命配置错误）"""
    pass


class BbFrameBuilder:
    """
    BBFrame构建器

    帧使用模式：
    - SHORT_FRAMES: 总是短帧
    - NORMAL_FRAMES: 总是常规帧
    - SHORT_AND_NORMAL_FRAMES: 待发送字节数不超过短帧容量时用短帧，否则用常规帧

    Attributes:
        usage_mode: 帧使用模式
        mod_cod: 调制编码方式
        control_overhead_bytes: 控制类数据单元的额外计费字节
    """

    def __init__(
        self,
        usage_mode: FrameUsageMode = FrameUsageMode.NORMAL_FRAMES,
        mod_cod: int = DEFAULT_MODCOD,
        control_overhead_bytes: int = 0,
        short_frame_duration_seconds: float = DEFAULT_SHORT_FRAME_DURATION_SECONDS,
        normal_frame_duration_seconds: float = DEFAULT_NORMAL_FRAME_DURATION_SECONDS
    ):
        """
        初始化构建器

        Raises:
            InvalidFrameUsageModeError: 帧使用模式无效
        """
        if not isinstance(usage_mode, FrameUsageMode):
            raise InvalidFrameUsageModeError(f"Invalid BBFrame usage mode: {usage_mode!r}")

        self.usage_mode = usage_mode
        self.mod_cod = mod_cod
        self.control_overhead_bytes = control_overhead_bytes
        self.short_frame_duration_seconds = short_frame_duration_seconds
        self.normal_frame_duration_seconds = normal_frame_duration_seconds

    @classmethod
    def from_config(cls, config: GwMacConfig) -> 'BbFrameBuilder':
        """由网关MAC配置创建构建器"""
        return cls(
            usage_mode=config.bb_frame_usage_mode,
            mod_cod=config.mod_cod,
            control_overhead_bytes=config.control_overhead_bytes,
            short_frame_duration_seconds=config.short_frame_duration_seconds,
            normal_frame_duration_seconds=config.normal_frame_duration_seconds,
        )

    def select_frame_type(self, byte_count: int) -> FrameType:
        """
        根据使用模式选择帧长度类型

        Args:
            byte_count: 待发送字节数（仅作为自适应模式的尺寸参考）

        Returns:
            FrameType: 帧长度类型

        Raises:
            InvalidFrameUsageModeError: 帧使用模式无效
        """
        if self.usage_mode is FrameUsageMode.SHORT_FRAMES:
            return FrameType.SHORT_FRAME
        elif self.usage_mode is FrameUsageMode.NORMAL_FRAMES:
            return FrameType.NORMAL_FRAME
        elif self.usage_mode is FrameUsageMode.SHORT_AND_NORMAL_FRAMES:
            if byte_count > SHORT_FRAME_LENGTH_BYTES:
                return FrameType.NORMAL_FRAME
            return FrameType.SHORT_FRAME
        else:
            raise InvalidFrameUsageModeError(f"Invalid BBFrame usage mode: {self.usage_mode!r}")

    def create_frame(self, byte_count: int, mod_cod: Optional[int] = None) -> BbFrame:
        """
        创建新帧

        Args:
            byte_count: 待发送字节数（尺寸参考）
            mod_cod: 调制编码方式，默认使用构建器配置

        Returns:
            BbFrame: 空帧
        """
        frame_type = self.select_frame_type(byte_count)
        return self._new_frame(frame_type, self.mod_cod if mod_cod is None else mod_cod)

    def create_dummy_frame(self, own_address: Mac48Address) -> BbFrame:
        """
        创建填充帧

        填充帧只包含一个短帧容量大小的数据单元，源地址和目的地址都是本端地址，
        用于在没有待发送数据时保持载波连续发送。

        Args:
            own_address: 本端MAC地址

        Returns:
            BbFrame: 填充帧
        """
        frame = self._new_frame(FrameType.SHORT_FRAME, self.mod_cod)
        dummy_unit = DataUnit(
            size=SHORT_FRAME_LENGTH_BYTES,
            mac_tag=MacTag(source_address=own_address, dest_address=own_address),
            label="dummy",
            metadata={'dummy': True}
        )
        frame.add_transmit_data(dummy_unit, is_control=False)
        return frame

    def _new_frame(self, frame_type: FrameType, mod_cod: int) -> BbFrame:
        duration = (
            self.short_frame_duration_seconds
            if frame_type is FrameType.SHORT_FRAME
            else self.normal_frame_duration_seconds
        )
        return BbFrame(
            mod_cod=mod_cod,
            frame_type=frame_type,
            duration_seconds=duration,
            control_overhead_bytes=self.control_overhead_bytes
        )
