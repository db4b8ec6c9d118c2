"""
BBFrame构建器测试
"""

import pytest

from core.models.bb_frame import FrameType
from core.models.gw_mac_config import FrameUsageMode, GwMacConfig
from scheduler.forward_link.frame_builder import BbFrameBuilder, InvalidFrameUsageModeError


class TestFrameTypeSelection:
    """测试帧长度选择"""

    @pytest.mark.parametrize("byte_count", [1, 2025, 100000])
    def test_short_frames_mode(self, byte_count):
        builder = BbFrameBuilder(FrameUsageMode.SHORT_FRAMES)
        assert builder.select_frame_type(byte_count) is FrameType.SHORT_FRAME

    @pytest.mark.parametrize("byte_count", [1, 2025, 100000])
    def test_normal_frames_mode(self, byte_count):
        builder = BbFrameBuilder(FrameUsageMode.NORMAL_FRAMES)
        assert builder.select_frame_type(byte_count) is FrameType.NORMAL_FRAME

    @pytest.mark.parametrize("byte_count,expected", [
        (100, FrameType.SHORT_FRAME),
        (2025, FrameType.SHORT_FRAME),
        (2026, FrameType.NORMAL_FRAME),
        (50000, FrameType.NORMAL_FRAME),
    ])
    def test_adaptive_mode(self, byte_count, expected):
        builder = BbFrameBuilder(FrameUsageMode.SHORT_AND_NORMAL_FRAMES)
        assert builder.select_frame_type(byte_count) is expected

    def test_invalid_mode_is_fatal(self):
        with pytest.raises(InvalidFrameUsageModeError):
            BbFrameBuilder("jumbo_frames")

    def test_mode_corrupted_after_init(self):
        builder = BbFrameBuilder(FrameUsageMode.NORMAL_FRAMES)
        builder.usage_mode = "jumbo_frames"

        with pytest.raises(InvalidFrameUsageModeError):
            builder.create_frame(100)


class TestFrameCreation:
    """测试帧创建"""

    def test_from_config(self):
        config = GwMacConfig(
            bb_frame_usage_mode=FrameUsageMode.SHORT_FRAMES,
            mod_cod=7,
            control_overhead_bytes=20,
            short_frame_duration_seconds=0.0005
        )
        frame = BbFrameBuilder.from_config(config).create_frame(10)

        assert frame.frame_type is FrameType.SHORT_FRAME
        assert frame.mod_cod == 7
        assert frame.control_overhead_bytes == 20
        assert frame.get_duration() == 0.0005

    def test_mod_cod_override(self):
        frame = BbFrameBuilder(mod_cod=3).create_frame(10, mod_cod=9)
        assert frame.mod_cod == 9

    def test_dummy_frame(self, gw_address):
        """填充帧：短帧，一个占满容量的单元，源/目的都是本端地址"""
        frame = BbFrameBuilder(FrameUsageMode.NORMAL_FRAMES).create_dummy_frame(gw_address)

        assert frame.frame_type is FrameType.SHORT_FRAME
        units = frame.get_transmit_data()
        assert len(units) == 1
        assert units[0].size == 2025
        assert units[0].source_address == gw_address
        assert units[0].dest_address == gw_address
        assert units[0].metadata["dummy"] is True
        assert frame.get_bytes_left() == 0
