"""
前向链路端到端集成测试

业务源 -> LLC缓存 -> 网关MAC调度 -> 发送记录 -> 终端侧接收 -> 指标
"""

import pytest

from core.models.bb_frame import FrameType
from core.models.gw_mac_config import FrameUsageMode, GwMacConfig
from core.models.packet import Mac48Address
from core.models.scheduling_object import SortCriterion
from core.network.id_mapper import AddressRegistry
from scheduler.forward_link.gw_mac_scheduler import GwMacScheduler
from simulator.forward_link_simulation import ForwardLinkSimulation
from simulator.llc_buffer_model import LlcBufferModel
from simulator.traffic_generator import CbrTrafficConfig, CbrTrafficSource
from simulator.transmission_recorder import FrameTraceCollector, TransmissionRecorder


def _scenario(**gw_mac):
    return {
        "gw_mac": gw_mac,
        "gateway": {"address": "00:00:00:00:ff:00", "gw_id": 0},
        "terminals": [
            {"address": "00:00:00:00:00:01", "beam_id": 1,
             "traffic": {"packet_size_bytes": 1500, "interval_seconds": 0.001}},
            {"address": "00:00:00:00:00:02", "beam_id": 2,
             "traffic": {"packet_size_bytes": 64, "interval_seconds": 0.005, "is_control": True}},
            {"address": "00:00:00:00:00:03", "beam_id": 3},
        ],
        "simulation": {"seed": 3},
    }


class TestForwardLinkSimulation:
    """测试由场景配置装配的仿真"""

    @pytest.mark.parametrize("mode", [m.value for m in FrameUsageMode])
    @pytest.mark.parametrize("criterion", [c.value for c in SortCriterion])
    def test_all_traffic_is_delivered(self, mode, criterion):
        """入队、发送、排队和缓存中的字节守恒，帧不超容量"""
        simulation = ForwardLinkSimulation.from_config(
            _scenario(bb_frame_usage_mode=mode, sort_criterion=criterion)
        )

        report = simulation.run(0.05)

        assert report.bytes_enqueued == report.bytes_dequeued + report.bytes_still_buffered
        assert report.bytes_dequeued > 0
        # 仿真结束时队列中尚未发送的帧
        queued = sum(f.get_packed_bytes() for f in simulation.mac.peek_frames())
        assert simulation.recorder.total_bytes() + queued == report.bytes_dequeued
        assert report.metrics.payload_bytes == simulation.recorder.total_bytes()
        assert report.mac_statistics["bytes_unclaimed"] == 0

        for record in simulation.frame_trace.records:
            assert record.packed_bytes <= record.capacity_bytes

    def test_registry_populated(self):
        simulation = ForwardLinkSimulation.from_config(_scenario())
        gw = Mac48Address.from_string("00:00:00:00:ff:00")
        ut3 = Mac48Address.from_string("00:00:00:00:00:03")

        assert simulation.registry.lookup_gw_id(gw) == 0
        assert simulation.registry.lookup_trace_id(gw) == 0
        assert simulation.registry.lookup_beam_id(ut3) == 3
        assert simulation.registry.lookup_ut_id(ut3) == 2

    def test_dummy_frames_fill_idle_ticks(self):
        scenario = _scenario(dummy_frame_sending_on=True)
        scenario["terminals"] = []
        simulation = ForwardLinkSimulation.from_config(scenario)

        report = simulation.run(0.0201)

        assert report.metrics.frame_count == 10
        assert report.metrics.dummy_frame_count == 10
        assert report.metrics.payload_bytes == 0

    def test_ticks_follow_interval(self):
        simulation = ForwardLinkSimulation.from_config(
            _scenario(tx_interval_seconds=0.004, dummy_frame_sending_on=True)
        )

        simulation.run(0.0401)

        times = [r.time for r in simulation.recorder.records]
        assert len(times) == 10
        assert times[0] == pytest.approx(0.004)
        for earlier, later in zip(times, times[1:]):
            assert later - earlier == pytest.approx(0.004)

    def test_nonpositive_duration(self):
        simulation = ForwardLinkSimulation.from_config(_scenario())

        with pytest.raises(ValueError):
            simulation.run(0)


class TestGatewayToTerminal:
    """测试网关发送、终端侧MAC接收过滤"""

    def test_terminal_receives_only_its_units(self, clock):
        registry = AddressRegistry()
        gw = Mac48Address.from_string("00:00:00:00:ff:00")
        ut1 = Mac48Address(1)
        ut2 = Mac48Address(2)

        llc = LlcBufferModel(clock, gw, registry=registry)
        recorder = TransmissionRecorder(clock)
        trace = FrameTraceCollector(clock)
        gw_mac = GwMacScheduler(
            clock, gw, recorder, llc,
            GwMacConfig(bb_frame_usage_mode=FrameUsageMode.SHORT_AND_NORMAL_FRAMES)
        )
        gw_mac.set_sched_context_callback(llc)
        gw_mac.tx_trace = trace

        # 终端侧MAC只用到接收路径
        ut1_mac = GwMacScheduler(clock, ut1, recorder, llc)
        received = []
        ut1_mac.set_receive_callback(lambda unit, source: received.append((unit.size, source)))
        recorder.listeners.append(ut1_mac.receive)

        CbrTrafficSource(clock, llc, ut1, CbrTrafficConfig(packet_size_bytes=700, interval_seconds=0.002)).start()
        CbrTrafficSource(clock, llc, ut2, CbrTrafficConfig(packet_size_bytes=300, interval_seconds=0.002)).start()
        gw_mac.start_scheduling()

        clock.run(until=0.0201)

        assert received
        assert all(source == gw for _, source in received)
        assert sum(size for size, _ in received) == sum(
            u.size for r in recorder.records for u in r.units if u.dest_address == ut1
        )
        assert ut1_mac.statistics.units_received > ut1_mac.statistics.units_delivered
        assert all(r.frame_type is FrameType.SHORT_FRAME for r in trace.records)
        assert registry.lookup_ut_id(ut2) == 1
