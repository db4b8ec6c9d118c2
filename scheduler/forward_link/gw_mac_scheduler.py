"""
网关MAC前向链路调度器

周期性地将各终端的待发送积压聚合进BBFrame：
1. 定时器触发：发送帧队列队首的帧（队列为空且开启填充帧时发送填充帧）
2. 向LLC请求排序后的调度候选对象，用贪心装箱填充帧队列
3. 间隔固定时间后再次触发

由于数据单元的确切大小事先未知，每个数据单元都通过与LLC的发送机会协商取得。
"""

from collections import deque
from dataclasses import dataclass, field
from typing import Any, Callable, Deque, Dict, List, Optional
import logging

from core.dynamic_scheduler.event_loop import EventId, EventScheduler
from core.models.bb_frame import BbFrame
from core.models.gw_mac_config import GwMacConfig
from core.models.packet import DataUnit, Mac48Address
from core.models.scheduling_object import SchedulingCandidate

from .frame_builder import BbFrameBuilder
from .interfaces import BufferStatusProvider, DataSourceNegotiator, TransmissionSink, TxOpportunity

logger = logging.getLogger(__name__)


# 服务一个候选对象所需的最小帧剩余字节数（固定协议开销）
CONTROL_MIN_REQUIRED_BYTES = 500
DATA_MIN_REQUIRED_BYTES = 5

# 请求候选对象全部积压时附加的字节数，少于此值时LLC无法一次取完
TX_OPPORTUNITY_MARGIN_BYTES = 2


class MacTagMissingError(Exception):
    """接收的数据单元缺少MAC标签（致命错误）"""
    pass


@dataclass
class FramePackingResult:
    """
    一次装箱过程的结果

    Attributes:
        frames_built: 放入帧队列的帧数
        initial_demand_bytes: 开始时候选对象积压总和
        bytes_served: 处理掉的积压字节数
        bytes_packed: 打包进帧的数据单元字节数
        bytes_unclaimed: 因协商未取到数据而留在LLC的积压字节数
        negotiations: 发送机会协商次数
        served_addresses: 按处理顺序排列的候选对象地址
    """
    frames_built: int = 0
    initial_demand_bytes: int = 0
    bytes_served: int = 0
    bytes_packed: int = 0
    bytes_unclaimed: int = 0
    negotiations: int = 0
    served_addresses: List[Mac48Address] = field(default_factory=list)


@dataclass
class GwMacStatistics:
    """调度器运行统计"""
    ticks: int = 0
    frames_dispatched: int = 0
    dummy_frames_dispatched: int = 0
    packing_passes: int = 0
    frames_built: int = 0
    bytes_packed: int = 0
    bytes_unclaimed: int = 0
    units_received: int = 0
    units_delivered: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return dict(self.__dict__)


class GwMacScheduler:
    """
    网关MAC前向链路调度器

    单线程、事件驱动：所有操作作为事件调度器的一个回调执行完毕，不需要加锁。
    调度器独占帧队列和装箱过程中的帧。

    Example:
        >>> clock = EventScheduler()
        >>> mac = GwMacScheduler(clock, own_address, sink, llc, GwMacConfig())
        >>> mac.set_sched_context_callback(llc)
        >>> mac.start_scheduling()
        >>> clock.run(until=0.1)
    """

    def __init__(
        self,
        event_scheduler: EventScheduler,
        own_address: Mac48Address,
        transmission_sink: TransmissionSink,
        negotiator: DataSourceNegotiator,
        config: Optional[GwMacConfig] = None,
        frame_builder: Optional[BbFrameBuilder] = None
    ):
        """
        初始化调度器

        Args:
            event_scheduler: 事件调度器（虚拟时钟）
            own_address: 本端MAC地址
            transmission_sink: 帧发送方
            negotiator: 发送机会协商方（LLC）
            config: 配置，默认使用GwMacConfig()
            frame_builder: 帧构建器，默认由配置创建
        """
        self.config = config or GwMacConfig()
        self.event_scheduler = event_scheduler
        self.own_address = own_address
        self.transmission_sink = transmission_sink
        self.negotiator = negotiator
        self.frame_builder = frame_builder or BbFrameBuilder.from_config(self.config)
        self.statistics = GwMacStatistics()

        self.rx_callback: Optional[Callable[[DataUnit, Mac48Address], None]] = None
        self.tx_trace: Optional[Callable[[BbFrame, bool], None]] = None
        self.rx_trace: Optional[Callable[[DataUnit], None]] = None

        self._provider: Optional[BufferStatusProvider] = None
        self._frame_queue: Deque[BbFrame] = deque()
        self._pending_tick: Optional[EventId] = None
        self._running = False

    # ==================== 协作方 ====================

    def set_sched_context_callback(self, provider: Optional[BufferStatusProvider]) -> None:
        """
        设置缓存状态提供方

        可重复设置；设置为None时不再产生候选对象，只会发送填充帧（若开启）。
        """
        logger.debug("Scheduling context provider set to %r", provider)
        self._provider = provider

    def set_receive_callback(self, callback: Optional[Callable[[DataUnit, Mac48Address], None]]) -> None:
        """设置上层接收回调 (unit, source_address)"""
        self.rx_callback = callback

    # ==================== 生命周期 ====================

    @property
    def running(self) -> bool:
        return self._running

    def start_scheduling(self) -> None:
        """
        启动周期调度，首次触发在一个发送间隔之后

        Raises:
            ValueError: 发送间隔不为正
        """
        if self.config.tx_interval_seconds <= 0:
            raise ValueError("tx_interval_seconds must be positive")
        if self._running:
            return

        self._running = True
        self._schedule_next_tick(self.config.carrier_id)
        logger.info(
            "Forward link scheduling started at %s, interval %.6f s",
            self.own_address, self.config.tx_interval_seconds
        )

    def stop_scheduling(self) -> None:
        """停止周期调度，取消待执行的定时器事件"""
        if not self._running:
            return

        self._running = False
        self.event_scheduler.cancel(self._pending_tick)
        self._pending_tick = None
        logger.info("Forward link scheduling stopped at %s", self.own_address)

    def dispose(self) -> None:
        """停止调度并释放协作方引用"""
        self.stop_scheduling()
        self._provider = None
        self.rx_callback = None

    def _schedule_next_tick(self, carrier_id: int) -> None:
        self._pending_tick = self.event_scheduler.schedule(
            self.config.tx_interval_seconds, self.on_timer_tick, carrier_id
        )

    # ==================== 帧队列 ====================

    @property
    def frame_queue_length(self) -> int:
        return len(self._frame_queue)

    def peek_frames(self) -> List[BbFrame]:
        """帧队列快照（队首在前）"""
        return list(self._frame_queue)

    # ==================== 定时发送 ====================

    def on_timer_tick(self, carrier_id: Optional[int] = None) -> Optional[BbFrame]:
        """
        定时器触发

        先发送（队首帧或填充帧），再重新填充帧队列，最后在运行状态下安排下一次触发。

        Args:
            carrier_id: 载波ID，默认使用配置值

        Returns:
            本次发送的帧，没有发送时返回None
        """
        if carrier_id is None:
            carrier_id = self.config.carrier_id

        # 手动触发时撤销已排队的定时事件，保持单一触发链
        self.event_scheduler.cancel(self._pending_tick)
        self._pending_tick = None
        self.statistics.ticks += 1

        frame: Optional[BbFrame] = None
        is_dummy = False
        if self._frame_queue:
            frame = self._frame_queue.popleft()
        elif self.config.dummy_frame_sending_on:
            frame = self.frame_builder.create_dummy_frame(self.own_address)
            is_dummy = True

        if frame is not None:
            self._dispatch(frame, carrier_id, is_dummy)

        self.build_frames()

        if self._running:
            # TODO: schedule the next tick at the end of the transmitted frame once
            # frame duration is derived from the used MODCOD
            self._schedule_next_tick(carrier_id)

        return frame

    def _dispatch(self, frame: BbFrame, carrier_id: int, is_dummy: bool) -> None:
        frame.close()
        self.statistics.frames_dispatched += 1
        if is_dummy:
            self.statistics.dummy_frames_dispatched += 1

        if self.tx_trace is not None:
            self.tx_trace(frame, is_dummy)

        logger.debug(
            "Dispatching %s frame on carrier %d: %d units, %d bytes",
            "dummy" if is_dummy else frame.frame_type.name, carrier_id,
            len(frame), frame.get_packed_bytes()
        )
        self.transmission_sink.send_frame(frame.get_transmit_data(), carrier_id, frame.get_duration())

    # ==================== 装箱 ====================

    @staticmethod
    def _min_required_bytes(candidate: SchedulingCandidate) -> int:
        if candidate.is_control:
            return CONTROL_MIN_REQUIRED_BYTES
        return DATA_MIN_REQUIRED_BYTES

    def build_frames(self) -> FramePackingResult:
        """
        从LLC取得候选对象并贪心装箱，完成的帧追加到帧队列

        对当前候选对象：
        - 帧剩余容量低于其最小需求：关闭当前帧，下一轮使用新帧
        - 积压大于帧剩余容量：按剩余容量协商，关闭当前帧，积压未取完时继续服务该对象
        - 否则：按积压+2字节（不超过帧剩余容量）协商，转到下一个对象；总需求为零时关闭当前帧

        Returns:
            FramePackingResult: 本次装箱结果
        """
        result = FramePackingResult()

        if self._provider is None:
            return result

        candidates = list(self._provider.get_scheduling_objects(self.config.sort_criterion))
        if not candidates:
            return result

        self.statistics.packing_passes += 1

        bytes_to_send = sum(c.buffered_bytes for c in candidates)
        result.initial_demand_bytes = bytes_to_send

        index = 0
        current = candidates[index]
        current_bytes = current.buffered_bytes
        min_required = self._min_required_bytes(current)
        frame: Optional[BbFrame] = None

        while bytes_to_send > 0:
            if current_bytes == 0:
                index += 1
                current = candidates[index]
                current_bytes = current.buffered_bytes
                min_required = self._min_required_bytes(current)
                continue

            if frame is None:
                frame = self.frame_builder.create_frame(bytes_to_send)

            frame_bytes = frame.get_bytes_left()

            if frame_bytes < min_required:
                self._enqueue_frame(frame, result)
                frame = None

            elif current_bytes > frame_bytes:
                opportunity = self._negotiate(frame_bytes, current, result)
                if opportunity.unit is not None:
                    frame.add_transmit_data(opportunity.unit, current.is_control)
                    result.bytes_packed += opportunity.unit.size

                self._enqueue_frame(frame, result)
                frame = None

                bytes_left = min(max(opportunity.bytes_left, 0), current_bytes)
                if opportunity.unit is None or bytes_left == current_bytes:
                    # 协商没有取走数据，该对象剩余积压本轮不再处理
                    logger.warning(
                        "No data for %s with %d bytes of frame space, %d bytes left unclaimed",
                        current.mac_address, frame_bytes, current_bytes
                    )
                    result.bytes_unclaimed += current_bytes
                    bytes_to_send -= current_bytes
                    current_bytes = 0
                else:
                    result.bytes_served += current_bytes - bytes_left
                    bytes_to_send -= current_bytes - bytes_left
                    current_bytes = bytes_left

            else:
                # 余量不能超出帧剩余容量
                opportunity = self._negotiate(
                    min(current_bytes + TX_OPPORTUNITY_MARGIN_BYTES, frame_bytes),
                    current, result
                )
                bytes_left = current_bytes
                if opportunity.unit is not None:
                    frame.add_transmit_data(opportunity.unit, current.is_control)
                    result.bytes_packed += opportunity.unit.size
                    bytes_left = min(max(opportunity.bytes_left, 0), current_bytes)
                else:
                    logger.warning(
                        "No data for %s despite %d buffered bytes, left unclaimed",
                        current.mac_address, current_bytes
                    )

                result.bytes_unclaimed += bytes_left
                result.bytes_served += current_bytes - bytes_left
                bytes_to_send -= current_bytes
                current_bytes = 0

                if bytes_to_send == 0:
                    self._enqueue_frame(frame, result)
                    frame = None

        self.statistics.frames_built += result.frames_built
        self.statistics.bytes_packed += result.bytes_packed
        self.statistics.bytes_unclaimed += result.bytes_unclaimed

        logger.debug(
            "Packing pass: %d candidates, %d bytes demanded, %d served, %d unclaimed, %d frames",
            len(candidates), result.initial_demand_bytes, result.bytes_served,
            result.bytes_unclaimed, result.frames_built
        )
        return result

    def _negotiate(
        self,
        max_bytes: int,
        candidate: SchedulingCandidate,
        result: FramePackingResult
    ) -> TxOpportunity:
        result.negotiations += 1
        if not result.served_addresses or result.served_addresses[-1] != candidate.mac_address:
            result.served_addresses.append(candidate.mac_address)
        return self.negotiator.notify_tx_opportunity(max_bytes, candidate.mac_address)

    def _enqueue_frame(self, frame: BbFrame, result: FramePackingResult) -> None:
        frame.close()
        if frame.is_empty():
            logger.debug("Dropping empty %s frame", frame.frame_type.name)
            return
        self._frame_queue.append(frame)
        result.frames_built += 1

    # ==================== 接收 ====================

    def receive(self, units: List[DataUnit]) -> int:
        """
        处理接收到的数据单元

        目的地址为本端地址或广播地址的数据单元连同源地址交给上层，其余丢弃。

        Args:
            units: 接收到的数据单元

        Returns:
            int: 交给上层的数据单元数

        Raises:
            MacTagMissingError: 数据单元缺少MAC标签
        """
        delivered = 0
        for unit in units:
            self.statistics.units_received += 1
            if self.rx_trace is not None:
                self.rx_trace(unit)

            if unit.mac_tag is None:
                raise MacTagMissingError("MAC tag was not found from the packet!")

            dest_address = unit.mac_tag.dest_address
            logger.debug(
                "Packet from %s to %s, receiver %s",
                unit.mac_tag.source_address, dest_address, self.own_address
            )

            if dest_address == self.own_address or dest_address.is_broadcast():
                if self.rx_callback is not None:
                    self.rx_callback(unit, unit.mac_tag.source_address)
                delivered += 1
                self.statistics.units_delivered += 1
            else:
                logger.debug("Packet intended for others received by MAC: %s", self.own_address)

        return delivered
