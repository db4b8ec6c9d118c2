"""
Transmission recording for forward link simulation.

- TransmissionRecorder: transmission sink keeping every sent frame payload
- FrameTraceCollector: MAC tx trace hook keeping per-frame capacity usage
"""
from dataclasses import dataclass, field
from typing import Callable, List
import logging

from core.dynamic_scheduler.event_loop import EventScheduler
from core.models.bb_frame import BbFrame, FrameType
from core.models.packet import DataUnit
from scheduler.forward_link.interfaces import TransmissionSink

logger = logging.getLogger(__name__)


@dataclass
class TransmissionRecord:
    """One frame handed to the physical layer"""
    time: float
    carrier_id: int
    duration: float
    units: List[DataUnit] = field(default_factory=list)

    @property
    def total_bytes(self) -> int:
        return sum(unit.size for unit in self.units)


@dataclass
class FrameTraceRecord:
    """Capacity usage of one dispatched frame"""
    time: float
    frame_type: FrameType
    capacity_bytes: int
    packed_bytes: int
    unit_count: int
    duration: float
    is_dummy: bool

    @property
    def fill_ratio(self) -> float:
        return self.packed_bytes / self.capacity_bytes


class TransmissionRecorder(TransmissionSink):
    """Transmission sink recording sent frames

    Listeners receive the payload of every frame, e.g. the receive
    method of a terminal side MAC.
    """

    def __init__(self, event_scheduler: EventScheduler):
        self.event_scheduler = event_scheduler
        self.records: List[TransmissionRecord] = []
        self.listeners: List[Callable[[List[DataUnit]], object]] = []

    def send_frame(self, payload: List[DataUnit], carrier_id: int, duration: float) -> None:
        record = TransmissionRecord(
            time=self.event_scheduler.now,
            carrier_id=carrier_id,
            duration=duration,
            units=list(payload)
        )
        self.records.append(record)
        for listener in self.listeners:
            listener(record.units)

    def total_bytes(self) -> int:
        return sum(record.total_bytes for record in self.records)


class FrameTraceCollector:
    """Callable for GwMacScheduler.tx_trace"""

    def __init__(self, event_scheduler: EventScheduler):
        self.event_scheduler = event_scheduler
        self.records: List[FrameTraceRecord] = []

    def __call__(self, frame: BbFrame, is_dummy: bool) -> None:
        self.records.append(FrameTraceRecord(
            time=self.event_scheduler.now,
            frame_type=frame.frame_type,
            capacity_bytes=frame.capacity_bytes,
            packed_bytes=frame.get_packed_bytes(),
            unit_count=len(frame),
            duration=frame.get_duration(),
            is_dummy=is_dummy
        ))
