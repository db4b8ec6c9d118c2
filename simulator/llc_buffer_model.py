"""
Reference LLC buffer model for forward link simulation.

Keeps one FIFO buffer per destination terminal and plays both LLC roles the
gateway MAC scheduler needs:
- buffer status provider: ranked scheduling candidates for a round
- data source negotiator: hands out a data unit that fits a byte budget
"""
from collections import OrderedDict, deque
from dataclasses import dataclass, field
from typing import Deque, Dict, List, Optional
import logging

import numpy as np

from core.dynamic_scheduler.event_loop import EventScheduler
from core.models.packet import DataUnit, Mac48Address, MacTag
from core.models.scheduling_object import SchedulingCandidate, SortCriterion
from core.network.id_mapper import AddressRegistry
from scheduler.forward_link.interfaces import (
    BufferStatusProvider,
    DataSourceNegotiator,
    TxOpportunity,
)

logger = logging.getLogger(__name__)


@dataclass
class _BufferedSdu:
    """Service data unit waiting in a destination buffer"""
    size: int
    enqueue_time: float
    label: str = ""


@dataclass
class DestinationBuffer:
    """Per-destination LLC buffer

    Attributes:
        address: Destination terminal address
        is_control: Whether the buffer carries control traffic
        priority: Scheduling priority, lower value is served first
        sdus: Queued service data units (head first)
    """
    address: Mac48Address
    is_control: bool = False
    priority: int = 0
    sdus: Deque[_BufferedSdu] = field(default_factory=deque)

    @property
    def buffered_bytes(self) -> int:
        return sum(sdu.size for sdu in self.sdus)

    def head_of_line_time(self) -> Optional[float]:
        """Enqueue time of the oldest buffered SDU"""
        return self.sdus[0].enqueue_time if self.sdus else None


class LlcBufferModel(BufferStatusProvider, DataSourceNegotiator):
    """Reference LLC with per-destination buffers

    Sorting criteria:
    - NO_SORT: destination creation order
    - BUFFERING_DELAY_SORT: oldest head-of-line SDU first
    - BUFFERING_LOAD_SORT: most buffered bytes first
    - RANDOM_SORT: random permutation from a seeded numpy generator
    - PRIORITY_SORT: control buffers first, then by ascending priority

    Example:
        llc = LlcBufferModel(clock, gw_address, registry=registry)
        llc.enqueue(ut_address, 1500)
        candidates = llc.get_scheduling_objects(SortCriterion.NO_SORT)
        opportunity = llc.notify_tx_opportunity(8100, ut_address)
    """

    def __init__(
        self,
        event_scheduler: EventScheduler,
        own_address: Mac48Address,
        registry: Optional[AddressRegistry] = None,
        seed: Optional[int] = None
    ):
        """Initialize LLC buffer model

        Args:
            event_scheduler: Event scheduler providing the current time
            own_address: Gateway address used as source of the data units
            registry: Address registry; new destinations are attached on first contact
            seed: Seed for RANDOM_SORT
        """
        self.event_scheduler = event_scheduler
        self.own_address = own_address
        self.registry = registry
        self._rng = np.random.default_rng(seed)
        self._buffers: "OrderedDict[Mac48Address, DestinationBuffer]" = OrderedDict()
        self.bytes_enqueued = 0
        self.bytes_dequeued = 0

    def add_destination(
        self,
        address: Mac48Address,
        is_control: bool = False,
        priority: int = 0
    ) -> DestinationBuffer:
        """Create the buffer of a destination (no-op if it exists)"""
        buffer = self._buffers.get(address)
        if buffer is None:
            buffer = DestinationBuffer(address=address, is_control=is_control, priority=priority)
            self._buffers[address] = buffer
            if self.registry is not None:
                self.registry.attach_to_terminal(address)
                self.registry.attach_to_trace(address)
            logger.debug("New LLC buffer for %s (control=%s)", address, is_control)
        return buffer

    def enqueue(self, address: Mac48Address, size: int, label: str = "") -> None:
        """Buffer an SDU of `size` bytes towards `address`

        Raises:
            ValueError: If size is not positive
        """
        if size <= 0:
            raise ValueError(f"SDU size must be positive, got {size}")

        buffer = self.add_destination(address)
        buffer.sdus.append(_BufferedSdu(size=size, enqueue_time=self.event_scheduler.now, label=label))
        self.bytes_enqueued += size

    def get_buffered_bytes(self, address: Mac48Address) -> int:
        buffer = self._buffers.get(address)
        return buffer.buffered_bytes if buffer else 0

    def get_total_buffered_bytes(self) -> int:
        return sum(buffer.buffered_bytes for buffer in self._buffers.values())

    def get_scheduling_objects(self, sort_criterion: SortCriterion) -> List[SchedulingCandidate]:
        """Ranked candidates for every non-empty buffer"""
        buffers = [b for b in self._buffers.values() if b.sdus]

        if sort_criterion is SortCriterion.BUFFERING_DELAY_SORT:
            buffers.sort(key=lambda b: b.head_of_line_time())
        elif sort_criterion is SortCriterion.BUFFERING_LOAD_SORT:
            buffers.sort(key=lambda b: b.buffered_bytes, reverse=True)
        elif sort_criterion is SortCriterion.RANDOM_SORT:
            buffers = [buffers[i] for i in self._rng.permutation(len(buffers))]
        elif sort_criterion is SortCriterion.PRIORITY_SORT:
            buffers.sort(key=lambda b: (not b.is_control, b.priority))

        return [
            SchedulingCandidate(
                mac_address=b.address,
                buffered_bytes=b.buffered_bytes,
                is_control=b.is_control
            )
            for b in buffers
        ]

    def notify_tx_opportunity(self, max_bytes: int, address: Mac48Address) -> TxOpportunity:
        """Dequeue up to `max_bytes` for `address` as one data unit

        Head SDUs are taken whole while they fit; the last one is segmented.

        Raises:
            ValueError: If max_bytes is not positive
        """
        if max_bytes <= 0:
            raise ValueError(f"Tx opportunity must be positive, got {max_bytes}")

        buffer = self._buffers.get(address)
        if buffer is None or not buffer.sdus:
            return TxOpportunity(unit=None, bytes_left=0)

        taken = 0
        labels = []
        while buffer.sdus and taken < max_bytes:
            head = buffer.sdus[0]
            chunk = min(head.size, max_bytes - taken)
            taken += chunk
            labels.append(head.label)
            if chunk == head.size:
                buffer.sdus.popleft()
            else:
                head.size -= chunk

        self.bytes_dequeued += taken
        unit = DataUnit(
            size=taken,
            mac_tag=MacTag(source_address=self.own_address, dest_address=address),
            label=",".join(label for label in labels if label),
            metadata={'sdu_count': len(labels)}
        )
        return TxOpportunity(unit=unit, bytes_left=buffer.buffered_bytes)
