"""
离散事件调度器

虚拟时钟 + 任务队列，为MAC层提供"延迟一段时间后再次执行"的调度原语，
使调度器不依赖真实定时器即可测试。

- 事件按触发时间升序执行，相同时间按提交顺序执行
- 每个回调执行完毕后才执行下一个（单线程、协作式）
- 已提交的事件可以取消
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple
import heapq
import itertools
import logging

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EventId:
    """已提交事件的句柄"""
    uid: int
    time: float


@dataclass(order=True)
class _ScheduledEvent:
    time: float
    uid: int
    callback: Callable[..., Any] = field(compare=False)
    args: Tuple[Any, ...] = field(compare=False, default=())


class EventScheduler:
    """
    事件调度器

    Example:
        >>> scheduler = EventScheduler()
        >>> fired = []
        >>> scheduler.schedule(0.002, fired.append, "tick")
        EventId(uid=1, time=0.002)
        >>> scheduler.run()
        1
        >>> fired
        ['tick']
    """

    def __init__(self, start_time: float = 0.0):
        """
        初始化事件调度器

        Args:
            start_time: 虚拟时钟起始时间（秒）
        """
        self._now = start_time
        self._queue: List[_ScheduledEvent] = []
        self._cancelled: Dict[int, bool] = {}
        self._uid_counter = itertools.count(1)
        self._executed_count = 0
        self._stop_requested = False

    @property
    def now(self) -> float:
        """当前虚拟时间（秒）"""
        return self._now

    @property
    def executed_count(self) -> int:
        """已执行事件数"""
        return self._executed_count

    def schedule(self, delay: float, callback: Callable[..., Any], *args: Any) -> EventId:
        """
        在当前时间之后delay秒执行回调

        Args:
            delay: 延迟（秒），不能为负
            callback: 回调函数
            *args: 回调参数

        Returns:
            EventId: 事件句柄，可用于取消

        Raises:
            ValueError: 延迟为负
        """
        if delay < 0:
            raise ValueError(f"Event delay must be non-negative, got {delay}")

        event = _ScheduledEvent(
            time=self._now + delay,
            uid=next(self._uid_counter),
            callback=callback,
            args=args
        )
        heapq.heappush(self._queue, event)
        self._cancelled[event.uid] = False
        return EventId(uid=event.uid, time=event.time)

    def cancel(self, event_id: Optional[EventId]) -> bool:
        """
        取消事件

        Returns:
            bool: 事件处于待执行状态且被取消时返回True
        """
        if event_id is None or event_id.uid not in self._cancelled:
            return False
        if self._cancelled[event_id.uid]:
            return False
        self._cancelled[event_id.uid] = True
        return True

    def is_pending(self, event_id: Optional[EventId]) -> bool:
        """事件是否仍待执行"""
        if event_id is None:
            return False
        return self._cancelled.get(event_id.uid) is False

    def pending_count(self) -> int:
        """待执行（未取消）事件数"""
        return sum(1 for cancelled in self._cancelled.values() if not cancelled)

    def stop(self) -> None:
        """请求run()在当前事件执行完后返回"""
        self._stop_requested = True

    def run(self, until: Optional[float] = None) -> int:
        """
        按时间顺序执行事件

        Args:
            until: 截止时间（秒），触发时间晚于此值的事件保留在队列中；
                为None时执行到队列为空

        Returns:
            int: 本次执行的事件数
        """
        self._stop_requested = False
        executed = 0

        while self._queue and not self._stop_requested:
            event = self._queue[0]
            if until is not None and event.time > until:
                break
            heapq.heappop(self._queue)

            cancelled = self._cancelled.pop(event.uid, True)
            if cancelled:
                continue

            self._now = event.time
            event.callback(*event.args)
            executed += 1
            self._executed_count += 1

        if until is not None and not self._stop_requested and until > self._now:
            self._now = until

        logger.debug("Event loop ran %d events, now=%.6f s", executed, self._now)
        return executed
