"""
动态调度模块

包含离散事件循环（虚拟时钟 + 可取消的定时任务）
"""

from .event_loop import EventId, EventScheduler

__all__ = [
    'EventId',
    'EventScheduler',
]
