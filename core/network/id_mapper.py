"""
地址-ID映射注册表

维护MAC地址与四类ID之间的双向映射：
- trace ID: 首次注册时自动分配，重复注册无效果
- UT ID（终端）: 首次注册时自动分配，重复注册无效果
- beam ID（波束）: 由调用方指定，每次注册覆盖旧映射
- GW ID（网关）: 由调用方指定，每次注册覆盖旧映射

各命名空间相互独立，同一地址在不同命名空间中可对应无关的ID。
查询未注册的地址或ID返回None，这是正常结果而非错误。
"""

from typing import Dict, Generic, Hashable, Iterator, List, Optional, Tuple, TypeVar
import logging

logger = logging.getLogger(__name__)

A = TypeVar('A', bound=Hashable)

NOT_FOUND_TEXT = "N/A"


class _BidirectionalMap(Generic[A]):
    """单个命名空间内的地址 <-> ID 双射"""

    def __init__(self, name: str):
        self.name = name
        self._address_to_id: Dict[A, int] = {}
        self._id_to_address: Dict[int, A] = {}

    def bind(self, address: A, id_: int) -> None:
        """写入映射，清除与之冲突的旧映射以保持双射"""
        old_id = self._address_to_id.pop(address, None)
        if old_id is not None:
            self._id_to_address.pop(old_id, None)

        old_address = self._id_to_address.pop(id_, None)
        if old_address is not None and old_address != address:
            self._address_to_id.pop(old_address, None)
            logger.debug("%s ID %d moved from %s to %s", self.name, id_, old_address, address)

        self._address_to_id[address] = id_
        self._id_to_address[id_] = address

    def get_id(self, address: A) -> Optional[int]:
        return self._address_to_id.get(address)

    def get_address(self, id_: int) -> Optional[A]:
        return self._id_to_address.get(id_)

    def items(self) -> Iterator[Tuple[A, int]]:
        return iter(sorted(self._address_to_id.items(), key=lambda item: item[1]))

    def clear(self) -> None:
        self._address_to_id.clear()
        self._id_to_address.clear()

    def __contains__(self, address: object) -> bool:
        return address in self._address_to_id

    def __len__(self) -> int:
        return len(self._address_to_id)


class AddressRegistry(Generic[A]):
    """
    地址-ID注册表

    会话级共享状态：仿真开始时创建，重新初始化时reset()，结束时丢弃。

    Example:
        >>> registry = AddressRegistry()
        >>> registry.attach_to_trace("ut-1")
        0
        >>> registry.attach_to_trace("ut-1")
        0
        >>> registry.attach_to_beam("ut-1", 3)
        >>> registry.lookup_beam_id("ut-1")
        3
    """

    def __init__(self):
        """初始化四个命名空间和两个自增计数器"""
        self._trace = _BidirectionalMap("trace")
        self._terminal = _BidirectionalMap("UT")
        self._beam = _BidirectionalMap("beam")
        self._gateway = _BidirectionalMap("GW")
        self._next_trace_id = 0
        self._next_ut_id = 0

    # ==================== 注册 ====================

    def attach_to_trace(self, address: A) -> int:
        """
        注册地址到trace命名空间

        首次注册分配下一个trace ID；已注册的地址保持原ID不变。

        Args:
            address: 地址

        Returns:
            int: 地址的trace ID
        """
        existing = self._trace.get_id(address)
        if existing is not None:
            return existing

        trace_id = self._next_trace_id
        self._next_trace_id += 1
        self._trace.bind(address, trace_id)
        logger.debug("Attached %s to trace ID %d", address, trace_id)
        return trace_id

    def attach_to_terminal(self, address: A) -> int:
        """
        注册地址到UT命名空间

        首次注册分配下一个UT ID；已注册的地址保持原ID不变。

        Args:
            address: 地址

        Returns:
            int: 地址的UT ID
        """
        existing = self._terminal.get_id(address)
        if existing is not None:
            return existing

        ut_id = self._next_ut_id
        self._next_ut_id += 1
        self._terminal.bind(address, ut_id)
        logger.debug("Attached %s to UT ID %d", address, ut_id)
        return ut_id

    def attach_to_beam(self, address: A, beam_id: int) -> None:
        """
        注册地址到beam命名空间，覆盖该地址已有的映射

        Args:
            address: 地址
            beam_id: 波束ID

        Raises:
            ValueError: ID不是非负整数
        """
        self._check_id(beam_id, "beam")
        self._beam.bind(address, beam_id)
        logger.debug("Attached %s to beam ID %d", address, beam_id)

    def attach_to_gateway(self, address: A, gw_id: int) -> None:
        """
        注册地址到GW命名空间，覆盖该地址已有的映射

        Args:
            address: 地址
            gw_id: 网关ID

        Raises:
            ValueError: ID不是非负整数
        """
        self._check_id(gw_id, "GW")
        self._gateway.bind(address, gw_id)
        logger.debug("Attached %s to GW ID %d", address, gw_id)

    @staticmethod
    def _check_id(id_: int, namespace: str) -> None:
        if isinstance(id_, bool) or not isinstance(id_, int) or id_ < 0:
            raise ValueError(f"{namespace} ID must be a non-negative integer, got {id_!r}")

    # ==================== 查询：地址 -> ID ====================

    def lookup_trace_id(self, address: A) -> Optional[int]:
        return self._trace.get_id(address)

    def lookup_ut_id(self, address: A) -> Optional[int]:
        return self._terminal.get_id(address)

    def lookup_beam_id(self, address: A) -> Optional[int]:
        return self._beam.get_id(address)

    def lookup_gw_id(self, address: A) -> Optional[int]:
        return self._gateway.get_id(address)

    # ==================== 查询：ID -> 地址 ====================

    def lookup_address_by_trace_id(self, trace_id: int) -> Optional[A]:
        return self._trace.get_address(trace_id)

    def lookup_address_by_ut_id(self, ut_id: int) -> Optional[A]:
        return self._terminal.get_address(ut_id)

    def lookup_address_by_beam_id(self, beam_id: int) -> Optional[A]:
        return self._beam.get_address(beam_id)

    def lookup_address_by_gw_id(self, gw_id: int) -> Optional[A]:
        return self._gateway.get_address(gw_id)

    # ==================== 诊断输出 ====================

    def _namespaces(self) -> List[_BidirectionalMap[A]]:
        return [self._trace, self._terminal, self._beam, self._gateway]

    def describe_address(self, address: A) -> str:
        """
        获取地址在所有命名空间中的ID信息

        Args:
            address: 地址

        Returns:
            str: 形如 ``(MAC: 00:00:00:00:00:01 trace ID: 0 UT ID: 0 beam ID: N/A GW ID: N/A)``
        """
        parts = [f"MAC: {address}"]
        for namespace in self._namespaces():
            id_ = namespace.get_id(address)
            parts.append(f"{namespace.name} ID: {NOT_FOUND_TEXT if id_ is None else id_}")
        return "(" + " ".join(parts) + ")"

    def dump_all(self) -> str:
        """输出所有命名空间的完整映射表"""
        lines = []
        for namespace in self._namespaces():
            lines.append(f"{namespace.name} ID map ({len(namespace)} entries)")
            for address, id_ in namespace.items():
                lines.append(f"  {namespace.name} ID: {id_} <-> MAC: {address}")
        return "\n".join(lines)

    def print_maps(self) -> None:
        """将映射表写入日志"""
        logger.info("Address registry:\n%s", self.dump_all())

    # ==================== 生命周期 ====================

    def reset(self) -> None:
        """清空所有命名空间并将计数器归零"""
        for namespace in self._namespaces():
            namespace.clear()
        self._next_trace_id = 0
        self._next_ut_id = 0

    @property
    def next_trace_id(self) -> int:
        return self._next_trace_id

    @property
    def next_ut_id(self) -> int:
        return self._next_ut_id
