"""
MAC层数据单元模型

定义前向链路调度使用的地址和数据单元：
- Mac48Address: 48位MAC地址（支持广播地址和顺序分配）
- MacTag: MAC标签（源地址、目的地址）
- DataUnit: 打包进BBFrame的数据单元
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional
import itertools


_ADDRESS_BYTES = 6
_BROADCAST_VALUE = (1 << 48) - 1


@dataclass(frozen=True, order=True)
class Mac48Address:
    """
    48位MAC地址

    以整数形式保存，字符串形式为 ``aa:bb:cc:dd:ee:ff``。

    Attributes:
        value: 地址数值 (0 ~ 2^48-1)
    """
    value: int

    # 顺序分配计数器（类级别，跨实例共享）
    _allocation_counter = itertools.count(1)

    def __post_init__(self):
        """验证地址范围"""
        if not isinstance(self.value, int) or not 0 <= self.value <= _BROADCAST_VALUE:
            raise ValueError(f"MAC address value out of range: {self.value!r}")

    @classmethod
    def from_string(cls, text: str) -> 'Mac48Address':
        """
        从字符串解析MAC地址

        Args:
            text: 形如 ``00:00:00:00:00:01`` 的地址字符串

        Returns:
            Mac48Address: 解析后的地址

        Raises:
            ValueError: 格式错误
        """
        parts = text.strip().split(':')
        if len(parts) != _ADDRESS_BYTES:
            raise ValueError(f"Invalid MAC address: {text!r}")
        try:
            octets = [int(p, 16) for p in parts]
        except ValueError:
            raise ValueError(f"Invalid MAC address: {text!r}")
        if any(not 0 <= o <= 0xFF for o in octets):
            raise ValueError(f"Invalid MAC address: {text!r}")

        value = 0
        for octet in octets:
            value = (value << 8) | octet
        return cls(value)

    @classmethod
    def broadcast(cls) -> 'Mac48Address':
        """广播地址 ff:ff:ff:ff:ff:ff"""
        return cls(_BROADCAST_VALUE)

    @classmethod
    def allocate(cls) -> 'Mac48Address':
        """分配下一个未使用的单播地址"""
        return cls(next(cls._allocation_counter))

    def is_broadcast(self) -> bool:
        return self.value == _BROADCAST_VALUE

    def __str__(self) -> str:
        octets = self.value.to_bytes(_ADDRESS_BYTES, 'big')
        return ':'.join(f"{o:02x}" for o in octets)


@dataclass(frozen=True)
class MacTag:
    """MAC标签（数据单元的源/目的地址）"""
    source_address: Mac48Address
    dest_address: Mac48Address


@dataclass
class DataUnit:
    """
    数据单元（一个打包进帧的分段）

    Attributes:
        size: 字节数
        mac_tag: MAC标签，接收侧处理时必须存在
        label: 标识（调试用，如来源流ID）
        metadata: 附加信息
    """
    size: int
    mac_tag: Optional[MacTag] = None
    label: str = ""
    metadata: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if self.size < 0:
            raise ValueError(f"DataUnit size must be non-negative, got {self.size}")

    @property
    def dest_address(self) -> Optional[Mac48Address]:
        return self.mac_tag.dest_address if self.mac_tag else None

    @property
    def source_address(self) -> Optional[Mac48Address]:
        return self.mac_tag.source_address if self.mac_tag else None
