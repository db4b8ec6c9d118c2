"""
网络地址模块

- id_mapper.py: MAC地址与trace/UT/beam/GW ID之间的双向映射注册表
"""

from .id_mapper import AddressRegistry

__all__ = [
    'AddressRegistry',
]
