"""
MAC地址和数据单元模型测试
"""

import pytest

from core.models.packet import DataUnit, Mac48Address, MacTag


class TestMac48Address:
    """测试MAC地址"""

    def test_from_string_and_str(self):
        address = Mac48Address.from_string("00:00:00:00:01:0A")

        assert address.value == 0x010A
        assert str(address) == "00:00:00:00:01:0a"

    @pytest.mark.parametrize("text", ["", "00:00:00:00:01", "00:00:00:00:00:zz", "00:00:00:00:00:100"])
    def test_from_string_invalid(self, text):
        with pytest.raises(ValueError):
            Mac48Address.from_string(text)

    def test_value_out_of_range(self):
        with pytest.raises(ValueError):
            Mac48Address(1 << 48)
        with pytest.raises(ValueError):
            Mac48Address(-1)

    def test_broadcast(self):
        broadcast = Mac48Address.broadcast()

        assert broadcast.is_broadcast()
        assert str(broadcast) == "ff:ff:ff:ff:ff:ff"
        assert not Mac48Address(1).is_broadcast()

    def test_allocate_returns_distinct_addresses(self):
        first = Mac48Address.allocate()
        second = Mac48Address.allocate()

        assert first != second
        assert second.value == first.value + 1

    def test_hashable_and_ordered(self):
        a = Mac48Address(1)
        b = Mac48Address(2)

        assert {a: "x"}[Mac48Address(1)] == "x"
        assert sorted([b, a]) == [a, b]


class TestDataUnit:
    """测试数据单元"""

    def test_addresses_from_tag(self):
        src = Mac48Address(1)
        dst = Mac48Address(2)
        unit = DataUnit(size=100, mac_tag=MacTag(source_address=src, dest_address=dst))

        assert unit.source_address == src
        assert unit.dest_address == dst

    def test_untagged_unit(self):
        unit = DataUnit(size=100)

        assert unit.mac_tag is None
        assert unit.dest_address is None
        assert unit.source_address is None

    def test_negative_size(self):
        with pytest.raises(ValueError):
            DataUnit(size=-1)
