#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
StringTable 测试

测试字符串块的追加、解析、去重与序列化。
"""

import pytest

from dbcfile.core.string_table import StringTable
from dbcfile.exceptions import CorruptionError, ValueRangeError


class TestStringTableBasic:
    """StringTable 基础功能测试"""

    def test_fresh_table(self):
        """新表只有偏移 0 处的空字符串"""
        table = StringTable()
        assert table.size() == 1
        assert len(table) == 1
        assert table.serialize() == b'\0'
        assert table.resolve(0) == ""

    def test_append_returns_previous_length(self):
        """追加返回追加前的长度"""
        table = StringTable()
        assert table.append("Hello") == 1
        assert table.append("World") == 7
        assert table.size() == 13
        assert table.resolve(1) == "Hello"
        assert table.resolve(7) == "World"

    def test_append_empty_string(self):
        """空字符串也会分配新偏移"""
        table = StringTable()
        offset = table.append("")
        assert offset == 1
        assert table.resolve(offset) == ""

    def test_append_never_rewrites(self):
        """追加不会改写已有字节"""
        table = StringTable()
        table.append("first")
        before = table.serialize()
        table.append("second")
        assert table.serialize().startswith(before)

    def test_unicode(self):
        """UTF-8 多字节字符"""
        table = StringTable()
        offset = table.append("剑 Épée")
        assert table.resolve(offset) == "剑 Épée"
        assert table.size() == 1 + len("剑 Épée".encode('utf-8')) + 1

    def test_custom_encoding(self):
        """自定义编码"""
        table = StringTable(encoding='latin-1')
        offset = table.append("Épée")
        assert table.size() == 1 + 4 + 1
        assert table.resolve(offset) == "Épée"

    @pytest.mark.parametrize("value", ["a\0b", "\0"])
    def test_append_nul(self, value):
        """包含 NUL 的字符串"""
        table = StringTable()
        with pytest.raises(ValueRangeError):
            table.append(value)
        assert table.size() == 1


class TestStringTableIntern:
    """intern 去重测试"""

    def test_dedup(self):
        """相同字符串复用偏移"""
        table = StringTable()
        a = table.intern("A")
        b = table.intern("B")
        assert table.intern("A") == a
        assert a != b
        assert table.serialize() == b'\0A\0B\0'

    def test_empty_is_zero(self):
        """空字符串始终是 0"""
        table = StringTable()
        assert table.intern("") == 0
        assert table.size() == 1

    def test_contains(self):
        """只记录 intern 过的字符串"""
        table = StringTable()
        table.intern("A")
        table.append("B")
        assert "A" in table
        assert "" in table
        assert "B" not in table


class TestStringTableResolve:
    """resolve 测试"""

    @pytest.fixture
    def table(self):
        return StringTable.from_bytes(b'\0abc\0de\0')

    def test_valid_offsets(self, table):
        assert table.resolve(0) == ""
        assert table.resolve(1) == "abc"
        assert table.resolve(5) == "de"

    @pytest.mark.parametrize("offset", [2, 3, 6, 8, 100, -1])
    def test_invalid_offsets(self, table, offset):
        """不在字符串起始处或越界"""
        assert not table.is_string_start(offset)
        with pytest.raises(CorruptionError):
            table.resolve(offset)

    def test_nul_terminator_is_empty_string_start(self):
        """紧跟 NUL 的 NUL 是一个空字符串的起点"""
        table = StringTable.from_bytes(b'\0a\0\0')
        assert table.resolve(3) == ""

    def test_undecodable(self):
        """无法解码的字节"""
        table = StringTable.from_bytes(b'\0\xff\xfe\0')
        with pytest.raises(CorruptionError):
            table.resolve(1)


class TestStringTableFromBytes:
    """from_bytes 测试"""

    def test_roundtrip(self):
        data = b'\0Sword.mdx\0INV_Sword_01\0'
        assert StringTable.from_bytes(data).serialize() == data

    @pytest.mark.parametrize("data", [b'', b'abc\0', b'\0abc'])
    def test_invalid_block(self, data):
        """空块、首字节不是 NUL、未以 NUL 结尾"""
        with pytest.raises(CorruptionError):
            StringTable.from_bytes(data)

    def test_append_after_load(self):
        """加载后追加在末尾"""
        table = StringTable.from_bytes(b'\0abc\0')
        assert table.append("x") == 5
