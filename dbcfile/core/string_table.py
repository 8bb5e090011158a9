#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
字符串块管理

提供 StringTable 类，管理 DBC 文件末尾以 NUL 结尾的字符串块。
"""

from typing import Dict

from ..exceptions import CorruptionError, ValueRangeError


class StringTable:
    """
    字符串块

    由连续的 NUL 结尾字符串组成，记录中以字节偏移引用。
    偏移 0 永远是空字符串。

    append() 总是追加新字节，已有字节不会被改写，
    因此更新一条记录的字符串不会影响其他记录。
    intern() 会复用相同字符串的偏移，仅用于写盘前重建字符串块。
    """

    def __init__(self, encoding: str = 'utf-8'):
        self._data = bytearray(b'\0')
        self._encoding = encoding
        self._index: Dict[str, int] = {"": 0}

    @classmethod
    def from_bytes(cls, data: bytes, encoding: str = 'utf-8') -> 'StringTable':
        """
        从字符串块字节构建

        Args:
            data: 原始字符串块
            encoding: 文本编码

        Returns:
            StringTable 实例

        Raises:
            CorruptionError: 字符串块为空、首字节不是 NUL 或未以 NUL 结尾
        """
        if not data:
            raise CorruptionError("字符串块为空: 至少应包含偏移 0 处的空字符串")
        if data[0] != 0:
            raise CorruptionError("字符串块偏移 0 处不是空字符串")
        if data[-1] != 0:
            raise CorruptionError("字符串块未以 NUL 结尾")
        table = cls(encoding)
        table._data = bytearray(data)
        return table

    @property
    def encoding(self) -> str:
        """文本编码"""
        return self._encoding

    def append(self, s: str) -> int:
        """
        追加字符串，返回其偏移

        偏移为追加前的长度，即新字符串第一个字节的位置。

        Raises:
            ValueRangeError: 字符串包含 NUL 或无法编码
        """
        if '\0' in s:
            raise ValueRangeError("string", s, "字符串不能包含 NUL 字符")
        try:
            encoded = s.encode(self._encoding)
        except UnicodeEncodeError as e:
            raise ValueRangeError("string", s, f"无法以 {self._encoding} 编码") from e
        offset = len(self._data)
        self._data += encoded
        self._data.append(0)
        return offset

    def intern(self, s: str) -> int:
        """
        添加字符串，相同字符串复用已有偏移

        空字符串始终返回 0。
        """
        if s in self._index:
            return self._index[s]
        offset = self.append(s)
        self._index[s] = offset
        return offset

    def is_string_start(self, offset: int) -> bool:
        """偏移是否指向某个字符串的起始字节"""
        if offset < 0 or offset >= len(self._data):
            return False
        return offset == 0 or self._data[offset - 1] == 0

    def resolve(self, offset: int) -> str:
        """
        根据偏移获取字符串

        Raises:
            CorruptionError: 偏移越界、不在字符串起始处或内容无法解码
        """
        if not self.is_string_start(offset):
            raise CorruptionError(
                f"无效的字符串偏移 {offset} (字符串块大小 {len(self._data)})"
            )
        end = self._data.index(0, offset)
        try:
            return self._data[offset:end].decode(self._encoding)
        except UnicodeDecodeError as e:
            raise CorruptionError(
                f"偏移 {offset} 处的字符串无法以 {self._encoding} 解码"
            ) from e

    def serialize(self) -> bytes:
        """序列化为字节"""
        return bytes(self._data)

    def size(self) -> int:
        """当前字节长度 (至少为 1)"""
        return len(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __contains__(self, s: str) -> bool:
        """检查字符串是否已被 intern"""
        return s in self._index
