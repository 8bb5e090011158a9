#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
二进制 I/O 封装

提供 BinaryWriter 和 BinaryReader 类，封装底层读写操作，
使上层模块不需要直接操作文件指针。
"""

from typing import BinaryIO

from ..exceptions import CorruptionError


class BinaryWriter:
    """
    二进制写入器

    记录写入位置，上层模块按区段顺序写入即可。
    """

    def __init__(self, file: BinaryIO):
        """
        初始化写入器

        Args:
            file: 可写的二进制文件对象 (通常是 io.BytesIO)
        """
        self._file = file
        self._position = 0

    @property
    def position(self) -> int:
        """当前写入位置"""
        return self._position

    def write_bytes(self, data: bytes) -> int:
        """
        写入原始字节

        Args:
            data: 要写入的字节

        Returns:
            写入的字节数
        """
        written = self._file.write(data)
        self._position += written
        return written


class BinaryReader:
    """
    二进制读取器

    数据不足时抛出 CorruptionError，而不是返回截断的结果。
    """

    def __init__(self, file: BinaryIO):
        """
        初始化读取器

        Args:
            file: 可读的二进制文件对象
        """
        self._file = file
        self._position = 0

    @property
    def position(self) -> int:
        """当前读取位置"""
        return self._position

    def read_bytes(self, size: int) -> bytes:
        """
        读取指定字节数

        Args:
            size: 要读取的字节数

        Returns:
            读取的字节

        Raises:
            CorruptionError: 数据不足请求的字节数
        """
        data = self._file.read(size)
        if len(data) < size:
            raise CorruptionError(
                f"数据提前结束: 偏移 {self._position} 处期望读取 {size} 字节，"
                f"实际只有 {len(data)} 字节"
            )
        self._position += size
        return data
