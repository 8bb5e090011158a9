#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
DBC 文件头与布局

定义 DBCHeader，以及根据字段定义计算、校验文件头的函数。

文件布局 (Little-Endian):
    [Header 16 bytes][Records record_count × record_size][String Block]
"""

import io
import struct
from dataclasses import dataclass, asdict
from typing import ClassVar, Dict, List, Sequence, Tuple

from .binary_io import BinaryReader, BinaryWriter
from .types import FieldType, FIELD_SIZE
from ..exceptions import CorruptionError, SchemaMismatchError


@dataclass
class DBCHeader:
    """
    文件头 (16 bytes)

    位于文件开头，描述记录数量、字段数量、记录大小和字符串块大小。
    """
    FORMAT: ClassVar[str] = '<4I'
    SIZE: ClassVar[int] = 16

    record_count: int = 0
    field_count: int = 0
    record_size: int = 0
    string_block_size: int = 1  # 至少包含偏移 0 处的空字符串

    def pack(self) -> bytes:
        """序列化为字节"""
        return struct.pack(
            self.FORMAT,
            self.record_count,
            self.field_count,
            self.record_size,
            self.string_block_size
        )

    @classmethod
    def unpack(cls, data: bytes) -> 'DBCHeader':
        """
        从字节反序列化

        Raises:
            CorruptionError: 数据不足 16 字节
        """
        if len(data) < cls.SIZE:
            raise CorruptionError(
                f"文件头不完整: 期望 {cls.SIZE} 字节，实际 {len(data)} 字节"
            )
        values = struct.unpack(cls.FORMAT, data[:cls.SIZE])
        return cls(
            record_count=values[0],
            field_count=values[1],
            record_size=values[2],
            string_block_size=values[3]
        )

    def write(self, writer: BinaryWriter) -> int:
        """写入到 BinaryWriter，返回写入的字节数"""
        return writer.write_bytes(self.pack())

    @classmethod
    def read(cls, reader: BinaryReader) -> 'DBCHeader':
        """从 BinaryReader 读取"""
        return cls.unpack(reader.read_bytes(cls.SIZE))

    def to_dict(self) -> Dict[str, int]:
        """转换为普通字典"""
        return asdict(self)


def record_size_for(fields: Sequence[Tuple[str, FieldType]]) -> int:
    """根据字段定义计算单条记录的字节数"""
    return len(fields) * FIELD_SIZE


def compute_header(
    fields: Sequence[Tuple[str, FieldType]],
    record_count: int,
    string_block_size: int
) -> DBCHeader:
    """
    根据当前表状态计算一致的文件头

    Args:
        fields: 字段定义
        record_count: 记录数量
        string_block_size: 字符串块字节数

    Returns:
        DBCHeader
    """
    return DBCHeader(
        record_count=record_count,
        field_count=len(fields),
        record_size=record_size_for(fields),
        string_block_size=string_block_size
    )


def validate_header(
    header: DBCHeader,
    fields: Sequence[Tuple[str, FieldType]],
    record_bytes_length: int
) -> None:
    """
    校验文件头与字段定义、记录区长度是否一致

    Args:
        header: 文件头
        fields: 调用方提供的字段定义
        record_bytes_length: 文件中记录区的实际字节数

    Raises:
        SchemaMismatchError: 字段数量与字段定义不一致 (调用方错误)
        CorruptionError: 文件头自身不一致或与文件长度不符
    """
    if header.field_count != len(fields):
        raise SchemaMismatchError(len(fields), header.field_count)

    expected_size = header.field_count * FIELD_SIZE
    if header.record_size != expected_size:
        raise CorruptionError(
            f"记录大小不一致: 文件头声明 {header.record_size} 字节，"
            f"{header.field_count} 个字段应为 {expected_size} 字节"
        )

    if header.string_block_size == 0:
        raise CorruptionError("字符串块大小为 0: 至少应包含偏移 0 处的空字符串")

    expected_length = header.record_count * header.record_size
    if record_bytes_length != expected_length:
        raise CorruptionError(
            f"记录区长度不一致: 期望 {header.record_count} × {header.record_size} "
            f"= {expected_length} 字节，实际 {record_bytes_length} 字节"
        )


def split_sections(
    data: bytes,
    fields: List[Tuple[str, FieldType]]
) -> Tuple[DBCHeader, bytes, bytes]:
    """
    把完整文件拆分为 (文件头, 记录区, 字符串块)

    记录区长度由文件总长减去文件头与字符串块推出，再与文件头比对。

    Raises:
        SchemaMismatchError: 字段数量不匹配
        CorruptionError: 文件结构不一致
    """
    reader = BinaryReader(io.BytesIO(data))
    header = DBCHeader.read(reader)

    record_bytes_length = len(data) - DBCHeader.SIZE - header.string_block_size
    validate_header(header, fields, record_bytes_length)

    record_bytes = reader.read_bytes(record_bytes_length)
    string_bytes = reader.read_bytes(header.string_block_size)
    return header, record_bytes, string_bytes
