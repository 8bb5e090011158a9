#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
记录存储

按字段定义管理定长记录。记录以原始字节保存，读取时才解码为字典。
"""

from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Mapping, Optional, Sequence, Tuple

from .string_table import StringTable
from .types import (
    FieldType, FIELD_SIZE,
    decode_value, encode_value, normalize_value, validate_value, zero_value,
    read_offset, pack_offset,
)
from ..exceptions import CorruptionError, FieldError, RecordIndexError


@dataclass(frozen=True)
class FoundRecord:
    """find_by 的单条结果"""
    index: int
    value: Dict[str, Any]


class RecordStore:
    """
    定长记录存储

    记录按索引寻址 (从 0 开始，连续无空洞)，删除后后续索引前移。
    对外返回的记录都是新建的字典，修改它们不会影响存储。
    """

    def __init__(
        self,
        fields: Sequence[Tuple[str, FieldType]],
        strings: StringTable,
        rows: Optional[List[bytes]] = None
    ):
        """
        初始化记录存储

        Args:
            fields: 字段定义 [(字段名, FieldType), ...]
            strings: 字符串块
            rows: 原始记录字节 (每条 record_size 字节)
        """
        self._fields = list(fields)
        self._strings = strings
        self._rows: List[bytes] = rows if rows is not None else []
        self._slots: Dict[str, int] = {
            name: i for i, (name, _) in enumerate(self._fields)
        }
        self._record_size = len(self._fields) * FIELD_SIZE
        self._modified = False

    @classmethod
    def decode_all(
        cls,
        data: bytes,
        fields: Sequence[Tuple[str, FieldType]],
        strings: StringTable
    ) -> 'RecordStore':
        """
        从记录区字节构建存储

        按 record_size 切分记录，并检查所有字符串槽都指向有效的字符串。

        Args:
            data: 记录区字节
            fields: 字段定义
            strings: 已加载的字符串块

        Returns:
            RecordStore 实例

        Raises:
            CorruptionError: 长度不是 record_size 的整数倍，或字符串偏移无效
        """
        record_size = len(fields) * FIELD_SIZE
        if record_size == 0 or len(data) % record_size != 0:
            raise CorruptionError(
                f"记录区长度 {len(data)} 不是记录大小 {record_size} 的整数倍"
            )

        rows = [
            bytes(data[pos:pos + record_size])
            for pos in range(0, len(data), record_size)
        ]

        string_slots = [
            (i, name) for i, (name, ftype) in enumerate(fields)
            if ftype is FieldType.STRING
        ]
        for index, row in enumerate(rows):
            for slot, name in string_slots:
                offset = read_offset(row[slot * FIELD_SIZE:(slot + 1) * FIELD_SIZE])
                if not strings.is_string_start(offset):
                    raise CorruptionError(
                        f"记录 {index} 的字段 {name!r} 引用了无效的字符串偏移 {offset}"
                    )

        return cls(fields, strings, rows)

    # ==================== 属性 ====================

    @property
    def strings(self) -> StringTable:
        """字符串块"""
        return self._strings

    @property
    def record_size(self) -> int:
        """单条记录字节数"""
        return self._record_size

    @property
    def modified(self) -> bool:
        """构建后是否发生过增删改"""
        return self._modified

    def __len__(self) -> int:
        return len(self._rows)

    # ==================== 内部工具 ====================

    def _check_index(self, index: Any) -> int:
        if isinstance(index, bool) or not isinstance(index, int):
            raise RecordIndexError(index, len(self._rows))
        if not 0 <= index < len(self._rows):
            raise RecordIndexError(index, len(self._rows))
        return index

    def _slot(self, field: str) -> int:
        try:
            return self._slots[field]
        except (KeyError, TypeError):
            raise FieldError(field) from None

    def _decode_row(self, row: bytes) -> Dict[str, Any]:
        record = {}
        for i, (name, ftype) in enumerate(self._fields):
            raw = row[i * FIELD_SIZE:(i + 1) * FIELD_SIZE]
            record[name] = decode_value(ftype, raw, self._strings)
        return record

    def _decode_slot(self, row: bytes, slot: int) -> Any:
        ftype = self._fields[slot][1]
        raw = row[slot * FIELD_SIZE:(slot + 1) * FIELD_SIZE]
        return decode_value(ftype, raw, self._strings)

    # ==================== 增删改查 ====================

    def create(self, initial_values: Optional[Mapping[str, Any]] = None) -> int:
        """
        在末尾追加一条记录

        未提供的字段使用类型零值 (0 / 0 / 0.0 / "")。
        所有值先整体校验，校验失败时存储不变。

        Args:
            initial_values: {字段名: 值}

        Returns:
            新记录的索引

        Raises:
            FieldError: 引用了不存在的字段
            ValueRangeError: 值无法以字段类型存储
        """
        values = dict(initial_values or {})
        for name in values:
            self._slot(name)

        row_values = []
        for name, ftype in self._fields:
            value = values.get(name, zero_value(ftype))
            validate_value(ftype, value, self._strings.encoding)
            row_values.append(value)

        row = b''.join(
            encode_value(ftype, value, self._strings)
            for (_, ftype), value in zip(self._fields, row_values)
        )
        self._rows.append(row)
        self._modified = True
        return len(self._rows) - 1

    def update(self, index: int, field: str, value: Any) -> None:
        """
        更新单个字段

        只重新编码受影响的槽；字符串字段会在字符串块中追加新字符串，
        旧字符串成为不可达的垃圾，写盘时被清理。

        Raises:
            RecordIndexError: 索引越界
            FieldError: 字段不存在
            ValueRangeError: 值无法以字段类型存储
        """
        self.update_many(index, {field: value})

    def update_many(self, index: int, updates: Mapping[str, Any]) -> None:
        """
        同时更新多个字段

        全部校验通过后才写入，任何一个字段失败都不会修改记录。
        """
        index = self._check_index(index)
        slots = [(self._slot(name), value) for name, value in updates.items()]
        for slot, value in slots:
            validate_value(self._fields[slot][1], value, self._strings.encoding)

        row = bytearray(self._rows[index])
        for slot, value in slots:
            ftype = self._fields[slot][1]
            row[slot * FIELD_SIZE:(slot + 1) * FIELD_SIZE] = encode_value(
                ftype, value, self._strings
            )
        self._rows[index] = bytes(row)
        self._modified = True

    def delete(self, index: int) -> None:
        """
        删除记录，后续记录索引减一

        Raises:
            RecordIndexError: 索引越界
        """
        index = self._check_index(index)
        del self._rows[index]
        self._modified = True

    def get(self, index: int) -> Dict[str, Any]:
        """
        获取记录 (新建的字典)

        Raises:
            RecordIndexError: 索引越界
        """
        index = self._check_index(index)
        return self._decode_row(self._rows[index])

    def find_by(self, field: str, value: Any) -> List[FoundRecord]:
        """
        按字段相等查找记录

        线性扫描，结果按索引升序。没有匹配时返回空列表。
        查询值先规整为存储后的形式 (float 按 float32 舍入)。

        Raises:
            FieldError: 字段不存在
        """
        slot = self._slot(field)
        ftype = self._fields[slot][1]
        representable, target = normalize_value(ftype, value, self._strings.encoding)
        if not representable:
            return []

        results = []
        for index, row in enumerate(self._rows):
            if self._decode_slot(row, slot) == target:
                results.append(FoundRecord(index, self._decode_row(row)))
        return results

    def iter_records(self) -> Iterator[Dict[str, Any]]:
        """按索引顺序迭代所有记录"""
        for row in self._rows:
            yield self._decode_row(row)

    # ==================== 写盘 ====================

    def rebuild(self, dedupe: bool = False) -> 'RecordStore':
        """
        基于当前存活的值重建记录与字符串块

        返回新的 RecordStore，原存储不受影响。
        字符串按记录顺序、字段顺序写入新字符串块。默认每个字符串 (包括空字符串)
        都追加一份新的副本；dedupe 为 True 时相同字符串共用偏移，空字符串指向偏移 0。

        Args:
            dedupe: 相同字符串是否共用同一偏移

        Returns:
            不含垃圾字符串的新 RecordStore
        """
        strings = StringTable(self._strings.encoding)
        string_slots = [
            i for i, (_, ftype) in enumerate(self._fields)
            if ftype is FieldType.STRING
        ]

        rows = []
        for row in self._rows:
            if not string_slots:
                rows.append(row)
                continue
            new_row = bytearray(row)
            for slot in string_slots:
                start = slot * FIELD_SIZE
                text = self._strings.resolve(read_offset(row[start:start + FIELD_SIZE]))
                if dedupe:
                    offset = strings.intern(text)
                else:
                    offset = strings.append(text)
                new_row[start:start + FIELD_SIZE] = pack_offset(offset)
            rows.append(bytes(new_row))

        return RecordStore(self._fields, strings, rows)

    def serialize(self) -> bytes:
        """记录区字节 (不含文件头与字符串块)"""
        return b''.join(self._rows)
