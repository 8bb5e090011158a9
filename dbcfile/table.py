#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
DBC 表

DBCFile 把文件头、字符串块和记录存储组合成对外的读写接口。
"""

import io
import logging
import os
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple, Union

from .core.binary_io import BinaryWriter
from .core.record_store import FoundRecord, RecordStore
from .core.schema import DBCHeader, compute_header, split_sections
from .core.string_table import StringTable
from .core.types import SchemaLike, parse_schema
from .exceptions import (
    CorruptionError,
    FieldError,
    NotLoadedError,
    SchemaMismatchError,
)
from .utils import check_writable_destination, read_file, write_file

logger = logging.getLogger(__name__)


class DBCFile:
    """
    DBC 表

    由调用方提供字段定义 (不从文件推断)。表有两种状态:
    未加载 (Unopened) 和已加载 (Loaded)。以 create=True 打开得到一张
    空的已加载表；否则需要先调用 read()。

    所有修改只在内存中进行，调用 write() / write_to() 后才落盘。

    Example:
        >>> table = DBCFile("Item.dbc", {"id": "uint32", "name": "string"})
        >>> table.read()
        >>> index = table.create_record({"id": 1, "name": "Sword"})
        >>> table.write()
    """

    def __init__(
        self,
        path: Union[str, os.PathLike],
        schema: SchemaLike,
        create: bool = False,
        encoding: str = 'utf-8',
        dedupe_strings: bool = False
    ):
        """
        初始化表

        Args:
            path: DBC 文件路径 (write() 的目标)
            schema: 字段定义，{字段名: 类型标记} 或 (字段名, 类型标记) 序列，
                类型标记为 "uint32" / "int32" / "float" / "string"
            create: 为 True 时直接得到一张空表，无需 read()
            encoding: 字符串块的文本编码
            dedupe_strings: 重建字符串块时相同字符串是否共用同一偏移，
                默认每个字符串各占一份

        Raises:
            SchemaError: 字段定义无效
        """
        self._path = os.fspath(path)
        self._fields = parse_schema(schema)
        self._field_names = frozenset(name for name, _ in self._fields)
        self._encoding = encoding
        self._dedupe_strings = dedupe_strings

        self._store = RecordStore(self._fields, StringTable(encoding))
        self._loaded = create

    @classmethod
    def open(
        cls,
        path: Union[str, os.PathLike],
        schema: SchemaLike,
        create: bool = False,
        **kwargs: Any
    ) -> 'DBCFile':
        """打开表，等同于 DBCFile(path, schema, create=create, ...)"""
        return cls(path, schema, create=create, **kwargs)

    # ==================== 属性 ====================

    @property
    def path(self) -> str:
        """表文件路径"""
        return self._path

    @property
    def schema(self) -> Dict[str, str]:
        """字段定义副本 {字段名: 类型标记}"""
        return {name: ftype.value for name, ftype in self._fields}

    @property
    def is_loaded(self) -> bool:
        """是否已加载"""
        return self._loaded

    @property
    def header(self) -> DBCHeader:
        """
        当前文件头快照

        根据内存中的记录和字符串块实时计算，修改返回值不影响表。
        """
        self._require_loaded()
        return compute_header(self._fields, len(self._store), self._store.strings.size())

    def __repr__(self) -> str:
        state = f"{len(self._store)} records" if self._loaded else "unopened"
        return f"<DBCFile {self._path!r} fields={len(self._fields)} {state}>"

    # ==================== 校验 ====================

    def _require_loaded(self) -> None:
        if not self._loaded:
            raise NotLoadedError()

    def _require_fields(self, names) -> None:
        for name in names:
            if name not in self._field_names:
                raise FieldError(name)

    # ==================== 读写 ====================

    def read(self, source: Union[None, str, os.PathLike, bytes, bytearray, memoryview] = None) -> None:
        """
        加载表内容

        Args:
            source: None 表示读取 path；也可以是其他文件路径或完整文件字节

        Raises:
            PathError: 文件无法读取 (表状态不变)
            SchemaMismatchError: 文件字段数量与字段定义不一致
            CorruptionError: 文件结构不一致

        结构错误时表回到未加载状态，之前的内容被丢弃。
        """
        if source is None:
            data = read_file(self._path)
        elif isinstance(source, (bytes, bytearray, memoryview)):
            data = bytes(source)
        else:
            data = read_file(source)

        try:
            header, record_bytes, string_bytes = split_sections(data, self._fields)
            strings = StringTable.from_bytes(string_bytes, self._encoding)
            store = RecordStore.decode_all(record_bytes, self._fields, strings)
        except (CorruptionError, SchemaMismatchError):
            self._store = RecordStore(self._fields, StringTable(self._encoding))
            self._loaded = False
            raise

        self._store = store
        self._loaded = True
        logger.debug(
            "loaded %s: %d records, %d-byte string block",
            self._path, header.record_count, header.string_block_size
        )

    def _serialize(self) -> Tuple[bytes, RecordStore]:
        # 读入或写盘后未修改的表原样输出
        store = self._store
        if store.modified:
            store = store.rebuild(self._dedupe_strings)
        header = compute_header(self._fields, len(store), store.strings.size())

        buffer = io.BytesIO()
        writer = BinaryWriter(buffer)
        header.write(writer)
        writer.write_bytes(store.serialize())
        writer.write_bytes(store.strings.serialize())
        return buffer.getvalue(), store

    def to_bytes(self) -> bytes:
        """
        序列化为完整文件字节

        未修改的表按读入时的字节原样输出；修改过的表由当前存活的值重新生成
        字符串块，更新和删除留下的垃圾字符串不会写出。
        """
        data, _ = self._serialize()
        return data

    def write(self) -> None:
        """
        写回 path

        Raises:
            PathError: 目标不可写
        """
        self._write(self._path)

    def write_to(self, path: Union[str, os.PathLike]) -> None:
        """
        写入到新路径

        写入前检查目标目录可写，内容完整编码后一次性写出。
        失败时源文件和内存状态都不变。path 属性保持不变。

        Raises:
            PathError: 目标目录不存在或不可写
        """
        self._write(path)

    def _write(self, path: Union[str, os.PathLike]) -> None:
        target = check_writable_destination(path)
        data, store = self._serialize()
        write_file(target, data)

        garbage = self._store.strings.size() - store.strings.size()
        self._store = store
        logger.debug(
            "wrote %s: %d records, %d bytes (%d garbage string bytes dropped)",
            target, len(store), len(data), max(garbage, 0)
        )

    # ==================== 记录操作 ====================

    def create_record(self, values: Optional[Mapping[str, Any]] = None) -> int:
        """
        追加一条记录

        Args:
            values: 初始值 {字段名: 值}，未提供的字段为类型零值

        Returns:
            新记录的索引 (等于追加前的记录数)

        Raises:
            NotLoadedError: 表未加载
            FieldError: 引用了不存在的字段
            ValueRangeError: 值无法以字段类型存储
        """
        self._require_loaded()
        values = dict(values or {})
        self._require_fields(values)
        return self._store.create(values)

    def create_record_with_values(self, values: Mapping[str, Any]) -> int:
        """等同于 create_record(values)"""
        return self.create_record(values)

    def update_record(self, index: int, field: str, value: Any) -> None:
        """
        更新记录的单个字段

        Raises:
            NotLoadedError: 表未加载
            FieldError: 字段不存在
            RecordIndexError: 索引越界
            ValueRangeError: 值无法以字段类型存储
        """
        self._require_loaded()
        self._require_fields((field,))
        self._store.update(index, field, value)

    def update_record_multi(self, index: int, updates: Mapping[str, Any]) -> None:
        """
        同时更新记录的多个字段

        任何一个字段无效时整条记录保持不变。
        """
        self._require_loaded()
        updates = dict(updates)
        self._require_fields(updates)
        self._store.update_many(index, updates)

    def delete_record(self, index: int) -> None:
        """
        删除记录，之后的记录索引减一

        Raises:
            NotLoadedError: 表未加载
            RecordIndexError: 索引越界
        """
        self._require_loaded()
        self._store.delete(index)

    def get_record(self, index: int) -> Dict[str, Any]:
        """
        获取记录副本

        Raises:
            NotLoadedError: 表未加载
            RecordIndexError: 索引越界
        """
        self._require_loaded()
        return self._store.get(index)

    def find_by(self, field: str, value: Any) -> List[FoundRecord]:
        """
        查找字段值等于 value 的所有记录

        Returns:
            [FoundRecord(index, value), ...]，按索引升序；无匹配时为空列表

        Raises:
            NotLoadedError: 表未加载
            FieldError: 字段不存在
        """
        self._require_loaded()
        self._require_fields((field,))
        return self._store.find_by(field, value)

    def iter_records(self) -> Iterator[Dict[str, Any]]:
        """按索引顺序迭代记录副本"""
        self._require_loaded()
        return self._store.iter_records()
