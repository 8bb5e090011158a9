#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
dbcfile 异常定义

所有异常均继承自 DBCError，便于统一捕获。
"""

from typing import Any, Optional


class DBCError(Exception):
    """dbcfile 基础异常"""
    pass


class SchemaError(DBCError):
    """
    字段定义无效异常
    
    字段定义为空、字段名重复或类型标记未知时抛出。
    """
    pass


class FieldError(DBCError):
    """
    未知字段异常
    
    创建、更新或查询时引用了字段定义中不存在的字段名。
    """
    def __init__(self, field_name: Any):
        self.field_name = field_name
        super().__init__(f"未知字段: {field_name!r}")


class RecordIndexError(DBCError, IndexError):
    """
    记录索引越界异常
    
    索引不在 [0, record_count) 范围内 (包括负数) 时抛出。
    """
    def __init__(self, index: Any, record_count: int):
        self.index = index
        self.record_count = record_count
        super().__init__(
            f"记录索引越界: {index!r}, 有效范围 [0, {record_count})"
        )


class CorruptionError(DBCError):
    """
    数据损坏异常
    
    文件字节与文件头或字段定义不一致，或字符串偏移无效时抛出。
    """
    pass


class SchemaMismatchError(DBCError):
    """
    字段定义不匹配异常
    
    文件头中的字段数量与调用方提供的字段定义不一致。
    这是调用方错误，区别于文件本身损坏。
    """
    def __init__(self, expected: int, actual: int):
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"字段数量不匹配: 字段定义有 {expected} 个字段, "
            f"文件头声明 {actual} 个"
        )


class PathError(DBCError):
    """
    路径不可用异常
    
    目标路径不存在、不可写或无法读取时抛出。
    """
    def __init__(self, path: str, message: Optional[str] = None):
        self.path = path
        super().__init__(f"{message or '路径无效或没有权限'}: {path}")


class ValueRangeError(DBCError, ValueError):
    """
    字段值超出范围异常
    
    数值超出字段类型的可表示范围，或值的类型与字段类型不符。
    """
    def __init__(self, field_type: Any, value: Any, reason: Optional[str] = None):
        self.field_type = field_type
        self.value = value
        message = f"值 {value!r} 无法以 {field_type} 类型存储"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class NotLoadedError(DBCError):
    """
    表未加载异常
    
    在成功 read() 或以 create=True 打开之前调用记录操作时抛出。
    """
    def __init__(self, message: Optional[str] = None):
        super().__init__(
            message or "表尚未加载，请先调用 read() 或以 create=True 打开"
        )
