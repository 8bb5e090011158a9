#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
dbcfile - 轻量级零依赖 DBC (WDBC) 表读写库

定长记录 + 尾部字符串块的游戏数据表格式，支持增删改查与原样写回。
"""

import logging

__version__ = "0.1.0"

# 异常类
from .exceptions import (
    DBCError,
    SchemaError,
    FieldError,
    RecordIndexError,
    CorruptionError,
    SchemaMismatchError,
    PathError,
    ValueRangeError,
    NotLoadedError,
)

# 核心结构
from .core import DBCHeader, FieldType, FoundRecord

# 表
from .table import DBCFile

# 格式转换
from .converter import DbcJsonConverter

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    # 版本
    "__version__",
    # 异常
    "DBCError",
    "SchemaError",
    "FieldError",
    "RecordIndexError",
    "CorruptionError",
    "SchemaMismatchError",
    "PathError",
    "ValueRangeError",
    "NotLoadedError",
    # 核心结构
    "DBCHeader",
    "FieldType",
    "FoundRecord",
    # 表
    "DBCFile",
    # 格式转换
    "DbcJsonConverter",
]
