#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
dbcfile 核心模块

提供二进制 I/O 封装、字段类型编码、文件头布局、字符串块和记录存储。
"""

from .binary_io import BinaryReader, BinaryWriter
from .types import FieldType, FIELD_SIZE, parse_schema, encode_value, decode_value, zero_value
from .schema import DBCHeader, compute_header, validate_header, split_sections
from .string_table import StringTable
from .record_store import RecordStore, FoundRecord

__all__ = [
    "BinaryReader",
    "BinaryWriter",
    "FieldType",
    "FIELD_SIZE",
    "parse_schema",
    "encode_value",
    "decode_value",
    "zero_value",
    "DBCHeader",
    "compute_header",
    "validate_header",
    "split_sections",
    "StringTable",
    "RecordStore",
    "FoundRecord",
]
