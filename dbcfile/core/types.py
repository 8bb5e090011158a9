#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
字段类型系统

定义 DBC 支持的四种字段类型 (uint32 / int32 / float / string)，
以及单个 4 字节字段槽的编码、解码和校验。
"""

import math
import struct
from enum import Enum
from typing import Any, Dict, List, Mapping, Sequence, Tuple, Union, TYPE_CHECKING

from ..exceptions import SchemaError, ValueRangeError

if TYPE_CHECKING:
    from .string_table import StringTable


# 每个字段在记录中固定占 4 字节 (字符串存储的是偏移)
FIELD_SIZE = 4

UINT32_MAX = 0xFFFFFFFF
INT32_MIN = -0x80000000
INT32_MAX = 0x7FFFFFFF


class FieldType(Enum):
    """字段类型，值即字段定义中使用的类型标记"""
    UINT32 = "uint32"
    INT32 = "int32"
    FLOAT = "float"
    STRING = "string"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def parse(cls, token: Union[str, 'FieldType']) -> 'FieldType':
        """
        解析类型标记

        Args:
            token: "uint32" / "int32" / "float" / "string" 或 FieldType

        Returns:
            对应的 FieldType

        Raises:
            SchemaError: 未知的类型标记
        """
        if isinstance(token, cls):
            return token
        try:
            return cls(token)
        except ValueError:
            raise SchemaError(f"未知的字段类型: {token!r}") from None


_STRUCTS: Dict[FieldType, struct.Struct] = {
    FieldType.UINT32: struct.Struct('<I'),
    FieldType.INT32: struct.Struct('<i'),
    FieldType.FLOAT: struct.Struct('<f'),
    # 字符串槽保存的是字符串块中的偏移
    FieldType.STRING: struct.Struct('<I'),
}

_ZERO_VALUES: Dict[FieldType, Any] = {
    FieldType.UINT32: 0,
    FieldType.INT32: 0,
    FieldType.FLOAT: 0.0,
    FieldType.STRING: "",
}

SchemaLike = Union[Mapping[str, Any], Sequence[Tuple[str, Any]]]


def parse_schema(schema: SchemaLike) -> List[Tuple[str, FieldType]]:
    """
    解析并校验字段定义

    字段顺序即磁盘上的列顺序。

    Args:
        schema: {字段名: 类型标记} 字典，或 (字段名, 类型标记) 序列

    Returns:
        [(字段名, FieldType), ...]

    Raises:
        SchemaError: 字段定义为空、字段名无效或重复、类型标记未知
    """
    if isinstance(schema, Mapping):
        items = list(schema.items())
    elif isinstance(schema, (list, tuple)):
        items = list(schema)
    else:
        raise SchemaError(f"字段定义必须是字典或 (名称, 类型) 序列, 实际为 {type(schema).__name__}")

    if not items:
        raise SchemaError("字段定义不能为空")

    fields: List[Tuple[str, FieldType]] = []
    seen = set()
    for item in items:
        try:
            name, token = item
        except (TypeError, ValueError):
            raise SchemaError(f"无效的字段定义项: {item!r}") from None
        if not isinstance(name, str) or not name:
            raise SchemaError(f"字段名必须是非空字符串: {name!r}")
        if name in seen:
            raise SchemaError(f"字段名重复: {name!r}")
        seen.add(name)
        fields.append((name, FieldType.parse(token)))
    return fields


def zero_value(field_type: FieldType) -> Any:
    """字段类型的零值 (0 / 0 / 0.0 / "")"""
    return _ZERO_VALUES[field_type]


def validate_value(field_type: FieldType, value: Any, encoding: str = 'utf-8') -> Any:
    """
    校验字段值，返回存储后读回的值

    不产生任何副作用，用于在真正写入前整体校验。
    float 返回经过 float32 舍入后的值。

    Raises:
        ValueRangeError: 值类型不符或超出可表示范围
    """
    if field_type is FieldType.STRING:
        if not isinstance(value, str):
            raise ValueRangeError(field_type, value, "需要 str")
        if '\0' in value:
            raise ValueRangeError(field_type, value, "字符串不能包含 NUL 字符")
        try:
            value.encode(encoding)
        except UnicodeEncodeError as e:
            raise ValueRangeError(field_type, value, f"无法以 {encoding} 编码") from e
        return value

    # bool 是 int 的子类，但不是合法的数值
    if isinstance(value, bool):
        raise ValueRangeError(field_type, value, "不接受 bool")

    if field_type is FieldType.FLOAT:
        if not isinstance(value, (int, float)):
            raise ValueRangeError(field_type, value, "需要数值")
        try:
            as_float = float(value)
        except OverflowError as e:
            raise ValueRangeError(field_type, value, "超出 float32 范围") from e
        if not math.isfinite(as_float):
            raise ValueRangeError(field_type, value, "不支持 NaN 或无穷大")
        codec = _STRUCTS[FieldType.FLOAT]
        try:
            return codec.unpack(codec.pack(as_float))[0]
        except (OverflowError, struct.error) as e:
            raise ValueRangeError(field_type, value, "超出 float32 范围") from e

    if not isinstance(value, int):
        raise ValueRangeError(field_type, value, "需要整数")
    if field_type is FieldType.UINT32:
        low, high = 0, UINT32_MAX
    else:
        low, high = INT32_MIN, INT32_MAX
    if not low <= value <= high:
        raise ValueRangeError(field_type, value, f"有效范围 [{low}, {high}]")
    return value


def normalize_value(field_type: FieldType, value: Any, encoding: str = 'utf-8') -> Tuple[bool, Any]:
    """
    把查询值规整为存储后读回的形式

    Returns:
        (是否可表示, 规整后的值)；不可表示的值不可能与任何记录相等

    整数字段接受整数值的 float 作为查询值 (10.0 等同于 10)。
    """
    if (field_type in (FieldType.UINT32, FieldType.INT32)
            and isinstance(value, float) and value.is_integer()):
        value = int(value)
    try:
        return True, validate_value(field_type, value, encoding)
    except ValueRangeError:
        return False, None


def encode_value(field_type: FieldType, value: Any, strings: 'StringTable') -> bytes:
    """
    编码单个字段值为 4 字节

    字符串会追加到字符串表，槽中保存新偏移。

    Args:
        field_type: 字段类型
        value: Python 值
        strings: 字符串表

    Returns:
        4 字节编码结果

    Raises:
        ValueRangeError: 值无法以该类型存储
    """
    value = validate_value(field_type, value, strings.encoding)
    if field_type is FieldType.STRING:
        value = strings.append(value)
    return _STRUCTS[field_type].pack(value)


def decode_value(field_type: FieldType, raw: bytes, strings: 'StringTable') -> Any:
    """
    解码 4 字节字段槽

    Raises:
        CorruptionError: 字符串偏移无效
    """
    value = _STRUCTS[field_type].unpack(raw)[0]
    if field_type is FieldType.STRING:
        return strings.resolve(value)
    return value


def read_offset(raw: bytes) -> int:
    """读取字符串槽中的原始偏移"""
    return _STRUCTS[FieldType.STRING].unpack(raw)[0]


def pack_offset(offset: int) -> bytes:
    """把字符串偏移编码为字段槽"""
    return _STRUCTS[FieldType.STRING].pack(offset)
