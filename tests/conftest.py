#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
pytest 全局配置

提供共享 fixtures 和用 struct 直接拼装 DBC 字节的测试工具。
"""

import struct
from typing import Dict, List, Sequence, Tuple

import pytest


# ==================== 字段定义 ====================

ITEM_SCHEMA = {
    "id": "uint32",
    "class": "uint32",
    "subclass": "uint32",
    "sound_override_subclass": "int32",
    "material": "uint32",
    "displayid": "uint32",
    "inventory_type": "uint32",
    "sheath_type": "uint32",
}
ITEM_FORMAT = '<IIIiIIII'

ITEM_ROWS = [
    (25, 2, 7, -1, 1, 1542, 21, 3),
    (35, 2, 10, -1, 2, 472, 17, 2),
    (32837, 2, 7, -1, 1, 45479, 21, 3),
    (38, 4, 0, -1, 7, 9891, 4, 0),
    (39, 4, 1, 0, 7, 10141, 7, 0),
]

DISPLAY_SCHEMA = {
    "id": "uint32",
    "model": "string",
    "icon": "string",
    "flags": "uint32",
    "scale": "float",
}
DISPLAY_FORMAT = '<IIIIf'

# (id, model, icon, flags, scale)
DISPLAY_VALUES = [
    (1, "Sword.mdx", "INV_Sword_01", 0, 1.0),
    (2, "Shield.mdx", "INV_Shield_02", 8, 1.5),
    (3, "Sword.mdx", "", 0, 0.5),
]


# ==================== 字节拼装工具 ====================

def build_string_block(strings: Sequence[str]) -> Tuple[bytes, Dict[str, int]]:
    """
    按首次出现顺序拼装字符串块 (相同字符串共用偏移)

    Returns:
        (字符串块字节, {字符串: 偏移})
    """
    block = bytearray(b'\0')
    offsets = {"": 0}
    for s in strings:
        if s not in offsets:
            offsets[s] = len(block)
            block += s.encode('utf-8') + b'\0'
    return bytes(block), offsets


def build_dbc(fmt: str, rows: List[tuple], string_block: bytes = b'\0') -> bytes:
    """用 struct 直接拼装完整的 DBC 文件字节"""
    record_size = struct.calcsize(fmt)
    body = b''.join(struct.pack(fmt, *row) for row in rows)
    header = struct.pack('<4I', len(rows), record_size // 4, record_size, len(string_block))
    return header + body + string_block


def build_display_dbc() -> bytes:
    """DISPLAY_VALUES 对应的 DBC 字节"""
    strings = []
    for _, model, icon, _, _ in DISPLAY_VALUES:
        strings.extend([model, icon])
    block, offsets = build_string_block(strings)
    rows = [
        (rid, offsets[model], offsets[icon], flags, scale)
        for rid, model, icon, flags, scale in DISPLAY_VALUES
    ]
    return build_dbc(DISPLAY_FORMAT, rows, block)


# ==================== Fixtures ====================

@pytest.fixture
def item_bytes() -> bytes:
    """纯数值表的原始字节"""
    return build_dbc(ITEM_FORMAT, ITEM_ROWS)


@pytest.fixture
def item_file(tmp_path, item_bytes):
    """写入临时目录的纯数值表"""
    path = tmp_path / "Item.dbc"
    path.write_bytes(item_bytes)
    return path


@pytest.fixture
def display_bytes() -> bytes:
    """含字符串字段的表的原始字节"""
    return build_display_dbc()


@pytest.fixture
def display_file(tmp_path, display_bytes):
    """写入临时目录的含字符串字段的表"""
    path = tmp_path / "ItemDisplayInfo.dbc"
    path.write_bytes(display_bytes)
    return path


@pytest.fixture
def item_table(item_file):
    """已加载的纯数值表"""
    from dbcfile import DBCFile

    table = DBCFile(item_file, ITEM_SCHEMA)
    table.read()
    return table


@pytest.fixture
def display_table(display_file):
    """已加载的含字符串字段的表"""
    from dbcfile import DBCFile

    table = DBCFile(display_file, DISPLAY_SCHEMA)
    table.read()
    return table
