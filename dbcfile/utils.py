#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
dbcfile 工具函数

提供文件读写和目标路径检查等通用功能。
"""

import os

from .exceptions import PathError


def check_writable_destination(path: str) -> str:
    """
    检查目标路径可写

    只检查，不创建任何文件。

    Args:
        path: 目标文件路径

    Returns:
        绝对路径

    Raises:
        PathError: 所在目录不存在、目标是目录或没有写权限
    """
    abs_path = os.path.abspath(os.fspath(path))
    directory = os.path.dirname(abs_path)

    if not os.path.isdir(directory):
        raise PathError(abs_path, "目标目录不存在")
    if os.path.isdir(abs_path):
        raise PathError(abs_path, "目标路径是目录")
    if not os.access(directory, os.W_OK):
        raise PathError(abs_path, "目标目录没有写权限")
    if os.path.exists(abs_path) and not os.access(abs_path, os.W_OK):
        raise PathError(abs_path, "目标文件没有写权限")
    return abs_path


def read_file(path: str) -> bytes:
    """
    读取整个文件

    Raises:
        PathError: 文件不存在或无法读取
    """
    try:
        with open(path, 'rb') as f:
            return f.read()
    except OSError as e:
        raise PathError(os.fspath(path), f"无法读取文件 ({e.strerror})") from e


def write_file(path: str, data: bytes) -> None:
    """
    一次性写入完整内容

    调用方应先把内容完整编码到 data，编码失败时不会触碰目标文件。

    Raises:
        PathError: 无法打开或写入目标文件
    """
    try:
        with open(path, 'wb') as f:
            f.write(data)
    except OSError as e:
        raise PathError(os.fspath(path), f"无法写入文件 ({e.strerror})") from e
