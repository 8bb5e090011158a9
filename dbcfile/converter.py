#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
格式转换工具

提供 DBC 与 JSON 之间的互转功能。
"""

import json
import logging
import os
from typing import Any, Dict, Optional, Union

from .core.types import SchemaLike
from .exceptions import SchemaError
from .table import DBCFile

logger = logging.getLogger(__name__)

JSON_VERSION = 1


class DbcJsonConverter:
    """
    DBC 和 JSON 互转

    JSON 格式:
    {
        "version": 1,
        "schema": [["id", "uint32"], ["name", "string"]],   // 保持字段顺序
        "record_count": 2,
        "records": [{"id": 1, "name": "Sword"}, ...]
    }
    """

    @staticmethod
    def table_to_dict(table: DBCFile) -> Dict[str, Any]:
        """
        将已加载的表转换为可 JSON 序列化的字典

        Raises:
            NotLoadedError: 表未加载
        """
        records = list(table.iter_records())
        return {
            'version': JSON_VERSION,
            'schema': [[name, token] for name, token in table.schema.items()],
            'record_count': len(records),
            'records': records,
        }

    @staticmethod
    def dict_to_table(
        data: Dict[str, Any],
        output_path: Union[str, os.PathLike],
        **kwargs: Any
    ) -> DBCFile:
        """
        根据字典构建新表并写入 output_path

        Args:
            data: table_to_dict() 格式的字典
            output_path: 输出 DBC 文件路径
            **kwargs: 传给 DBCFile 的其他参数 (encoding, dedupe_strings)

        Returns:
            已写盘的 DBCFile

        Raises:
            SchemaError: 版本不支持或缺少字段定义
            FieldError / ValueRangeError: 记录内容无效
            PathError: 输出路径不可写
        """
        version = data.get('version', JSON_VERSION)
        if version != JSON_VERSION:
            raise SchemaError(f"不支持的 JSON 版本 {version}, 支持的版本: [{JSON_VERSION}]")
        if 'schema' not in data:
            raise SchemaError("JSON 缺少 schema")

        schema = [tuple(item) for item in data['schema']]
        table = DBCFile(output_path, schema, create=True, **kwargs)
        for values in data.get('records', []):
            table.create_record(values)
        table.write()
        return table

    @staticmethod
    def table_to_json(
        table_or_path: Union[DBCFile, str, os.PathLike],
        output_path: Union[str, os.PathLike],
        schema: Optional[SchemaLike] = None,
        indent: int = 2
    ) -> None:
        """
        将表导出为 JSON 文件

        Args:
            table_or_path: 已加载的表，或 DBC 文件路径
            output_path: 输出 JSON 文件路径
            schema: 传入路径时使用的字段定义
            indent: JSON 缩进

        Raises:
            SchemaError: 传入路径但未提供字段定义
            NotLoadedError: 传入的表未加载
        """
        if isinstance(table_or_path, DBCFile):
            table = table_or_path
        else:
            if schema is None:
                raise SchemaError("从文件路径导出时必须提供 schema")
            table = DBCFile(table_or_path, schema)
            table.read()

        data = DbcJsonConverter.table_to_dict(table)
        with open(output_path, 'w', encoding='utf-8') as f:
            json.dump(data, f, ensure_ascii=False, indent=indent)
        logger.debug("exported %d records to %s", data['record_count'], output_path)

    @staticmethod
    def json_to_table(
        json_path: Union[str, os.PathLike],
        output_path: Union[str, os.PathLike],
        **kwargs: Any
    ) -> DBCFile:
        """
        将 JSON 文件转换为 DBC 文件

        Args:
            json_path: JSON 文件路径
            output_path: 输出 DBC 文件路径
            **kwargs: 传给 DBCFile 的其他参数

        Returns:
            已写盘的 DBCFile
        """
        with open(json_path, 'r', encoding='utf-8') as f:
            data = json.load(f)
        table = DbcJsonConverter.dict_to_table(data, output_path, **kwargs)
        logger.debug("imported %d records from %s", table.header.record_count, json_path)
        return table
