"""
配置加载器

功能：
- 支持加载JSON/YAML配置文件
- 支持环境变量覆盖
- 支持配置验证（schema验证）
- 加载网关MAC配置（gw_mac段）和仿真场景配置
"""

import json
import os
from dataclasses import fields
from typing import Dict, Any, List, Tuple, Optional
from pathlib import Path

import yaml

from core.models.gw_mac_config import GwMacConfig
from .json_utils import load_json


class ConfigLoadError(Exception):
    """配置加载错误"""
    pass


class ConfigValidationError(Exception):
    """配置验证错误"""
    pass


GW_MAC_CONFIG_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "tx_interval_seconds": {"type": "number"},
        "dummy_frame_sending_on": {"type": "boolean"},
        "bb_frame_usage_mode": {"type": "string"},
        "scheduling_start_threshold_seconds": {"type": "number"},
        "scheduling_stop_threshold_seconds": {"type": "number"},
        "sort_criterion": {"type": "string"},
        "mod_cod": {"type": "integer"},
        "carrier_id": {"type": "integer"},
        "control_overhead_bytes": {"type": "integer"},
        "short_frame_duration_seconds": {"type": "number"},
        "normal_frame_duration_seconds": {"type": "number"},
    }
}

SIMULATION_CONFIG_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "gw_mac": GW_MAC_CONFIG_SCHEMA,
        "gateway": {
            "type": "object",
            "required": ["address"],
            "properties": {
                "address": {"type": "string"},
                "gw_id": {"type": "integer"},
            }
        },
        "terminals": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["address"],
                "properties": {
                    "address": {"type": "string"},
                    "beam_id": {"type": "integer"},
                    "traffic": {"type": "object"},
                }
            }
        },
        "simulation": {
            "type": "object",
            "properties": {
                "duration_seconds": {"type": "number"},
                "seed": {"type": "integer"},
            }
        },
    }
}


class ConfigLoader:
    """
    配置加载器

    支持JSON/YAML配置文件加载和验证
    """

    FORMAT_MAP = {
        ".json": "json",
        ".yaml": "yaml",
        ".yml": "yaml",
    }

    def __init__(self):
        """初始化加载器"""
        self._loaded_config: Optional[Dict[str, Any]] = None
        self._file_path: Optional[str] = None

    def load(self, path: str, format: str = "auto") -> Dict[str, Any]:
        """
        加载配置文件

        Args:
            path: 配置文件路径
            format: 文件格式 ("auto", "json", "yaml")

        Returns:
            Dict[str, Any]: 配置字典

        Raises:
            ConfigLoadError: 加载失败时抛出
        """
        if not os.path.exists(path):
            raise ConfigLoadError(f"配置文件不存在: {path}")

        if format == "auto":
            ext = Path(path).suffix.lower()
            if ext not in self.FORMAT_MAP:
                raise ConfigLoadError(f"无法自动检测文件格式: {ext}")
            format = self.FORMAT_MAP[ext]

        if format == "json":
            try:
                config = load_json(path)
            except json.JSONDecodeError as e:
                raise ConfigLoadError(f"JSON解析错误: {e}")
        elif format == "yaml":
            try:
                with open(path, 'r', encoding='utf-8') as f:
                    config = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ConfigLoadError(f"YAML解析错误: {e}")
        else:
            raise ConfigLoadError(f"不支持的配置格式: {format}")

        if config is None:
            config = {}
        if not isinstance(config, dict):
            raise ConfigLoadError(f"配置文件顶层必须是映射: {path}")

        self._loaded_config = config
        self._file_path = path
        return config

    def load_from_env(self, prefix: str) -> Dict[str, str]:
        """
        从环境变量加载配置

        Args:
            prefix: 环境变量前缀（不区分大小写）

        Returns:
            Dict[str, str]: 去掉前缀并转为小写的键 -> 原始字符串值
        """
        result = {}
        prefix_lower = prefix.lower()

        for key, value in os.environ.items():
            key_lower = key.lower()
            if key_lower.startswith(prefix_lower):
                result[key_lower[len(prefix_lower):]] = value

        return result

    def validate(self, config: Any, schema: Dict[str, Any], path: str = "root") -> Tuple[bool, List[str]]:
        """
        验证配置

        支持 type / required / properties / items 四个schema关键字，递归验证。

        Args:
            config: 配置值
            schema: 验证schema
            path: 当前字段路径（错误信息用）

        Returns:
            Tuple[bool, List[str]]: (是否有效, 错误列表)
        """
        errors: List[str] = []

        if not schema:
            return True, errors

        if "type" in schema and not self._check_type(config, schema["type"]):
            errors.append(
                f"字段 '{path}' 类型错误: 期望 {schema['type']}, 实际 {type(config).__name__}"
            )
            return False, errors

        if isinstance(config, dict):
            for field_name in schema.get("required", []):
                if field_name not in config:
                    errors.append(f"缺少必需字段: {path}.{field_name}")
            for prop, prop_schema in schema.get("properties", {}).items():
                if prop in config:
                    _, prop_errors = self.validate(config[prop], prop_schema, f"{path}.{prop}")
                    errors.extend(prop_errors)

        if isinstance(config, list) and "items" in schema:
            for i, item in enumerate(config):
                _, item_errors = self.validate(item, schema["items"], f"{path}[{i}]")
                errors.extend(item_errors)

        return len(errors) == 0, errors

    @staticmethod
    def _check_type(value: Any, expected_type: str) -> bool:
        """检查类型（bool不算作integer/number）"""
        if expected_type == "boolean":
            return isinstance(value, bool)
        if expected_type == "integer":
            return isinstance(value, int) and not isinstance(value, bool)
        if expected_type == "number":
            return isinstance(value, (int, float)) and not isinstance(value, bool)
        type_map = {
            "string": str,
            "array": list,
            "object": dict,
            "null": type(None)
        }
        if expected_type not in type_map:
            return True
        return isinstance(value, type_map[expected_type])

    def get_loaded_config(self) -> Optional[Dict[str, Any]]:
        """获取最后加载的配置"""
        return self._loaded_config

    def get_file_path(self) -> Optional[str]:
        """获取最后加载的文件路径"""
        return self._file_path


def _coerce_env_value(raw: str, default: Any) -> Any:
    """按字段默认值的类型转换环境变量字符串"""
    if isinstance(default, bool):
        lowered = raw.strip().lower()
        if lowered in ("1", "true", "yes", "on"):
            return True
        if lowered in ("0", "false", "no", "off"):
            return False
        raise ConfigValidationError(f"无效的布尔值: {raw}")
    try:
        if isinstance(default, int):
            return int(raw)
        if isinstance(default, float):
            return float(raw)
    except ValueError:
        raise ConfigValidationError(f"无效的数值: {raw}")
    return raw


def gw_mac_config_from_dict(
    section: Dict[str, Any],
    env_prefix: Optional[str] = None
) -> GwMacConfig:
    """
    由gw_mac配置段构建GwMacConfig

    Args:
        section: gw_mac配置段
        env_prefix: 环境变量前缀（如 ``SATGW_GW_MAC_``），匹配的变量覆盖配置值

    Returns:
        GwMacConfig: 网关MAC配置

    Raises:
        ConfigValidationError: schema验证失败
        FrameConfigError: 字段未知或取值无效
    """
    loader = ConfigLoader()
    is_valid, errors = loader.validate(section, GW_MAC_CONFIG_SCHEMA, "gw_mac")
    if not is_valid:
        raise ConfigValidationError("; ".join(errors))

    values = dict(section)
    if env_prefix:
        defaults = {f.name: f.default for f in fields(GwMacConfig)}
        for key, raw in loader.load_from_env(env_prefix).items():
            if key in defaults:
                values[key] = _coerce_env_value(raw, defaults[key])

    return GwMacConfig.from_dict(values)


def load_gw_mac_config(path: str, env_prefix: Optional[str] = None) -> GwMacConfig:
    """
    从配置文件加载网关MAC配置

    文件中的 ``gw_mac`` 段被使用；没有该段时整个文件被视为gw_mac配置。

    Args:
        path: JSON/YAML配置文件路径
        env_prefix: 环境变量前缀

    Returns:
        GwMacConfig: 网关MAC配置
    """
    config = ConfigLoader().load(path)
    section = config.get("gw_mac", config)
    return gw_mac_config_from_dict(section, env_prefix)


def load_simulation_config(path: str) -> Dict[str, Any]:
    """
    加载并验证仿真场景配置

    Args:
        path: JSON/YAML配置文件路径

    Returns:
        Dict[str, Any]: 配置字典

    Raises:
        ConfigLoadError: 加载失败
        ConfigValidationError: schema验证失败
    """
    loader = ConfigLoader()
    config = loader.load(path)
    is_valid, errors = loader.validate(config, SIMULATION_CONFIG_SCHEMA)
    if not is_valid:
        raise ConfigValidationError("; ".join(errors))
    return config
