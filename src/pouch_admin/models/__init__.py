from .key import CreatedKey, Key, KeyConfiguration, KeyRequest, PluginConfig
from .schema import FieldRole, FieldSchema, FieldType, PluginCatalog, PluginDescriptor

__all__ = [
    "CreatedKey",
    "FieldRole",
    "FieldSchema",
    "FieldType",
    "Key",
    "KeyConfiguration",
    "KeyRequest",
    "PluginCatalog",
    "PluginConfig",
    "PluginDescriptor",
]
