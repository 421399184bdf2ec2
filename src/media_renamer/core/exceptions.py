"""项目内使用的自定义异常定义。"""


class MediaRenamerError(Exception):
    """基础异常类型。"""


class AssetStoreError(MediaRenamerError):
    """媒体库清单无法读取、解析或写入时抛出。"""
