"""
模型包初始化
在此处导入所有模型，确保 SQLAlchemy Base.metadata 能注册全部表。
init_db() 只需 import logdeck.models 即可触发所有模型注册。
"""

from logdeck.models.user import User  # noqa: F401
from logdeck.models.page import Page  # noqa: F401
from logdeck.models.log import Log, Severity, SEVERITIES  # noqa: F401
