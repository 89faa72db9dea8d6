"""
日志分析相关的 Pydantic 响应模型
"""

from pydantic import Field

from logdeck.schemas.base import CamelModel


class SeverityDistribution(CamelModel):
    """各级别日志占比（百分比，四舍五入为整数）"""
    info: int = 0
    warning: int = 0
    error: int = 0
    debug: int = 0
    critical: int = 0


class TopPage(CamelModel):
    """日志数量最多的页面"""
    id: int
    name: str
    count: int


class LogAnalytics(CamelModel):
    """日志分析汇总"""
    total_logs: int = 0
    # 错误率（error + critical 占比，保留一位小数）
    error_rate: float = 0
    critical_issues: int = 0
    top_pages: list[TopPage] = Field(default_factory=list)
    severity_distribution: SeverityDistribution = Field(default_factory=SeverityDistribution)


class MessagePattern(CamelModel):
    """高频日志消息"""
    message: str
    count: int


class PerformanceMetrics(CamelModel):
    """性能相关日志计数"""
    slow_queries: int = 0
    timeouts: int = 0
    api_delays: int = 0
