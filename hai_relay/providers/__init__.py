"""上游 Provider 集成层。

该包下的模块负责：
- 定义上游客户端抽象接口 (base)。
- 维护模型名到 modeId 的映射与上游端点配置 (registry)。
- 解析上游事件流与内嵌标记负载 (sse)。
- 提供 Juchat 的具体实现 (juchat_client)。
"""

from hai_relay.config.settings import settings
from hai_relay.providers.base import UpstreamClient
from hai_relay.providers.juchat_client import JuchatClient


def create_provider() -> UpstreamClient:
    """根据当前配置创建上游客户端实例。"""

    return JuchatClient(settings)
