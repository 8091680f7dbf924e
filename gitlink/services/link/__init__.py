"""链接包解析服务

- inspector.py: 本地仓库查询 (RepoInspector)
- validator.py: 链接资格校验 (LinkValidator)
- linker.py: 链接创建 (LinkCreator)
- cloner.py: 克隆回退 (RepoCloner)
- resolver.py: 编排 (Resolver)
"""

from gitlink.services.link.cloner import RepoCloner
from gitlink.services.link.inspector import RepoInspector
from gitlink.services.link.linker import LinkCreator
from gitlink.services.link.resolver import Resolver
from gitlink.services.link.validator import LinkValidator

__all__ = [
    "RepoInspector",
    "LinkValidator",
    "LinkCreator",
    "RepoCloner",
    "Resolver",
]
