"""gitlink - 按清单将 Git 依赖包链接到本地工作副本或克隆到项目中"""

__version__ = "0.3.0"
