"""gitlink 命令行接口

各子模块注册自己的命令到 main group。
"""

import click

from gitlink import __version__
from gitlink.utils.logger import setup_from_env


@click.group()
@click.version_option(version=__version__)
def main() -> None:
    """gitlink - 将 Git 依赖包链接到本地工作副本，或克隆到项目中"""
    setup_from_env()


# 注册子命令
from gitlink.cli.cmd_link import register as _reg_link  # noqa: E402

_reg_link(main)
