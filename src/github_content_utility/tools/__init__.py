"""Config-driven entry points.

Usage:

    from github_content_utility.config import Config
    from github_content_utility.tools import content_tools

    config = Config.load_from_env()
    content_tools.commit_and_open_pull_request(config, "readme")
"""

from . import content_tools  # noqa: F401

__all__ = ["content_tools"]
