"""Top‑level package for the GitHub Content Utility.

This package commits file changes to a GitHub repository and opens pull
requests on behalf of a GitHub App.  Entry points live in
`github_content_utility.tools.content_tools`.
"""

__all__ = ["__version__"]
__version__ = "0.1.0"
