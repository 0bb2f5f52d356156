"""Changelog fragment collector.

Aggregates per-change changelog fragment files from a repository, enriches
each one with commit and pull request metadata from GitHub, groups them by
category and scope, and renders a release-notes document.
"""

__version__ = "0.1.0"
