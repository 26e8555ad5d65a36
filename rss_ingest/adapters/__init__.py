"""Adapters package for fetching and normalizing feeds."""

from .base import BaseAdapter
from .default import DefaultAdapter
from .github import GitHubAdapter

__all__ = [
    "BaseAdapter",
    "DefaultAdapter",
    "GitHubAdapter",
]
