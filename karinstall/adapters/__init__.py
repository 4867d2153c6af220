"""
Adapters — artifact locators the installer resolves coordinates through.
"""

from karinstall.adapters.base import ArtifactLocator

__all__ = ["ArtifactLocator"]
