"""Workspace configuration and consumer enumeration.

This package contains:
- settings: ScanSettings loaded from .singlecopy/settings.toml
- walker: Consumer enumeration over workspace areas and the package store
"""
