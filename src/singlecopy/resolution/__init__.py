"""Resolution of the singleton package from consumer directories.

This package contains:
- resolver: Node-style lookup of node_modules/<package> and entry-point resolution
- manifest: package.json parsing and version lookup
"""
