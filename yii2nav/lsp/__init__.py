"""
LSP server for Yii2 view navigation.

This module provides:
- Content-Length framing over stdio or TCP
- JSON-RPC message decoding and lifecycle handling
- Go to definition for render() view names
"""

from .server import create_server, start_server

__all__ = ["create_server", "start_server"]
