"""MCP tool surface: text handlers, sampling channel and server."""
