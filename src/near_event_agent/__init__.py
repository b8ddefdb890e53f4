"""near_event_agent - watches NEAR contract events and answers them via MCP sampling."""

__version__ = "0.1.0"
