"""MCP-style protocol server for aishell tools."""
