"""
MCP tools for the Kitchen MCP server
"""
