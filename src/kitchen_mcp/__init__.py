"""
Kitchen MCP - ingredient stock, recipes and production planning for a
meal delivery kitchen, served over the Model Context Protocol.
"""

__version__ = "0.1.0"
