"""Azure Boards MCP server: read-only work item tools for MCP clients."""
