"""Configuration management for Azure Boards MCP server."""
import os
from dotenv import load_dotenv
from fastmcp import FastMCP

load_dotenv()

# Global MCP instance - accessible everywhere
mcp = FastMCP("Azure Boards")

# Azure DevOps configuration
AZDO_ORG_URL = os.getenv("AZDO_ORG_URL", "")
AZDO_PAT = os.getenv("AZDO_PAT", "")  # PAT with Work Items (read) scope
AZDO_HTTP_TIMEOUT = float(os.getenv("AZDO_HTTP_TIMEOUT", "30"))

# Server runtime
AZDO_LOG_LEVEL = os.getenv("AZDO_LOG_LEVEL", "WARNING")
AZDO_MCP_TRANSPORT = os.getenv("AZDO_MCP_TRANSPORT", "stdio")
AZDO_MCP_HOST = os.getenv("AZDO_MCP_HOST", "127.0.0.1")
AZDO_MCP_PORT = int(os.getenv("AZDO_MCP_PORT", "8000"))

WIT_API_VERSION = "7.1"
COMMENTS_API_VERSION = "7.1-preview"

# The work items batch endpoint rejects more ids than this per call
WORK_ITEM_BATCH_SIZE = 200

MY_WORK_ITEM_STATES = ("Development", "In Review", "Merged", "New", "Requirements")


class ConfigurationError(RuntimeError):
    """Raised when required Azure DevOps settings are missing."""
