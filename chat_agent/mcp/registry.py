"""Shared FastMCP instance that auto-executing tools register against."""

from fastmcp import FastMCP

mcp = FastMCP("chat-agent")
