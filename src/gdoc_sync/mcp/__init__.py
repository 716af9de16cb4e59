"""MCP stdio server exposing the folder sync operations as tools."""
