"""Cypher Tools — MCP server exposing the generate and query tools."""
