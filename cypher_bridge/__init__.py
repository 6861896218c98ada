"""Cypher Bridge — natural-language questions answered with read-only Cypher over Neo4j."""

__version__ = "0.1.0"
