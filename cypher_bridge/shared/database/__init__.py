"""
Database package — centralised connection handler.
"""

from cypher_bridge.shared.database.neo4j_handler import Neo4jHandler

__all__ = ["Neo4jHandler"]
