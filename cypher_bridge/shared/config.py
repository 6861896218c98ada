"""
Base configuration for the HTTP gateway and the MCP tool server.

Uses Pydantic Settings for environment-based configuration.
Each service extends BaseServiceSettings with its own fields.
"""

from pydantic_settings import BaseSettings


class BaseServiceSettings(BaseSettings):
    """Settings shared by every Cypher Bridge process."""

    service_name: str = "cypher-bridge"

    # Neo4j connection
    neo4j_uri: str = "bolt://localhost:7687"
    neo4j_username: str = "neo4j"
    neo4j_password: str = "password"
    neo4j_database: str = "neo4j"

    # Ollama generation endpoint
    ollama_url: str = "http://localhost:11434/api/generate"
    ollama_model: str = "llama3.2:latest"
    ollama_temperature: float = 0.1
    ollama_top_p: float = 0.9
    ollama_timeout_seconds: float = 120.0

    # Schema-describing system prompt, loaded once at startup
    system_prompt_path: str = "prompts/system.txt"

    # Logging
    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"
