"""FastAPI dependencies resolving the pipeline components built at startup."""

from fastapi import Request

from cypher_bridge.pipeline import CypherConverter, QueryExecutor


def get_converter(request: Request) -> CypherConverter:
    return request.app.state.converter


def get_executor(request: Request) -> QueryExecutor:
    return request.app.state.executor
