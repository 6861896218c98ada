"""
Exception hierarchy for the conversion and execution pipeline.

Every pipeline failure inherits from CypherBridgeError so it can be
caught uniformly by the converter, the HTTP gateway and the MCP tools.
The ``stage`` attribute names the pipeline step that failed.
"""


class CypherBridgeError(Exception):
    """Base exception for all pipeline errors."""

    def __init__(self, message: str, stage: str = "unknown"):
        self.stage = stage
        self.message = message
        super().__init__(message)


class GatewayError(CypherBridgeError):
    """The language-model endpoint was unreachable or answered with an error."""

    def __init__(self, message: str, status_code: int | None = None, body: str | None = None):
        self.status_code = status_code
        self.body = body
        super().__init__(f"LLM gateway error: {message}", stage="llm_gateway")


class ExtractionError(CypherBridgeError):
    """No parseable JSON object could be located in the model completion."""

    def __init__(self, message: str, raw_text: str = ""):
        self.raw_text = raw_text
        super().__init__(f"Failed to parse LLM response: {message}", stage="extraction")


class ValidationError(CypherBridgeError):
    """The extracted JSON object does not match the expected shape."""

    def __init__(self, message: str):
        super().__init__(f"Invalid response format: {message}", stage="validation")


class SecurityError(CypherBridgeError):
    """The generated query violates the read-only policy."""

    def __init__(self, message: str, code: str, keyword: str | None = None):
        self.code = code
        self.keyword = keyword
        super().__init__(f"Security violation: {message}", stage="security")


class ExecutionError(CypherBridgeError):
    """Neo4j rejected the query or the connection failed."""

    def __init__(self, message: str, query: str):
        self.query = query
        super().__init__(message, stage="execution")


class PromptLoadError(CypherBridgeError):
    """The system prompt file could not be read at startup."""

    def __init__(self, message: str, path: str):
        self.path = path
        super().__init__(message, stage="prompt")
