"""Loads the system prompt that describes the graph schema and output contract."""

import logging
from pathlib import Path

from cypher_bridge.pipeline.models import PromptContext
from cypher_bridge.shared.exceptions import PromptLoadError

logger = logging.getLogger("cypher_bridge.prompt_store")


def load_prompt_context(path: str | Path) -> PromptContext:
    """Read the prompt file once at startup.

    Raises:
        PromptLoadError: If the file is missing, unreadable or empty.
    """
    prompt_path = Path(path)
    try:
        text = prompt_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise PromptLoadError(
            f"Cannot read system prompt at {prompt_path}: {exc}", path=str(prompt_path)
        ) from exc

    if not text.strip():
        raise PromptLoadError(f"System prompt at {prompt_path} is empty", path=str(prompt_path))

    logger.info("System prompt loaded from %s (%d chars)", prompt_path, len(text))
    return PromptContext(text=text, source=str(prompt_path))
