"""Wire-format transpiler implementations."""

from chatbridge.core.interface.transpilers.claude import ClaudeTranspiler
from chatbridge.core.interface.transpilers.gemini import GeminiTranspiler
from chatbridge.core.interface.transpilers.ollama import OllamaTranspiler
from chatbridge.core.interface.transpilers.openai import OpenAITranspiler

__all__ = ["ClaudeTranspiler", "GeminiTranspiler", "OllamaTranspiler", "OpenAITranspiler"]
