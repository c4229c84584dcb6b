"""External service clients."""

from src.schedule_analyzer.services.gemini import GeminiClient

__all__ = ["GeminiClient"]
