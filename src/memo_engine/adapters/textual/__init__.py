"""Textual host adapter. The runnable demo lives in ``app`` and needs textual."""

from .controller import TextualMemoAdapter, TextualUIHooks

__all__ = ["TextualMemoAdapter", "TextualUIHooks"]
