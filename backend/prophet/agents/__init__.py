"""LLM agents used by Prophet."""
