"""LLM access for model-driven players."""
