"""Admin CLI for the pouch LLM proxy: API keys, providers and middlewares."""

__version__ = "0.1.0"
