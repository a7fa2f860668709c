"""Adawat: HTTP helpers around a local Ollama server."""
