"""Chat API forwarding chat requests to a local Ollama server.

Lists local models and buffers streamed chat replies into one response body.
"""

__all__ = []
