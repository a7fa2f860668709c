from __future__ import annotations

from fastapi import HTTPException


class ApiError(HTTPException):
    """HTTP error whose ``detail`` is sent back as the plain-text body."""

    def __init__(self, status_code: int, message: str):
        super().__init__(status_code=status_code, detail=message)


def err_message_empty() -> ApiError:
    return ApiError(400, "Message cannot be empty.")


def err_no_model() -> ApiError:
    return ApiError(400, "No model specified and no default model configured.")


def err_ollama_api(exc: Exception) -> ApiError:
    return ApiError(500, f"Ollama API Error: {exc}")


def err_network(exc: Exception) -> ApiError:
    return ApiError(
        500,
        f"Network Error connecting to Ollama: {exc}. Is Ollama server running?",
    )


def err_unexpected(exc: Exception) -> ApiError:
    return ApiError(500, f"An unexpected error occurred: {exc}")
