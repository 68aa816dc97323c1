from __future__ import annotations

"""FastAPI integration answering errors with problem detail responses."""

from .handlers import install_problem_handlers, negotiate_media_type, problem_response

__all__ = ["install_problem_handlers", "negotiate_media_type", "problem_response"]
