"""
Streaming event schemas for Server-Sent Events.

Dependencies: pydantic
System role: Streaming protocol schemas
"""

from pydantic import BaseModel


class TokenEvent(BaseModel):
    """
    Single streamed answer fragment.

    Attributes:
        token: Text fragment as produced by the model
    """

    token: str

    def to_sse(self) -> str:
        """Format as an SSE frame: ``data: {"token": ...}`` followed by a blank line."""
        return f"data: {self.model_dump_json()}\n\n"
