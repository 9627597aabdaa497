"""
Authentication Models

Strongly-typed user context produced after bearer-token verification.
"""

from pydantic import BaseModel, Field, ConfigDict


class UserContext(BaseModel):
    """
    Authenticated user context derived from a verified JWT.

    The user id scopes every persisted chat and message.
    """

    user_id: str = Field(
        ...,
        min_length=1,
        description="Account identifier (the token's 'userId' claim).",
    )

    username: str = Field(
        default="",
        description="Display name carried by the token, if any.",
    )

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",             # Prevents claim injection via unexpected fields
    )
