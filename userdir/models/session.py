"""
Login session model.
"""

from uuid import UUID

from pydantic import BaseModel, Field


class Session(BaseModel):
    """
    Session record held by the session store.

    The token is both the lookup key and a field of the record.
    """

    session_id: str = Field(..., description="Opaque session token")
    user_id: UUID = Field(..., description="Owning user identifier")
