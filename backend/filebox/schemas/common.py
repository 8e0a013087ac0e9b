"""Shared Pydantic schemas."""
from pydantic import BaseModel


class OkResponse(BaseModel):
    ok: bool = True
