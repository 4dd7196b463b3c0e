"""
Module: entries.py
Description: Batch send result models.
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class FailedEntry(BaseModel):
    """
    One entry the transport rejected during a batch send.

    Built from the transport's Failed item shape:
    {"Id": ..., "SenderFault": ..., "Code": ..., "Message": ...}
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: Optional[str] = Field(default=None, alias="Id", description="Batch entry id")
    code: Optional[str] = Field(default=None, alias="Code", description="Transport error code")
    message: Optional[str] = Field(default=None, alias="Message", description="Error description")
    sender_fault: bool = Field(
        default=False,
        alias="SenderFault",
        description="Whether the failure was caused by the request"
    )

    @classmethod
    def from_transport(cls, item: Dict[str, Any]) -> "FailedEntry":
        return cls.model_validate(item)
