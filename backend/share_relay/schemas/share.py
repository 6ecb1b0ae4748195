from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class UploadResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    status: Literal["success"] = "success"
    unique_id: str = Field(..., alias="uniqueId")
    file_name: str = Field(..., alias="fileName")
    file_url: str = Field(..., alias="fileUrl")


class ErrorResponse(BaseModel):
    status: Literal["error"] = "error"
    message: str
