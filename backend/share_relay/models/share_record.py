from pydantic import BaseModel, ConfigDict


class ShareRecord(BaseModel):
    """A stored file name and the public URL of its blob."""

    model_config = ConfigDict(frozen=True)

    file_name: str
    file_url: str
