from typing import Any

from pydantic import BaseModel, ConfigDict, Field


# --- Redirect Validation ---
class RedirectValidateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    from_path: str = Field(alias="from")
    to_path: str = Field(alias="to")
    status_code: int = 301
    site_id: str | None = None


class RedirectIssueModel(BaseModel):
    code: str
    message: str
    field: str | None = None


class RedirectValidateResponse(BaseModel):
    valid: bool
    chain: list[str] = Field(default_factory=list)
    errors: list[RedirectIssueModel] = Field(default_factory=list)
    error_kind: str | None = None

    def to_content(self) -> dict[str, Any]:
        return self.model_dump()
