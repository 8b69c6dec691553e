from pydantic import BaseModel, ConfigDict, Field


class GenerateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    topic: str | None = Field(default=None, description="Subject of the generated document.")
    doc_type: str = Field(default="eBook", alias="type", description="Kind of product, e.g. eBook, guide, checklist.")
    tone: str = Field(default="Professional", description="Writing tone used in every prompt.")
    sections_count: int = Field(default=5, alias="sectionsCount", description="Requested number of sections.")
    user_id: str | None = Field(default=None, alias="userId", description="Profile id from the auth provider.")


class GenerateResponse(BaseModel):
    text: str
    new_used_count: int = Field(serialization_alias="newUsedCount")


class UsageResponse(BaseModel):
    user_id: str = Field(serialization_alias="userId")
    generations_used: int = Field(serialization_alias="generationsUsed")
    limit: int
    is_pro: bool = Field(serialization_alias="isPro")
    remaining: int | None


class ErrorResponse(BaseModel):
    error: str
