from pydantic import BaseModel, ConfigDict, Field


class AttackSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    # PKCS#7 can only express padding lengths up to 255.
    block_size: int = Field(default=8, ge=1, le=255)
    # Concurrent oracle queries per guess window; 1 keeps the search sequential.
    workers: int = Field(default=1, ge=1, le=256)
