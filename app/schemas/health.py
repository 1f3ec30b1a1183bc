from pydantic import BaseModel, Field

class HealthCheck(BaseModel):
    """Health check response model."""
    status: str = Field(..., description="Service status (ok, degraded)")
    components: dict[str, str] = Field(..., description="Status of individual components (ok, disabled, down)")
    version: str = Field(..., description="Service version")
    upstream_url: str = Field(..., description="Antigravity base URL requests are forwarded to")
