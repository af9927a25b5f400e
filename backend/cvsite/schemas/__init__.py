from cvsite.schemas.common import ErrorResponse, HealthResponse, PageResponse

__all__ = ["ErrorResponse", "HealthResponse", "PageResponse"]
