# HTTP adapter implementing AssessmentBackend against the admin API.

from .client import ApiResponseError, AssessmentApiClient

__all__ = ["ApiResponseError", "AssessmentApiClient"]
