import logging
from typing import Any, Dict, List, Optional, Union

import httpx

from services.assessment_engine.core.config import api_settings
from services.assessment_engine.loader import loaded_assessment_from_document, question_from_document
from services.assessment_engine.models import LoadedAssessment, QuestionDefinition, SubmissionPayload

logger = logging.getLogger(__name__)

QUESTION_PATH = "/admin/question"
ASSESSMENT_PATH = "/admin/assessment"


class ApiResponseError(RuntimeError):
    """The admin API answered, but with an error envelope or an unusable body."""
    pass


class AssessmentApiClient:
    """
    AssessmentBackend implementation for the admin REST API.

    Responses are wrapped in an `{error, message, results}` envelope. HTTP
    and transport failures are logged and re-raised unchanged.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        token: Optional[str] = None,
        question_page_limit: Optional[int] = None,
    ):
        self.base_url = (base_url or api_settings.base_url).rstrip("/")
        self.timeout = timeout if timeout is not None else api_settings.timeout
        self.token = token if token is not None else api_settings.token
        self.question_page_limit = question_page_limit or api_settings.question_page_limit

    def _headers(self) -> Dict[str, str]:
        headers = {
            'Content-Type': 'application/json',
            'Accept': 'application/json',
        }
        if self.token:
            headers['Authorization'] = f"Bearer {self.token}"
        return headers

    async def _request(self, method: str, path: str, **kwargs) -> Any:
        url = f"{self.base_url}{path}"
        async with httpx.AsyncClient() as client:
            try:
                logger.debug(f"Sending {method} request to {url}")
                response = await client.request(
                    method,
                    url,
                    headers=self._headers(),
                    timeout=self.timeout,
                    **kwargs
                )
                response.raise_for_status()
            except httpx.HTTPStatusError as e:
                logger.error(f"HTTP error from {method} {url}: {e.response.status_code} - {e.response.text}")
                raise
            except httpx.RequestError as e:
                logger.error(f"Request error for {method} {url}: {e}")
                raise

        body = response.json()
        if not isinstance(body, dict):
            raise ApiResponseError(f"Invalid response from server for {method} {url}")
        if body.get("error") is True:
            raise ApiResponseError(str(body.get("message") or f"{method} {url} failed"))
        return body.get("results")

    async def load_domain_questions(self, domain_id: str) -> List[QuestionDefinition]:
        params = {
            'page': '1',
            'limit': str(self.question_page_limit),
            'domain': domain_id,
            'isActive': 'true',
        }
        results = await self._request("GET", QUESTION_PATH, params=params)
        if not isinstance(results, dict) or not isinstance(results.get("data"), list):
            raise ApiResponseError("Invalid response from server")
        questions = [question_from_document(doc) for doc in results["data"]]
        logger.info(f"Fetched {len(questions)} question(s) for domain '{domain_id}'")
        return questions

    async def load_assessment(self, assessment_id: str) -> LoadedAssessment:
        results = await self._request("GET", f"{ASSESSMENT_PATH}/{assessment_id}")
        if not isinstance(results, dict) or not isinstance(results.get("assessment"), dict):
            raise ApiResponseError("Invalid response from server")
        return loaded_assessment_from_document(results["assessment"])

    async def _save(self, payload: SubmissionPayload) -> str:
        body = payload.to_wire()
        if payload.id:
            results = await self._request("PUT", f"{ASSESSMENT_PATH}/update", json=body)
        else:
            results = await self._request("POST", ASSESSMENT_PATH, json=body)
        # The API may answer a successful save with `results: null`
        assessment_id = results.get("_id") if isinstance(results, dict) else None
        if not assessment_id and not payload.id:
            logger.warning("Backend saved the assessment without returning its id")
        return assessment_id or payload.id or ""

    async def submit_draft(self, payload: SubmissionPayload) -> str:
        return await self._save(payload)

    async def submit_complete(self, payload: SubmissionPayload) -> str:
        return await self._save(payload)

    async def delete_assessment(self, assessment_id: Union[str, List[str]]) -> None:
        ids = ",".join(assessment_id) if isinstance(assessment_id, list) else assessment_id
        await self._request("DELETE", f"{ASSESSMENT_PATH}/delete/{ids}")
        logger.info(f"Deleted assessment(s) {ids}")
