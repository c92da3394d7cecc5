"""
Client for the managed backend that owns reports, users, file storage and
LLM inference. Nothing here holds state beyond the bearer token.
"""

import logging
from typing import Dict, List, Optional
from urllib.parse import quote

import requests
from fastapi.concurrency import run_in_threadpool
from pydantic import ValidationError

from coastal_monitor.api.models.errors import (
    AuthenticationRequired, BackendError, CreateFailure, InferenceFailure, UploadFailure
)
from coastal_monitor.api.models.schemas import HazardReport, User

logger = logging.getLogger(__name__)

USER_AGENT = 'CoastalHazardMonitor/1.0'


class ManagedBackendClient:
    def __init__(self, base_url, app_id, token=None, timeout=30, session=None):
        self.base_url = base_url.rstrip('/')
        self.app_id = app_id
        self.token = token
        self.timeout = timeout
        # one-off requests per call unless a session is handed in
        self.session = session

    def login_url(self, next_url='/'):
        return f"{self.base_url}/login?from_url={quote(next_url, safe='')}"

    def _url(self, path):
        return f"{self.base_url}/api/apps/{self.app_id}/{path.lstrip('/')}"

    def _headers(self):
        headers = {'User-Agent': USER_AGENT}
        if self.token:
            headers['Authorization'] = f'Bearer {self.token}'
        return headers

    def _request(self, method, path, **kwargs):
        url = self._url(path)
        logger.debug(f"{method} {url}")

        try:
            response = (self.session or requests).request(
                method, url, headers=self._headers(), timeout=self.timeout, **kwargs
            )
        except requests.RequestException as e:
            logger.error(f"Managed backend request failed: {method} {path}: {e}")
            raise BackendError(f"Managed backend unreachable: {e}") from e

        if response.status_code == 401:
            raise AuthenticationRequired(login_url=self.login_url())

        if response.status_code >= 400:
            logger.error(f"Response status: {response.status_code}")
            logger.error(f"Response body: {response.text[:200]}...")
            raise BackendError(
                f"Managed backend returned HTTP {response.status_code} for {path}",
                status_code=response.status_code
            )

        try:
            return response.json()
        except ValueError as e:
            raise BackendError(f"Managed backend returned invalid JSON for {path}") from e

    async def request(self, method, path, **kwargs):
        return await run_in_threadpool(self._request, method, path, **kwargs)


class HazardReportEntity:
    path = 'entities/HazardReport'

    def __init__(self, client: ManagedBackendClient):
        self.client = client

    async def list(self, sort='-created_date', limit=100) -> List[HazardReport]:
        data = await self.client.request('GET', self.path, params={'sort': sort, 'limit': limit})
        if isinstance(data, dict):
            data = data.get('items', [])

        reports = []
        for item in data:
            try:
                reports.append(HazardReport.model_validate(item))
            except ValidationError as e:
                record_id = item.get('id') if isinstance(item, dict) else None
                logger.warning(f"Skipping malformed report {record_id}: {e}")
        return reports

    async def create(self, record: Dict) -> HazardReport:
        try:
            data = await self.client.request('POST', self.path, json=record)
        except AuthenticationRequired:
            raise
        except BackendError as e:
            raise CreateFailure(str(e), status_code=e.status_code) from e
        return HazardReport.model_validate(data)


class UserEntity:
    def __init__(self, client: ManagedBackendClient):
        self.client = client

    async def me(self) -> User:
        if not self.client.token:
            raise AuthenticationRequired(login_url=self.client.login_url())
        data = await self.client.request('GET', 'entities/User/me')
        return User.model_validate(data)

    def login(self, next_url='/') -> str:
        return self.client.login_url(next_url)

    async def logout(self):
        # Tokens are issued by the hosted sign-in page; dropping ours ends the session here.
        self.client.token = None


class CoreIntegrations:
    def __init__(self, client: ManagedBackendClient):
        self.client = client

    async def upload_file(self, filename, content: bytes, content_type=None) -> Dict:
        try:
            data = await self.client.request(
                'POST', 'integration-endpoints/Core/UploadFile',
                files={'file': (filename, content, content_type or 'application/octet-stream')}
            )
        except AuthenticationRequired:
            raise
        except BackendError as e:
            raise UploadFailure(f"Upload of {filename} failed: {e}", status_code=e.status_code) from e

        if not data.get('file_url'):
            raise UploadFailure(f"Upload of {filename} returned no file_url")
        return data

    async def invoke_llm(self, prompt: str, response_json_schema: Optional[Dict] = None) -> Dict:
        payload = {'prompt': prompt}
        if response_json_schema:
            payload['response_json_schema'] = response_json_schema

        try:
            data = await self.client.request('POST', 'integration-endpoints/Core/InvokeLLM', json=payload)
        except AuthenticationRequired:
            raise
        except BackendError as e:
            raise InferenceFailure(f"LLM invocation failed: {e}", status_code=e.status_code) from e

        if not isinstance(data, dict):
            raise InferenceFailure("LLM invocation returned a non-object response")
        return data
