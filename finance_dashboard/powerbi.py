"""
Power BI client used by the sync job

Authenticates with an Azure AD client-credentials grant and runs DAX
queries against one dataset through the executeQueries endpoint.
"""
import logging

import requests
from django.conf import settings

from .exceptions import ConfigurationError, UpstreamError

logger = logging.getLogger(__name__)

TOKEN_URL = "https://login.microsoftonline.com/{tenant_id}/oauth2/v2.0/token"
QUERY_URL = "https://api.powerbi.com/v1.0/myorg/groups/{workspace_id}/datasets/{dataset_id}/executeQueries"

DEFAULT_SCOPE = "https://analysis.windows.net/powerbi/api/.default"
REQUIRED_SETTINGS = ('TENANT_ID', 'CLIENT_ID', 'CLIENT_SECRET', 'WORKSPACE_ID', 'DATASET_ID')


class PowerBIClient:

    def __init__(self, tenant_id, client_id, client_secret, workspace_id, dataset_id,
                 scope=DEFAULT_SCOPE, timeout=None):
        self.tenant_id = tenant_id
        self.client_id = client_id
        self.client_secret = client_secret
        self.workspace_id = workspace_id
        self.dataset_id = dataset_id
        self.scope = scope
        self.timeout = timeout

    @classmethod
    def from_settings(cls):
        config = settings.POWERBI
        missing = [f"POWERBI_{name}" for name in REQUIRED_SETTINGS if not config.get(name)]
        if missing:
            raise ConfigurationError(f"Missing configuration: {', '.join(missing)}")
        return cls(
            tenant_id=config['TENANT_ID'],
            client_id=config['CLIENT_ID'],
            client_secret=config['CLIENT_SECRET'],
            workspace_id=config['WORKSPACE_ID'],
            dataset_id=config['DATASET_ID'],
            scope=config.get("SCOPE") or DEFAULT_SCOPE,
            timeout=config.get('TIMEOUT'),
        )

    def acquire_token(self):
        """Client-credentials grant; returns the bearer token"""
        response = requests.post(
            TOKEN_URL.format(tenant_id=self.tenant_id),
            data={
                "grant_type": "client_credentials",
                "client_id": self.client_id,
                "client_secret": self.client_secret,
                "scope": self.scope,
            },
            headers={"Content-Type": "application/x-www-form-urlencoded"},
            timeout=self.timeout,
        )
        if not response.ok:
            raise UpstreamError("Auth", response.status_code, response.text)
        try:
            return response.json()["access_token"]
        except (ValueError, KeyError):
            raise UpstreamError("Auth", response.status_code, response.text) from None

    def execute_query(self, token, dax):
        """Run one DAX query and return the rows of its first table"""
        response = requests.post(
            QUERY_URL.format(workspace_id=self.workspace_id, dataset_id=self.dataset_id),
            json={
                "queries": [{"query": dax}],
                "serializerSettings": {"includeNulls": True},
            },
            headers={
                "Authorization": f"Bearer {token}",
                "Content-Type": "application/json",
            },
            timeout=self.timeout,
        )
        if not response.ok:
            raise UpstreamError("Query", response.status_code, response.text)

        try:
            payload = response.json()
        except ValueError:
            raise UpstreamError("Query", response.status_code, response.text) from None
        try:
            return payload["results"][0]["tables"][0]["rows"] or []
        except (KeyError, IndexError, TypeError):
            return []

    def fetch_table(self, table_name, limit=10000):
        token = self.acquire_token()
        logger.info("Power BI token acquired")
        quoted = table_name.replace("'", "''")
        rows = self.execute_query(token, f"EVALUATE TOPN({limit}, '{quoted}')")
        logger.info("Received %d rows from %s", len(rows), table_name)
        return rows
