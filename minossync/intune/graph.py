# Copyright 2025 Roger Cibrian
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Microsoft Graph compliance policy client for minossync.

Reads and updates the osMinimumVersion of an Intune device compliance
policy through the Graph deviceManagement endpoints.

Endpoints:

- GET   /deviceManagement/deviceCompliancePolicies/{id}
- PATCH /deviceManagement/deviceCompliancePolicies/{id}

The PATCH body must carry the policy's @odata.type discriminator
(e.g., "#microsoft.graph.macOSCompliancePolicy"), otherwise Graph rejects
the write with 400 Bad Request.

Example:
    Read and update a policy:
        ```python
        from minossync.auth import CredentialManager
        from minossync.intune import GraphClient

        client = GraphClient(CredentialManager().get_token)
        policy = client.get_compliance_policy("00000000-...")
        print(policy.display_name, policy.os_minimum_version)
        client.update_minimum_version(policy.id, "14.7.1", policy.odata_type)
        ```
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

import requests

from minossync.exceptions import NetworkError, PolicyError
from minossync.io import describe_http_error, make_session, request_json
from minossync.logging import get_global_logger

GRAPH_BASE_URL = "https://graph.microsoft.com/beta"
COMPLIANCE_POLICIES_PATH = "/deviceManagement/deviceCompliancePolicies"


@dataclass(frozen=True)
class CompliancePolicy:
    """The parts of a Graph compliance policy minossync cares about.

    Attributes:
        id: Policy id (GUID).
        display_name: Policy display name.
        os_minimum_version: Stored minimum OS version, None when unset.
        odata_type: Graph schema discriminator.
    """

    id: str
    display_name: str
    os_minimum_version: str | None
    odata_type: str

    @classmethod
    def from_graph(cls, data: dict[str, Any]) -> CompliancePolicy:
        return cls(
            id=str(data.get("id", "")),
            display_name=str(data.get("displayName", "")),
            os_minimum_version=data.get("osMinimumVersion") or None,
            odata_type=str(data.get("@odata.type", "")),
        )


class GraphClient:
    """Thin Graph client for compliance policy reads and writes.

    Args:
        token_provider: Callable returning a bearer token (e.g.,
            CredentialManager().get_token). Called on every request so
            refreshed tokens are picked up.
        base_url: Graph root including the API version.
        timeout: Per-request timeout in seconds.
        session: Optional preconfigured session (tests, proxies).
    """

    def __init__(
        self,
        token_provider: Callable[[], str],
        *,
        base_url: str = GRAPH_BASE_URL,
        timeout: int = 30,
        session: requests.Session | None = None,
    ) -> None:
        self._token_provider = token_provider
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._session = session or make_session()

    def _policy_url(self, policy_id: str) -> str:
        return f"{self.base_url}{COMPLIANCE_POLICIES_PATH}/{policy_id}"

    def _headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self._token_provider()}"}

    def get_compliance_policy(self, policy_id: str) -> CompliancePolicy:
        """Fetch a compliance policy by id.

        Raises:
            PolicyError: If the policy does not exist (404).
            NetworkError: For other HTTP or transport failures.
        """
        logger = get_global_logger()
        url = self._policy_url(policy_id)
        logger.verbose("GRAPH", f"GET {url}")
        try:
            data = request_json(
                self._session, "GET", url, headers=self._headers(), timeout=self.timeout
            )
        except requests.exceptions.HTTPError as err:
            if err.response is not None and err.response.status_code == 404:
                raise PolicyError(f"Compliance policy not found: {policy_id}") from err
            raise NetworkError(
                f"Failed to read compliance policy {policy_id}: "
                f"{describe_http_error(err)}"
            ) from err

        if not isinstance(data, dict):
            raise NetworkError(f"Unexpected Graph response for policy {policy_id}")

        policy = CompliancePolicy.from_graph(data)
        logger.verbose(
            "GRAPH",
            f"Policy {policy.display_name!r} ({policy.odata_type}) "
            f"osMinimumVersion={policy.os_minimum_version}",
        )
        return policy

    def update_minimum_version(
        self, policy_id: str, version: str, odata_type: str
    ) -> None:
        """Set osMinimumVersion on a compliance policy.

        Args:
            policy_id: Policy id.
            version: New minimum version (major.minor.patch).
            odata_type: Schema discriminator sent with the payload.

        Raises:
            PolicyError: If the policy does not exist (404).
            NetworkError: For other HTTP or transport failures.
        """
        logger = get_global_logger()
        url = self._policy_url(policy_id)
        payload = {"@odata.type": odata_type, "osMinimumVersion": version}
        logger.verbose("GRAPH", f"PATCH {url}")
        logger.debug("GRAPH", f"Payload: {payload}")
        try:
            request_json(
                self._session,
                "PATCH",
                url,
                headers=self._headers(),
                payload=payload,
                timeout=self.timeout,
                expect_body=False,
            )
        except requests.exceptions.HTTPError as err:
            if err.response is not None and err.response.status_code == 404:
                raise PolicyError(f"Compliance policy not found: {policy_id}") from err
            raise NetworkError(
                f"Failed to update compliance policy {policy_id}: "
                f"{describe_http_error(err)}"
            ) from err
