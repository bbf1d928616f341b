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

"""Microsoft Intune (Graph API) integration for minossync.

Public API:

GraphClient : class
    Reads and updates device compliance policies.
CompliancePolicy : dataclass
    id, display name, osMinimumVersion and @odata.type of a policy.

"""

from .graph import GRAPH_BASE_URL, CompliancePolicy, GraphClient

__all__ = ["GRAPH_BASE_URL", "CompliancePolicy", "GraphClient"]
