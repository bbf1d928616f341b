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

"""HTTP input/output for minossync.

Modules:

session : module
    requests.Session with retries plus JSON request helper.

Public API:

make_session : function
    Create a session with retry/backoff defaults.
request_json : function
    Send a request and decode its JSON body, normalizing transport errors.

Example:
    from minossync.io import make_session, request_json

    session = make_session()
    releases = request_json(session, "GET", "https://example.com/releases.json")

"""

from .session import describe_http_error, make_session, request_json

__all__ = ["describe_http_error", "make_session", "request_json"]
