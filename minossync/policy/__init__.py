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

"""Selection and update policies for minossync.

Modules:

selection : module
    Trailing-window policy deciding which version becomes the minimum.
updates : module
    Whether and how the compliance policy gets rewritten.

Public API:

SelectionPolicy : class
    versions_below / use_minor_versions / pin_to_major_version settings.
should_update : function
    Exact-string comparison of stored and computed minimum versions.
odata_type_for : function
    Graph compliance policy schema type for a platform.

Example:
    from minossync.policy import SelectionPolicy, should_update

    policy = SelectionPolicy(versions_below=1, use_minor_versions=True)
    should_update(current="15.0.1", target="15.1.0")  # True

"""

from .selection import SelectionPolicy
from .updates import POLICY_ODATA_TYPES, odata_type_for, should_update

__all__ = ["SelectionPolicy", "POLICY_ODATA_TYPES", "odata_type_for", "should_update"]
