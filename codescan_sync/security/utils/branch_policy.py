#
# Copyright 2026 ABSA Group Limited
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
#

"""Branch policy – decides whether an alert on a branch may produce a new
tracked issue.

Whether an ``appeared_in_branch`` event may *update* an existing issue is a
separate rule owned by the event processor.
"""

from .config import SyncConfig
from .constants import BranchStrategy


def should_track(strategy: BranchStrategy, main_branch: str, branch: str) -> bool:
    if strategy == BranchStrategy.ALL_BRANCHES:
        return True
    # MAIN_ONLY and MAIN_WITH_BRANCH_UPDATES both create for the main branch only.
    return branch == main_branch


def should_track_for(config: SyncConfig, branch: str) -> bool:
    return should_track(config.branch_strategy, config.main_branch, branch)
