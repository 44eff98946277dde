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

"""Webhook signature verification (``X-Hub-Signature-256``)."""

import hashlib
import hmac

SIGNATURE_HEADER = "X-Hub-Signature-256"
SIGNATURE_PREFIX = "sha256="


def compute_signature(secret: str, payload: bytes) -> str:
    digest = hmac.new(secret.encode("utf-8"), payload, hashlib.sha256).hexdigest()
    return f"{SIGNATURE_PREFIX}{digest}"


class SignatureGuard:
    """HMAC-SHA256 check of the raw request body against a shared secret."""

    def __init__(self, secret: str) -> None:
        if not secret:
            raise ValueError("webhook secret must not be empty")
        self._secret = secret

    def verify(self, payload: bytes, signature: str | None) -> bool:
        """True only when *signature* equals ``sha256=<hex hmac>`` of *payload*.

        The comparison is constant-time; absent or malformed signatures are
        rejected.
        """
        if not signature:
            return False
        expected = compute_signature(self._secret, payload)
        return hmac.compare_digest(signature.encode("utf-8"), expected.encode("utf-8"))
