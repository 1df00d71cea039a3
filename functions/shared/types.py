# Copyright 2025 Google LLC
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
# ==============================================================================

import re
from dataclasses import asdict, dataclass
from typing import Mapping, Optional

DEFAULT_SUBJECT = "No subject"
REQUIRED_CONTACT_FIELDS = ("name", "email", "message")
EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def _clean(value) -> str:
    if value is None:
        return ""
    return str(value).strip()


@dataclass
class ContactSubmission:
    """A contact form submission, as sent by the site and logged by the backend."""

    name: str
    email: str
    message: str
    subject: str = DEFAULT_SUBJECT

    @classmethod
    def from_fields(cls, fields: Mapping[str, Optional[str]]) -> "ContactSubmission":
        """Builds a submission from raw form fields, trimming every value."""
        return cls(
            name=_clean(fields.get("name")),
            email=_clean(fields.get("email")),
            message=_clean(fields.get("message")),
            subject=_clean(fields.get("subject")) or DEFAULT_SUBJECT,
        )

    def missing_fields(self) -> list[str]:
        return [name for name in REQUIRED_CONTACT_FIELDS if not getattr(self, name)]

    def has_valid_email(self) -> bool:
        return bool(EMAIL_PATTERN.match(self.email))

    def as_dict(self) -> dict:
        return asdict(self)
