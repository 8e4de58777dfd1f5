"""
Who is playing.

The identity provider sits in front of this service and forwards an opaque
user id (and optionally a display name) as request headers. No header, no user.
"""

from dataclasses import dataclass
from typing import Optional

from fastapi import Header


@dataclass(frozen=True)
class CurrentUser:
    id: str
    display_name: Optional[str] = None

    @property
    def first_name(self) -> str:
        if self.display_name and self.display_name.strip():
            return self.display_name.split()[0]
        return "User"


def current_user(
    x_user_id: Optional[str] = Header(None),
    x_user_name: Optional[str] = Header(None),
) -> Optional[CurrentUser]:
    if x_user_id is None or not x_user_id.strip():
        return None
    return CurrentUser(id=x_user_id.strip(), display_name=x_user_name)
