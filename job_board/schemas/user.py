from typing import Optional

from job_board.schemas.base import ApiModel


class UserProfile(ApiModel):
    id: Optional[int] = None
    username: Optional[str] = None
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone_number: Optional[str] = None
