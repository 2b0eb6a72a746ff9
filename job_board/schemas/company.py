from typing import Optional

from job_board.schemas.base import ApiModel


class Company(ApiModel):
    id: Optional[int] = None
    name: str
    description: Optional[str] = None
    location: Optional[str] = None
    email: Optional[str] = None
    phone_number: Optional[str] = None
    website: Optional[str] = None
    employer_id: Optional[int] = None
