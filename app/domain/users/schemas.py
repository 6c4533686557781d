"""User management schemas"""

from pydantic import BaseModel


class UserStats(BaseModel):
    totalUsers: int
    customers: int
    providers: int
    admins: int
    verifiedUsers: int
    unverifiedUsers: int
