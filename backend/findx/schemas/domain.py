from pydantic import BaseModel


class DomainUpdate(BaseModel):
    domain: str


class DomainSummary(BaseModel):
    name: str
    member_count: int


class DomainListResponse(BaseModel):
    success: bool
    domains: list[DomainSummary]


class DomainMembersResponse(BaseModel):
    success: bool
    name: str
    user_emails: list[str]
