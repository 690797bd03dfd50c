from findx.models.user import User, Resume
from findx.models.domain import Domain, DomainMember

__all__ = ["User", "Resume", "Domain", "DomainMember"]
