"""
Domain Registry Models - work-domain catalog and its reverse index

Catalog rows are upserted for every WorkDomain value and never deleted.
domain_members maps each domain to the emails of users whose work_domain
points at it; the composite primary key makes membership a set.

Membership rows are only written through findx.services.domains.
"""

from sqlalchemy import Column, DateTime, ForeignKey, String
from sqlalchemy.sql import func
from findx.database import Base


class Domain(Base):
    __tablename__ = "domains"

    name = Column(String(100), primary_key=True)
    created_at = Column(DateTime, server_default=func.now())


class DomainMember(Base):
    __tablename__ = "domain_members"

    domain_name = Column(String(100), ForeignKey("domains.name", ondelete="CASCADE"), primary_key=True)
    email = Column(String(320), primary_key=True, index=True)
    added_at = Column(DateTime, server_default=func.now())
