"""
Fixed catalogs shared by the ORM models, request schemas and services.

WorkDomain is the single source of truth for the domain registry: the
startup seeding routine and work_domain validation both read from it.
"""

from enum import Enum
from typing import List


class WorkDomain(str, Enum):
    ACCOUNTING = "Accounting"
    ADMINISTRATION = "Administration & Office Support"
    ADVERTISING = "Advertising, Arts & Media"
    BANKING = "Banking & Financial Services"
    CALL_CENTRE = "Call Centre & Customer Service"
    MANAGEMENT = "CEO & General Management"
    COMMUNITY_SERVICES = "Community Services & Development"
    CONSTRUCTION = "Construction"
    CONSULTING = "Consulting & Strategy"
    DESIGN = "Design & Architecture"
    EDUCATION = "Education & Training"
    ENGINEERING = "Engineering"
    FARMING = "Farming, Animals & Conservation"
    GOVERNMENT = "Government & Defence"
    EMERGENCY_SERVICES = "Emergency Services"
    HEALTHCARE = "Healthcare & Medical"
    HOSPITALITY = "Hospitality & Tourism"
    HUMAN_RESOURCES = "Human Resources & Recruitment"
    INFORMATION = "Information & Communication"
    INSURANCE = "Insurance & Superannuation"
    LEGAL = "Legal"
    MANUFACTURING = "Manufacturing, Transport & Logistics"
    MARKETING = "Marketing & Communications"
    MINING = "Mining, Resources & Energy"
    REAL_ESTATE = "Real Estate & Property"
    RETAIL = "Retail & Consumer Products"
    SALES = "Sales"
    SCIENCE = "Science & Technology"
    SELF_EMPLOYMENT = "Self Employment"
    SPORT = "Sport & Recreation"
    TRADES = "Trades & Services"

    @classmethod
    def names(cls) -> List[str]:
        return [member.value for member in cls]


class Gender(str, Enum):
    MALE = "Male"
    FEMALE = "Female"
    OTHER = "Other"


class Pronouns(str, Enum):
    HE_HIM = "He/Him"
    SHE_HER = "She/Her"
    THEY_THEM = "They/Them"


class Qualification(str, Enum):
    HIGH_SCHOOL = "High School"
    BACHELORS = "Bachelors"
    MASTERS = "Masters"
    PHD = "PhD"


class JobType(str, Enum):
    FULL_TIME = "Full-time"
    PART_TIME = "Part-time"
    CONTRACT = "Contract"
    INTERNSHIP = "Internship"


class EmploymentType(str, Enum):
    FULL_TIME = "Full-time"
    PART_TIME = "Part-time"
    CONTRACT = "Contract"
    INTERNSHIP = "Internship"
    REMOTE = "Remote"


class WorkEnvironment(str, Enum):
    STARTUP = "Startup"
    CORPORATE = "Corporate"
    NGO = "NGO"
    FREELANCE = "Freelance"
    REMOTE = "Remote"
