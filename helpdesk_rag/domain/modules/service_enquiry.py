"""Service enquiry routing: department, priority and SLA by keyword scan."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from ..services.references import mint_reference


@dataclass(frozen=True)
class Department:
    name: str
    priority: str  # low | medium | high | urgent
    response_time: str
    contact_email: str
    contact_phone: str


@dataclass(frozen=True)
class EnquiryResult:
    success: bool
    ticket_number: str
    department: str
    priority: str
    response_time: str
    contact_email: str
    contact_phone: str
    message: str


# first hit wins, order matters
ROUTING_RULES: tuple[tuple[tuple[str, ...], Department], ...] = (
    (
        ("product", "technical", "defect", "broken", "damaged", "not working", "quality"),
        Department(
            "Product Support",
            "high",
            "4-6 hours",
            "support@karnatakaenterprises.com",
            "+91-80-1234-5678",
        ),
    ),
    (
        ("warranty", "guarantee", "replacement"),
        Department(
            "Warranty Services",
            "medium",
            "12-24 hours",
            "warranty@karnatakaenterprises.com",
            "+91-80-1234-5679",
        ),
    ),
    (
        ("bill", "payment", "invoice", "refund", "charge"),
        Department(
            "Billing & Accounts",
            "high",
            "6-8 hours",
            "billing@karnatakaenterprises.com",
            "+91-80-1234-5680",
        ),
    ),
    (
        ("complaint", "escalate", "manager", "dissatisfied", "unhappy"),
        Department(
            "Customer Relations",
            "urgent",
            "2-4 hours",
            "escalations@karnatakaenterprises.com",
            "+91-80-1234-5681",
        ),
    ),
    (
        ("bulk", "wholesale", "business", "quote", "quotation"),
        Department(
            "Sales & Business Development",
            "medium",
            "24 hours",
            "sales@karnatakaenterprises.com",
            "+91-80-1234-5682",
        ),
    ),
)

DEFAULT_DEPARTMENT = Department(
    "Customer Service",
    "low",
    "24-48 hours",
    "customercare@karnatakaenterprises.com",
    "+91-80-1234-5677",
)


def classify_department(enquiry_type: str | None, description: str | None) -> Department:
    text = f"{enquiry_type or ''} {description or ''}".lower()
    for keywords, department in ROUTING_RULES:
        if any(kw in text for kw in keywords):
            return department
    return DEFAULT_DEPARTMENT


def route_enquiry(
    enquiry_type: str | None, description: str | None, now: datetime
) -> EnquiryResult:
    dept = classify_department(enquiry_type, description)
    ticket = mint_reference("TKT", now, digits=8)
    return EnquiryResult(
        success=True,
        ticket_number=ticket,
        department=dept.name,
        priority=dept.priority,
        response_time=dept.response_time,
        contact_email=dept.contact_email,
        contact_phone=dept.contact_phone,
        message=(
            "Your service enquiry has been registered successfully. "
            f"Ticket number: {ticket}. Our {dept.name} team will contact you "
            f"within {dept.response_time}."
        ),
    )
