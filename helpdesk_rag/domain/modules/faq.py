"""Static FAQ knowledge base with keyword scoring."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class FAQEntry:
    keywords: tuple[str, ...]
    question: str
    answer: str
    category: str
    related_questions: tuple[str, ...] = ()


@dataclass(frozen=True)
class FAQResult:
    question: str
    answer: str
    category: str
    related_questions: tuple[str, ...]
    score: int


FAQ_ENTRIES: tuple[FAQEntry, ...] = (
    FAQEntry(
        keywords=("shipping", "delivery", "how long", "when will", "arrive"),
        question="How long does shipping take?",
        answer=(
            "Standard shipping takes 3-5 business days within India. Express shipping "
            "(1-2 days) is available for major cities. Free shipping on orders above ₹500."
        ),
        category="Shipping",
        related_questions=(
            "Do you ship internationally?",
            "What are the shipping charges?",
            "Can I track my order?",
        ),
    ),
    FAQEntry(
        keywords=("return", "exchange", "policy", "send back"),
        question="What is your return policy?",
        answer=(
            "We offer a 30-day return policy. Items must be unused, in original packaging "
            "with tags attached. Return shipping is free for defective items. Refunds are "
            "processed within 5-7 business days."
        ),
        category="Returns",
        related_questions=(
            "How do I initiate a return?",
            "What items cannot be returned?",
            "When will I get my refund?",
        ),
    ),
    FAQEntry(
        keywords=("payment", "pay", "methods", "cod", "card", "upi"),
        question="What payment methods do you accept?",
        answer=(
            "We accept Credit/Debit Cards, UPI, Net Banking, Wallets (Paytm, PhonePe), and "
            "Cash on Delivery (COD). COD available for orders below ₹10,000."
        ),
        category="Payment",
        related_questions=(
            "Is COD available?",
            "Are payments secure?",
            "Can I pay in installments?",
        ),
    ),
    FAQEntry(
        keywords=("warranty", "guarantee", "defective", "damaged"),
        question="Do products come with warranty?",
        answer=(
            "Yes, all products come with manufacturer warranty. Electronics: 1 year, "
            "Appliances: 2 years, Industrial equipment: 3 years. We also offer extended "
            "warranty options."
        ),
        category="Warranty",
        related_questions=(
            "How do I claim warranty?",
            "What does warranty cover?",
            "Can I extend warranty?",
        ),
    ),
    FAQEntry(
        keywords=("contact", "support", "help", "customer service", "phone", "email"),
        question="How can I contact customer support?",
        answer=(
            "Email: support@karnatakaenterprises.com | Phone: +91-80-1234-5678 "
            "(Mon-Sat, 9 AM - 6 PM) | WhatsApp: +91-98765-43210 | Live Chat: Available on website"
        ),
        category="Support",
        related_questions=(
            "What are your business hours?",
            "Do you have a physical store?",
            "How do I track my complaint?",
        ),
    ),
    FAQEntry(
        keywords=("bulk", "wholesale", "business", "b2b", "corporate"),
        question="Do you offer bulk/wholesale pricing?",
        answer=(
            "Yes! We offer special pricing for bulk orders (50+ units) and corporate clients. "
            "Contact our B2B team at b2b@karnatakaenterprises.com or call +91-80-1234-5679 "
            "for quotes."
        ),
        category="Business",
        related_questions=(
            "What is the minimum order quantity?",
            "Do you provide invoices?",
            "Can I get credit terms?",
        ),
    ),
    FAQEntry(
        keywords=("cancel", "cancellation", "order cancel"),
        question="Can I cancel my order?",
        answer=(
            "Yes, you can cancel orders before they are shipped. Once shipped, cancellation "
            "is not possible but you can return after delivery. No cancellation charges for "
            "orders cancelled within 24 hours."
        ),
        category="Orders",
        related_questions=(
            "How do I cancel my order?",
            "Will I get full refund?",
            "What if order is already shipped?",
        ),
    ),
)


def score_entry(entry: FAQEntry, query_lower: str) -> int:
    return sum(1 for kw in entry.keywords if kw in query_lower)


def match_faq(query: str, entries: tuple[FAQEntry, ...] = FAQ_ENTRIES) -> FAQResult:
    """Best keyword match; ties keep the earlier entry, no hits yield the first one."""
    q = (query or "").lower()
    best, best_score = entries[0], 0
    for entry in entries:
        score = score_entry(entry, q)
        if score > best_score:
            best, best_score = entry, score
    return FAQResult(
        question=best.question,
        answer=best.answer,
        category=best.category,
        related_questions=best.related_questions,
        score=best_score,
    )
