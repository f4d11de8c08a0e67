"""Static opportunities shown alongside the ones extracted from email."""
from __future__ import annotations

from careerdesk.models import Opportunity

STATIC_OPPORTUNITIES: list[Opportunity] = [
    Opportunity(
        id="static-1",
        title="Senior Frontend Developer",
        company="TechCorp Inc.",
        location="San Francisco, CA",
        type="Full-time",
        salary="$120k - $160k",
        posted="2 days ago",
        description="We're looking for an experienced frontend developer to join our growing team...",
        skills=["React", "TypeScript", "Tailwind CSS", "Node.js"],
    ),
    Opportunity(
        id="static-2",
        title="Product Manager",
        company="InnovateLabs",
        location="New York, NY",
        type="Full-time",
        salary="$100k - $140k",
        posted="1 week ago",
        description="Join our product team to drive innovation and strategy...",
        skills=["Product Strategy", "Agile", "Analytics", "UX"],
    ),
    Opportunity(
        id="static-3",
        title="UX Designer",
        company="DesignStudio",
        location="Remote",
        type="Contract",
        salary="$80k - $100k",
        posted="3 days ago",
        description="Create amazing user experiences for our digital products...",
        skills=["Figma", "User Research", "Prototyping", "Design Systems"],
    ),
]


def list_static_opportunities(query: str | None = None) -> list[Opportunity]:
    """Catalog entries, optionally narrowed to those mentioning *query*."""
    if not query:
        return list(STATIC_OPPORTUNITIES)
    q = query.lower().strip()
    return [
        o for o in STATIC_OPPORTUNITIES
        if q in o.title.lower()
        or q in o.company.lower()
        or any(q in s.lower() for s in o.skills)
    ]
