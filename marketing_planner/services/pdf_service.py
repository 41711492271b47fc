"""Rendering of marketing plans as PDF documents."""

from io import BytesIO
from typing import List
from xml.sax.saxutils import escape

from pydantic import ValidationError
from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.units import inch
from reportlab.platypus import SimpleDocTemplate, Paragraph, Spacer, PageBreak

from marketing_planner.models.plan import GeneratedContent, Plan


class PlanRenderError(Exception):
    """Raised when a plan has nothing that can be rendered."""
    pass


def get_pdf_filename(plan: Plan) -> str:
    return f"marketing-plan-{plan.id}.pdf"


def _build_styles():
    styles = getSampleStyleSheet()
    return {
        "normal": styles["Normal"],
        "title": ParagraphStyle(
            "PlanTitle",
            parent=styles["Heading1"],
            fontSize=24,
            spaceAfter=12,
            alignment=TA_CENTER,
        ),
        "subtitle": ParagraphStyle(
            "PlanSubtitle",
            parent=styles["Normal"],
            fontSize=12,
            alignment=TA_CENTER,
            spaceAfter=4,
        ),
        "section": ParagraphStyle(
            "PlanSection",
            parent=styles["Heading2"],
            fontSize=18,
            spaceBefore=6,
            spaceAfter=12,
        ),
        "label": ParagraphStyle(
            "PlanLabel",
            parent=styles["Normal"],
            fontName="Helvetica-Bold",
            fontSize=12,
            spaceBefore=6,
            spaceAfter=3,
        ),
        "body": ParagraphStyle(
            "PlanBody",
            parent=styles["Normal"],
            fontSize=11,
            leftIndent=20,
            spaceAfter=6,
        ),
        "item": ParagraphStyle(
            "PlanItem",
            parent=styles["Normal"],
            fontSize=11,
            leftIndent=30,
            spaceAfter=3,
        ),
    }


def _phase_heading(text: str, color) -> ParagraphStyle:
    return ParagraphStyle(
        f"Phase{text.split()[0].title()}",
        parent=getSampleStyleSheet()["Heading3"],
        fontSize=14,
        textColor=color,
        spaceBefore=10,
        spaceAfter=6,
    )


def _labelled(story: List, styles, label: str, text: str) -> None:
    story.append(Paragraph(escape(label), styles["label"]))
    story.append(Paragraph(escape(text or "-"), styles["body"]))


def _numbered(story: List, styles, items: List[str]) -> None:
    if not items:
        story.append(Paragraph("-", styles["item"]))
        return
    for index, item in enumerate(items, start=1):
        story.append(Paragraph(f"{index}. {escape(item)}", styles["item"]))


def render_plan_pdf(plan: Plan) -> bytes:
    """
    Render the generated content of a plan as a PDF.

    Args:
        plan: Normalized plan

    Returns:
        PDF file content

    Raises:
        PlanRenderError: the plan has no valid generated content
    """
    if not plan.generated_content:
        raise PlanRenderError("No valid generated content available")
    try:
        content = GeneratedContent.model_validate(plan.generated_content)
    except ValidationError as e:
        raise PlanRenderError(f"Generated content is incomplete: {e.error_count()} invalid fields")

    buffer = BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=A4,
        leftMargin=50,
        rightMargin=50,
        topMargin=50,
        bottomMargin=50,
        title=f"Marketing Plan {plan.id}",
        author="Marketing Plan Generator",
    )
    styles = _build_styles()
    story: List = []

    # Title block
    story.append(Paragraph("Marketing Plan", styles["title"]))
    story.append(Paragraph(f"Plan ID: {escape(plan.id)}", styles["subtitle"]))
    story.append(Paragraph(f"Generated on: {plan.created_at.strftime('%d %B %Y')}", styles["subtitle"]))
    story.append(Spacer(1, 0.4 * inch))

    # One-page plan
    one_page = content.one_page_plan
    story.append(Paragraph("One-Page Marketing Plan", styles["section"]))

    story.append(Paragraph("BEFORE (Prospects)", _phase_heading("before", colors.blue)))
    _labelled(story, styles, "Target Market:", one_page.before.target_market)
    _labelled(story, styles, "Message:", one_page.before.message)
    story.append(Paragraph("Media:", styles["label"]))
    _numbered(story, styles, one_page.before.media)

    story.append(Paragraph("DURING (Leads)", _phase_heading("during", colors.green)))
    _labelled(story, styles, "Lead Capture:", one_page.during.lead_capture)
    _labelled(story, styles, "Lead Nurture:", one_page.during.lead_nurture)
    _labelled(story, styles, "Sales Conversion:", one_page.during.sales_conversion)

    story.append(Paragraph("AFTER (Customers)", _phase_heading("after", colors.purple)))
    _labelled(story, styles, "Deliver Experience:", one_page.after.deliver_experience)
    _labelled(story, styles, "Lifetime Value:", one_page.after.lifetime_value)
    _labelled(story, styles, "Referrals:", one_page.after.referrals)

    # Implementation guide
    guide = content.implementation_guide
    story.append(PageBreak())
    story.append(Paragraph("Implementation Guide", styles["section"]))
    _labelled(story, styles, "Executive Summary:", guide.executive_summary)
    _labelled(story, styles, "Phase 1 (First 30 Days):", guide.action_plans.phase1)
    _labelled(story, styles, "Phase 2 (Days 31-90):", guide.action_plans.phase2)
    _labelled(story, styles, "Phase 3 (Days 91-180):", guide.action_plans.phase3)
    if guide.timeline:
        _labelled(story, styles, "Timeline:", guide.timeline)
    if guide.kpis:
        _labelled(story, styles, "KPIs:", guide.kpis)

    # Strategic insights
    insights = content.strategic_insights
    story.append(PageBreak())
    story.append(Paragraph("Strategic Insights", styles["section"]))
    story.append(Paragraph("Strengths:", _phase_heading("strengths", colors.green)))
    _numbered(story, styles, insights.strengths)
    story.append(Paragraph("Opportunities:", _phase_heading("opportunities", colors.blue)))
    _numbered(story, styles, insights.opportunities)
    story.append(Paragraph("Key Risks:", _phase_heading("risks", colors.red)))
    _numbered(story, styles, insights.risks)

    doc.build(story)
    return buffer.getvalue()
