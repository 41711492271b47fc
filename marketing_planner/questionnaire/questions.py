"""
Static questionnaire content.

Square 0 collects the business context; squares 1-9 follow the one-page
marketing plan (before: target market, message, media; during: lead capture,
nurturing, conversion; after: experience, lifetime value, referrals).
"""

from typing import Dict, List, Tuple

from marketing_planner.models.question import (
    ConditionalRule,
    ConditionOperator,
    Question,
    QuestionType,
)


BUSINESS_CONTEXT_SQUARE = 0

SQUARE_TITLES: Dict[int, str] = {
    0: "Business Context",
    1: "Target Market",
    2: "Value Proposition",
    3: "Media Channels",
    4: "Lead Capture",
    5: "Lead Nurturing",
    6: "Sales Conversion",
    7: "Customer Experience",
    8: "Lifetime Value",
    9: "Referral System",
}


BUSINESS_CONTEXT_QUESTIONS: List[Question] = [
    Question(
        id="industry",
        square=0,
        text="Which industry does your business operate in?",
        type=QuestionType.SELECT,
        options=[
            "Professional Services", "E-commerce", "SaaS / Software", "Healthcare",
            "Real Estate", "Hospitality", "Manufacturing", "Education", "Financial Services", "Other",
        ],
        required=True,
    ),
    Question(
        id="business-model",
        square=0,
        text="What is your business model?",
        type=QuestionType.RADIO,
        options=["B2B", "B2C", "B2B2C", "Marketplace"],
        required=True,
    ),
    Question(
        id="company-size",
        square=0,
        text="How many people work in your company?",
        type=QuestionType.SELECT,
        options=["Just me", "2-10", "11-50", "51-200", "200+"],
        required=True,
    ),
    Question(
        id="years-in-operation",
        square=0,
        text="How long has the business been operating?",
        type=QuestionType.SELECT,
        options=["Pre-launch", "Less than 1 year", "1-3 years", "3-10 years", "10+ years"],
        required=True,
    ),
    Question(
        id="geographic-scope",
        square=0,
        text="What is your geographic reach?",
        type=QuestionType.SELECT,
        options=["Local", "Regional", "National", "International"],
        required=True,
    ),
    Question(
        id="primary-challenges",
        square=0,
        text="What are your biggest marketing challenges right now?",
        type=QuestionType.CHECKBOX,
        options=[
            "Not enough leads", "Low conversion rate", "Unclear messaging", "Limited budget",
            "No time for marketing", "Customer retention", "Measuring results",
        ],
        required=True,
        help_text="Select all that apply.",
    ),
    Question(
        id="marketing-maturity",
        square=0,
        text="How would you describe your marketing experience?",
        type=QuestionType.RADIO,
        options=["beginner", "intermediate", "advanced"],
        required=True,
    ),
    Question(
        id="marketing-budget",
        square=0,
        text="What is your monthly marketing budget?",
        type=QuestionType.SELECT,
        options=["Under $500", "$500-$2,000", "$2,000-$10,000", "$10,000+"],
        required=True,
    ),
    Question(
        id="time-availability",
        square=0,
        text="How many hours per week can you dedicate to marketing?",
        type=QuestionType.SELECT,
        options=["Less than 2", "2-5", "5-10", "10+"],
        required=True,
    ),
    Question(
        id="business-goals",
        square=0,
        text="What do you want to achieve in the next 12 months?",
        type=QuestionType.MULTISELECT,
        options=[
            "Increase revenue", "Enter new markets", "Launch a new product",
            "Improve brand awareness", "Grow customer base", "Increase retention",
        ],
        required=True,
    ),
]


QUESTIONNAIRE_QUESTIONS: List[Question] = [
    # Square 1: Target Market
    Question(
        id="target-customer",
        square=1,
        text="Describe your ideal customer.",
        type=QuestionType.TEXTAREA,
        required=True,
        placeholder="Age, role, income, location, what they care about...",
    ),
    Question(
        id="customer-pain-points",
        square=1,
        text="What problems does your ideal customer struggle with?",
        type=QuestionType.TEXTAREA,
        required=True,
    ),
    # Square 2: Value Proposition
    Question(
        id="core-problem",
        square=2,
        text="What core problem do you solve?",
        type=QuestionType.TEXTAREA,
        required=True,
    ),
    Question(
        id="unique-advantages",
        square=2,
        text="Why should customers choose you over alternatives?",
        type=QuestionType.TEXTAREA,
        required=True,
    ),
    Question(
        id="brand-personality",
        square=2,
        text="Which words best describe your brand personality?",
        type=QuestionType.CHECKBOX,
        options=["Professional", "Friendly", "Innovative", "Premium", "Affordable", "Playful", "Trustworthy"],
        required=False,
    ),
    # Square 3: Media Channels
    Question(
        id="current-channels",
        square=3,
        text="Which channels do you currently use to reach customers?",
        type=QuestionType.MULTISELECT,
        options=[
            "Social media", "Email", "Search (SEO)", "Paid advertising",
            "Events", "Referrals", "Print", "Partnerships",
        ],
        required=True,
    ),
    Question(
        id="paid-ads-budget",
        square=3,
        text="Roughly what share of your budget goes to paid advertising (%)?",
        type=QuestionType.RANGE,
        required=False,
        validation={"min": 0, "max": 100, "step": 5},
        conditional=ConditionalRule(
            field="current-channels",
            operator=ConditionOperator.INCLUDES,
            value="Paid advertising",
        ),
    ),
    # Square 4: Lead Capture
    Question(
        id="lead-capture-methods",
        square=4,
        text="How do you capture contact details of interested prospects?",
        type=QuestionType.CHECKBOX,
        options=["Website forms", "Lead magnets", "Landing pages", "Phone calls", "In person", "None yet"],
        required=True,
    ),
    Question(
        id="website-conversion-rate",
        square=4,
        text="What is your website conversion rate (%)?",
        type=QuestionType.RANGE,
        required=False,
        validation={"min": 0, "max": 50, "step": 1},
    ),
    # Square 5: Lead Nurturing
    Question(
        id="follow-up-process",
        square=5,
        text="How do you follow up with leads who are not ready to buy?",
        type=QuestionType.TEXTAREA,
        required=True,
    ),
    Question(
        id="crm-usage",
        square=5,
        text="Which CRM do you use, if any?",
        type=QuestionType.TEXT,
        required=False,
    ),
    # Square 6: Sales Conversion
    Question(
        id="sales-process",
        square=6,
        text="Walk us through your sales process.",
        type=QuestionType.TEXTAREA,
        required=True,
    ),
    Question(
        id="common-objections",
        square=6,
        text="What objections do prospects raise most often?",
        type=QuestionType.TEXTAREA,
        required=False,
    ),
    Question(
        id="pricing-strategy",
        square=6,
        text="How do you price your offer?",
        type=QuestionType.SELECT,
        options=["Fixed price", "Tiered packages", "Subscription", "Custom quotes", "Usage based"],
        required=True,
    ),
    # Square 7: Customer Experience
    Question(
        id="onboarding-process",
        square=7,
        text="What happens right after a customer buys?",
        type=QuestionType.TEXTAREA,
        required=True,
    ),
    Question(
        id="feedback-collection",
        square=7,
        text="How do you collect customer feedback?",
        type=QuestionType.CHECKBOX,
        options=["Surveys", "Reviews", "Calls", "Support tickets", "We don't"],
        required=False,
    ),
    # Square 8: Lifetime Value
    Question(
        id="retention-strategies",
        square=8,
        text="How do you keep customers coming back?",
        type=QuestionType.TEXTAREA,
        required=True,
    ),
    Question(
        id="has-subscription",
        square=8,
        text="Do you offer a subscription or recurring product?",
        type=QuestionType.RADIO,
        options=["Yes", "No"],
        required=True,
    ),
    # Square 9: Referral System
    Question(
        id="referral-sources",
        square=9,
        text="Where do your referrals come from today?",
        type=QuestionType.TEXTAREA,
        required=False,
    ),
    Question(
        id="referral-incentives",
        square=9,
        text="Which referral incentives would you consider?",
        type=QuestionType.CHECKBOX,
        options=["Discounts", "Cash rewards", "Free upgrades", "Public recognition", "None"],
        required=False,
    ),
]


def get_all_questions() -> Tuple[Question, ...]:
    """Business context first, then the main questionnaire, as one flat sequence."""
    return tuple(BUSINESS_CONTEXT_QUESTIONS) + tuple(QUESTIONNAIRE_QUESTIONS)
