import pytest
from pydantic import ValidationError

from marketing_planner.models.plan import BusinessModel, MarketingMaturity
from marketing_planner.models.question import ConditionalRule, ConditionOperator, Question, QuestionType
from marketing_planner.questionnaire.questions import (
    BUSINESS_CONTEXT_SQUARE,
    SQUARE_TITLES,
    get_all_questions,
)
from marketing_planner.questionnaire.summary import extract_business_context


def test_option_questions_require_options():
    with pytest.raises(ValidationError):
        Question(id="q", square=0, text="Pick one", type=QuestionType.RADIO)


def test_free_text_questions_reject_options():
    with pytest.raises(ValidationError):
        Question(id="q", square=0, text="Describe", type=QuestionType.TEXT, options=["a"])


def test_questions_are_immutable():
    q = Question(id="q", square=0, text="Describe", type=QuestionType.TEXT)
    with pytest.raises(ValidationError):
        q.text = "changed"


def test_sequence_is_ordered_by_square_and_ids_are_unique():
    questions = get_all_questions()
    squares = [q.square for q in questions]
    assert squares == sorted(squares)
    assert squares[0] == BUSINESS_CONTEXT_SQUARE
    assert len({q.id for q in questions}) == len(questions)
    assert set(squares) <= set(SQUARE_TITLES)


def test_conditional_fields_reference_earlier_questions():
    questions = get_all_questions()
    seen = set()
    for q in questions:
        if q.conditional is not None:
            assert q.conditional.field in seen
        seen.add(q.id)


def test_conditional_rule_evaluation():
    includes = ConditionalRule(field="current-channels", operator=ConditionOperator.INCLUDES, value="Paid advertising")
    assert includes.evaluate({"current-channels": ["SEO", "Paid advertising"]}) is True
    assert includes.evaluate({"current-channels": ["SEO"]}) is False
    assert includes.evaluate({}) is False

    equals = ConditionalRule(field="has-subscription", operator=ConditionOperator.EQUALS, value="Yes")
    assert equals.evaluate({"has-subscription": "Yes"}) is True
    assert equals.evaluate({"has-subscription": "No"}) is False

    greater = ConditionalRule(field="budget", operator=ConditionOperator.GREATER_THAN, value=1000)
    assert greater.evaluate({"budget": 5000}) is True
    assert greater.evaluate({"budget": "500"}) is False
    assert greater.evaluate({"budget": True}) is False
    assert greater.evaluate({"budget": "lots"}) is False


def test_business_context_narrows_known_values():
    context = extract_business_context({
        "industry": "Retail",
        "business-model": "B2C",
        "company-size": 12,
        "marketing-maturity": "beginner",
        "primary-challenges": ["Lead generation", "Brand awareness"],
        "business-goals": ["Increase revenue"],
    })
    assert context.industry == "Retail"
    assert context.business_model == BusinessModel.B2C
    assert context.company_size == "12"
    assert context.marketing_maturity == MarketingMaturity.BEGINNER
    assert context.primary_challenges == ["Lead generation", "Brand awareness"]
    assert context.business_goals == ["Increase revenue"]


def test_business_context_drops_malformed_answers():
    context = extract_business_context({
        "industry": ["Retail"],
        "business-model": "Franchise",
        "marketing-maturity": ["beginner"],
        "company-size": True,
        "primary-challenges": "Lead generation",
    })
    assert context.industry is None
    assert context.business_model is None
    assert context.marketing_maturity is None
    assert context.company_size is None
    assert context.primary_challenges is None


def test_empty_answers_give_empty_context():
    assert extract_business_context({}).model_dump(exclude_none=True) == {}
