"""
Derive the business context summary from questionnaire answers.
"""

from typing import Any, List, Mapping, Optional

from marketing_planner.models.plan import BusinessContext, BusinessModel, MarketingMaturity


def _text(value: Any) -> Optional[str]:
    # Numbers are accepted and stringified; booleans are not numbers here
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return None


def _string_list(value: Any) -> Optional[List[str]]:
    if isinstance(value, list) and all(isinstance(item, str) for item in value):
        return list(value)
    return None


def extract_business_context(answers: Mapping[str, Any]) -> BusinessContext:
    """Narrow loosely-typed answers into a BusinessContext.

    Answers of the wrong shape are left out rather than coerced.
    """
    industry = answers.get("industry")
    business_model = answers.get("business-model")
    maturity = answers.get("marketing-maturity")

    return BusinessContext(
        industry=industry if isinstance(industry, str) else None,
        business_model=(
            BusinessModel(business_model)
            if isinstance(business_model, str) and business_model in {m.value for m in BusinessModel}
            else None
        ),
        company_size=_text(answers.get("company-size")),
        years_in_operation=_text(answers.get("years-in-operation")),
        geographic_scope=_text(answers.get("geographic-scope")),
        primary_challenges=_string_list(answers.get("primary-challenges")),
        marketing_maturity=(
            MarketingMaturity(maturity)
            if isinstance(maturity, str) and maturity in {m.value for m in MarketingMaturity}
            else None
        ),
        marketing_budget=_text(answers.get("marketing-budget")),
        time_availability=_text(answers.get("time-availability")),
        business_goals=_string_list(answers.get("business-goals")),
    )
