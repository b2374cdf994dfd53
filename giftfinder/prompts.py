import datetime
from typing import Optional

from .config import CURRENCY_SYMBOL, MAX_BUDGET_ABSOLUTE, MAX_SUGGESTIONS
from .models import FormData
from .validation import parse_birth_year

GIFT_PROMPT = """
You are Esme, a friendly and insightful gift recommendation expert.
Your task is to suggest {k} personalized gifts based on the information provided.
Use web search to find relevant, trendy, and location-specific ideas.
The budget is specified in GBP. If the upper budget is {cur}{top}+, it means {cur}{top} or more.

Information about the recipient:
- Key characteristics/interests:
{characteristics}
- Gender: {gender}
- Age/Year of Birth: {age}
- Location: {location}
- Budget (GBP): {budget}
- Occasion: {occasion}

Respond with a JSON array where each object represents a gift and has the following structure:
{{
  "name": "Name of the gift",
  "reason": "Why this gift is suitable, linking back to the provided characteristics, location, occasion and current trends. Be concise and thoughtful.",
  "price": "Estimated price range in GBP, e.g., ~{cur}25, {cur}50-{cur}75, Free, Varies, Low Cost. This should respect the provided budget."
}}

Example of a JSON object in the array (assuming a characteristic like 'loves hiking' was provided and budget {cur}50-{cur}100):
{{
  "name": "A high-quality, lightweight daypack for hiking",
  "reason": "Perfect for someone who loves hiking, as mentioned. This supports their hobby and encourages outdoor adventures near {location}. Great for their {occasion_hint}.",
  "price": "~{cur}60-{cur}100"
}}

Ensure your reasoning is concise and directly relates to the recipient's profile.
Focus on thoughtful and unique ideas. If budget is low, suggest thoughtful, low-cost, or experience-based gifts.
If specific interests or hobbies are mentioned in the characteristics, try to relate a suggestion to them. If an occasion is mentioned, tailor the gift to it.
Provide a price estimate for each gift in GBP, respecting the user's budget range.
Output up to {k} gift suggestions in the JSON array.
"""


def characteristics_text(form: FormData) -> str:
    lines = [f"- {c.strip()}" for c in form.recipient_characteristics if c.strip()]
    return "\n".join(lines) or "- Not specified"


def age_text(year_of_birth: str, current_year: int) -> str:
    raw = (year_of_birth or "").strip()
    if not raw:
        return "Not specified"
    year = parse_birth_year(raw, current_year)
    if year is None:
        return f"(Year of birth: {raw}, appears invalid)"
    return f"{current_year - year} years old (born {year})"


def budget_text(min_budget: int, max_budget: int) -> str:
    cur = CURRENCY_SYMBOL
    top = MAX_BUDGET_ABSOLUTE
    if min_budget == max_budget:
        if max_budget >= top:
            return f"{cur}{top}+"
        return f"around {cur}{min_budget}"
    if max_budget >= top:
        return f"from {cur}{min_budget} to {cur}{top}+"
    return f"from {cur}{min_budget} to {cur}{max_budget}"


def build_gift_prompt(form: FormData, current_year: Optional[int] = None) -> str:
    current_year = current_year or datetime.date.today().year
    occasion = form.occasion.strip() or "Not specified"
    return GIFT_PROMPT.format(
        k=MAX_SUGGESTIONS,
        cur=CURRENCY_SYMBOL,
        top=MAX_BUDGET_ABSOLUTE,
        characteristics=characteristics_text(form),
        gender=form.gender.value,
        age=age_text(form.year_of_birth, current_year),
        location=form.location.strip(),
        budget=budget_text(form.min_budget, form.max_budget),
        occasion=occasion,
        occasion_hint=occasion if occasion != "Not specified" else "next adventure",
    )
