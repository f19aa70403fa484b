import re
import json
import logging
from json import JSONDecodeError
from typing import Optional, Tuple

from openai import OpenAI
from fastapi import APIRouter, Depends, HTTPException
from pydantic import ValidationError

from dietplan.api.deps import get_plan_repository
from dietplan.domain.MealEntry import MealEntry
from dietplan.domain.errors import CollaboratorUnavailableError
from dietplan.events.event_helpers import publish_meal_added
from dietplan.infra.Plan_Repository import PlanRepository
from dietplan.logic.planning.mutation import add_meal_to_slot, new_meal_id
from dietplan.utilities import config
from dietplan.utilities.constants import (
    MEAL_PROMPT_TEMPLATE, MEAL_TARGETS_TEMPLATE, MEAL_JSON_FORMAT
)
from dietplan.utilities.validators import (
    GenerateMealInput, MealEntryInput, validate_category, validate_day_key
)

logger = logging.getLogger(__name__)

SOURCE_AI = "ai"
SOURCE_FALLBACK = "fallback"

# Served when no model is configured or its answer is unusable
FALLBACK_MEALS = {
    "breakfast": {
        "name": "Oatmeal with berries",
        "description": "Rolled oats cooked in milk, topped with mixed berries and honey.",
        "calories": 350, "protein": 12, "carbs": 58, "fat": 8,
        "ingredients": ["60 g rolled oats", "200 ml milk", "80 g mixed berries", "1 tsp honey"],
        "instructions": ["Simmer the oats in the milk for 5 minutes.", "Top with berries and honey."],
    },
    "lunch": {
        "name": "Grilled chicken salad",
        "description": "Chicken breast over greens with olive oil and lemon.",
        "calories": 450, "protein": 40, "carbs": 18, "fat": 22,
        "ingredients": ["150 g chicken breast", "100 g mixed greens", "1 tbsp olive oil", "1/2 lemon"],
        "instructions": ["Grill the chicken and slice it.", "Toss the greens with oil and lemon, add chicken."],
    },
    "dinner": {
        "name": "Baked salmon with vegetables",
        "description": "Oven-baked salmon fillet with roasted seasonal vegetables.",
        "calories": 550, "protein": 38, "carbs": 30, "fat": 28,
        "ingredients": ["150 g salmon fillet", "200 g mixed vegetables", "1 tbsp olive oil"],
        "instructions": ["Roast the vegetables at 200 C for 15 minutes.",
                         "Add the salmon and bake 12 more minutes."],
    },
    "snacks": {
        "name": "Greek yogurt with nuts",
        "description": "Plain Greek yogurt with a handful of walnuts.",
        "calories": 220, "protein": 15, "carbs": 10, "fat": 13,
        "ingredients": ["150 g Greek yogurt", "20 g walnuts"],
        "instructions": ["Top the yogurt with the nuts."],
    },
}


# === Helper: Get OpenAI Client ===
def _get_openai_client() -> Optional[OpenAI]:
    """Return an OpenAI client if OPENAI_API_KEY is set, otherwise None."""
    if not config.OPENAI_API_KEY:
        return None
    return OpenAI(api_key=config.OPENAI_API_KEY)


def fallback_meal(category: str) -> MealEntry:
    meal = MealEntry.from_dict(FALLBACK_MEALS[category])
    meal.id = new_meal_id()
    return meal


def build_prompt(category: str, prompt: str = "", targets: Optional[dict] = None) -> str:
    text = (prompt.strip() + " ") if prompt and prompt.strip() else ""
    if targets:
        text += MEAL_TARGETS_TEMPLATE.format(
            calories=targets.get('calories', 0), protein=targets.get('protein', 0),
            carbs=targets.get('carbs', 0), fat=targets.get('fat', 0),
        )
    return text + MEAL_PROMPT_TEMPLATE.format(category=category) + MEAL_JSON_FORMAT


# === Meal Generation ===
def generate_meal_from_ai(category: str, prompt: str = "", targets: Optional[dict] = None,
                          strict: bool = False) -> Tuple[MealEntry, str]:
    """Ask the model for one meal of the given category.

    Returns (meal, source) where source is "ai" or "fallback". Without an API
    key, or when the call or its parsing fails, the category's fallback meal is
    returned; with strict=True a CollaboratorUnavailableError is raised instead.
    """
    validate_category(category)
    client = _get_openai_client()
    if client is None:
        return _fallback_or_raise(category, strict, "OPENAI_API_KEY not set")

    # === OpenAI Call ===
    try:
        response = client.responses.create(
            model=config.AI_MODEL,
            input=build_prompt(category, prompt, targets),
        )
    except Exception as e:
        logger.error(f"AI meal request failed: {e}")
        return _fallback_or_raise(category, strict, f"AI request failed: {e}")

    meal = parse_meal_output(response.output_text or "")
    if meal is None:
        return _fallback_or_raise(category, strict, "AI output could not be parsed as a meal")
    return meal, SOURCE_AI


def _fallback_or_raise(category: str, strict: bool, reason: str) -> Tuple[MealEntry, str]:
    if strict:
        raise CollaboratorUnavailableError(reason, collaborator="generation")
    logger.warning(f"{reason}; using the {category} fallback meal")
    return fallback_meal(category), SOURCE_FALLBACK


# === JSON Parsing ===
def parse_meal_output(text: str) -> Optional[MealEntry]:
    """Turn raw model output into a MealEntry, tolerating code fences and trailing commas."""
    text = (text or "").strip()
    if not text:
        logger.warning("AI returned empty meal data")
        return None
    try:
        parsed = json.loads(text)
    except JSONDecodeError:
        cleaned = _remove_trailing_commas(_strip_code_fences(text))
        try:
            parsed = json.loads(cleaned)
        except JSONDecodeError:
            candidate = _extract_json_by_balancing(cleaned)
            if not candidate:
                logger.warning("AI output is not valid JSON and no JSON substring found")
                return None
            try:
                parsed = json.loads(_remove_trailing_commas(candidate))
            except JSONDecodeError:
                logger.warning("Failed to decode extracted JSON from AI output")
                return None
    return _meal_from_parsed(parsed)


def _meal_from_parsed(parsed) -> Optional[MealEntry]:
    if isinstance(parsed, list) and parsed:
        parsed = parsed[0]
    if not isinstance(parsed, dict):
        return None
    data = dict(parsed)
    data.setdefault('carbs', data.get('carbohydrates', 0))
    data.setdefault('fat', data.get('fats', 0))
    data['id'] = new_meal_id()
    try:
        checked = MealEntryInput.model_validate(
            {k: data.get(k) for k in MealEntryInput.model_fields if data.get(k) is not None}
        )
    except ValidationError as e:
        logger.warning(f"AI meal rejected: {e.error_count()} invalid field(s)")
        return None
    return MealEntry.from_dict(checked.model_dump())


# === Text Cleaning Helpers ===
def _strip_code_fences(text: str) -> str:
    """Remove common markdown code fences and leading/trailing whitespace."""
    text = re.sub(r"```(?:json)?\n(.*?)```", r"\1", text, flags=re.S)
    text = re.sub(r"^```|```$", "", text)
    return text.strip()


def _remove_trailing_commas(text: str) -> str:
    return re.sub(r",\s*(\}|\])", r"\1", text)


def _extract_json_by_balancing(text: str) -> Optional[str]:
    """Extract the first JSON object/array by balancing braces/brackets."""
    start = None
    stack = []
    in_string = False
    escape = False

    for i, ch in enumerate(text):
        if escape:
            escape = False
            continue
        if in_string:
            if ch == "\\":
                escape = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
        elif ch in "{[":
            if start is None:
                start = i
            stack.append(ch)
        elif ch in "}]":
            if not stack:
                continue
            opening = stack.pop()
            if (opening == "{") != (ch == "}"):
                return None
            if not stack:
                return text[start:i + 1]
    return None


# === FastAPI Endpoints ===
router = APIRouter()


@router.post("/api/meals/generate/{category}")
def preview_generated_meal(category: str, payload: Optional[GenerateMealInput] = None):
    """Generate a meal without adding it to any plan."""
    payload = payload or GenerateMealInput()
    meal, source = generate_meal_from_ai(category, payload.prompt, strict=payload.strict)
    return {"meal": meal.to_dict(), "source": source}


@router.post("/api/plans/{plan_id}/days/{day}/{category}/generate")
def generate_meal_into_slot(plan_id: str, day: str, category: str,
                            payload: Optional[GenerateMealInput] = None,
                            repo: PlanRepository = Depends(get_plan_repository)):
    payload = payload or GenerateMealInput()
    validate_day_key(day)
    validate_category(category)
    plan = repo.get_plan(plan_id)
    if plan is None:
        raise HTTPException(status_code=404, detail="Plan not found")
    meal, source = generate_meal_from_ai(category, payload.prompt, plan.targets(), strict=payload.strict)
    saved = repo.update_plan(plan_id, add_meal_to_slot(plan, day, category, meal))
    if saved is None:
        raise HTTPException(status_code=404, detail="Plan not found")
    logger.info(f"Added {source} meal {meal.id} to plan {plan_id} ({day}/{category})")
    publish_meal_added(plan_id, day, category, meal)
    return {"meal": meal.to_dict(), "source": source, "plan": saved.to_dict()}
