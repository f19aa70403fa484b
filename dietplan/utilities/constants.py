from typing import Final

# Domain week starts on Monday; index matches date.weekday()
DAY_KEYS: Final[tuple[str, ...]] = (
    "monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday",
)
MEAL_CATEGORIES: Final[tuple[str, ...]] = ("breakfast", "lunch", "dinner", "snacks")
PLAN_GOALS: Final[tuple[str, ...]] = (
    "weight_loss", "weight_gain", "muscle_gain", "maintenance", "custom",
)
NUTRIENT_FIELDS: Final[tuple[str, ...]] = ("calories", "protein", "carbs", "fat")

COMPLETION_DATE_FORMAT: Final[str] = "%Y-%m-%d"
IDENTIFIER_PATTERN: Final[str] = r"^[A-Za-z0-9_.:@-]{1,128}$"
HISTORY_DEFAULT_DAYS: Final[int] = 7

MEAL_PROMPT_TEMPLATE: Final[str] = (
    """
    Suggest one {category} meal for a diet plan. Answer with a single JSON object
    in the following format and nothing else:

    """
)
MEAL_TARGETS_TEMPLATE: Final[str] = (
    " The whole day should stay close to {calories} kcal, {protein} g protein,"
    " {carbs} g carbs and {fat} g fat."
)
MEAL_JSON_FORMAT: Final[str] = (
    """
{
    "name": str,
    "description": str,
    "calories": int,
    "protein": int,
    "carbs": int,
    "fat": int,
    "ingredients": [
      str,
      str,
    ],
    "instructions": [
      str,
      str,
    ]
  }
    """
)
