"""MealEntry domain entity: one meal in a plan slot with its nutrition values."""
from typing import List, Optional


def _as_number(value) -> float:
    try:
        return float(value or 0)
    except (TypeError, ValueError):
        return 0.0


def _as_text_list(value) -> List[str]:
    if not isinstance(value, list):
        return []
    return [str(v) for v in value if v is not None and str(v).strip()]


class MealEntry:
    def __init__(self, id: str = "", name: str = "", description: str = "",
                 calories: float = 0, protein: float = 0, carbs: float = 0, fat: float = 0,
                 ingredients: Optional[List[str]] = None, instructions: Optional[List[str]] = None):
        self.id = id
        self.name = name
        self.description = description or ""
        self.calories = calories
        self.protein = protein
        self.carbs = carbs
        self.fat = fat
        self.ingredients = ingredients[:] if ingredients else []
        self.instructions = instructions[:] if instructions else []

    def __str__(self) -> str:
        return (f"{self.name} [{self.id}] - {self.calories} kcal - "
                f"P: {self.protein}g, C: {self.carbs}g, F: {self.fat}g")

    __repr__ = __str__

    def __eq__(self, other) -> bool:
        if not isinstance(other, MealEntry):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def nutrients(self) -> dict:
        return {
            'calories': self.calories,
            'protein': self.protein,
            'carbs': self.carbs,
            'fat': self.fat,
        }

    @staticmethod
    def from_dict(data) -> Optional["MealEntry"]:
        '''Builds a MealEntry from stored data. Returns None for entries that are not dicts.'''
        if not isinstance(data, dict):
            return None
        return MealEntry(
            id=str(data.get('id') or ''),
            name=str(data.get('name') or ''),
            description=str(data.get('description') or ''),
            calories=_as_number(data.get('calories')),
            protein=_as_number(data.get('protein')),
            carbs=_as_number(data.get('carbs', data.get('carbohydrates'))),
            fat=_as_number(data.get('fat', data.get('fats'))),
            ingredients=_as_text_list(data.get('ingredients')),
            instructions=_as_text_list(data.get('instructions')),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "calories": self.calories,
            "protein": self.protein,
            "carbs": self.carbs,
            "fat": self.fat,
            "ingredients": list(self.ingredients),
            "instructions": list(self.instructions),
        }
