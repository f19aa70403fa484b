"""Sample plan data shared by the test modules."""


def sample_plan_dict(plan_id="plan-1", user_id="user-1"):
    """Monday = {breakfast: [A], lunch: [B, C], dinner: [], snacks: []}, no other days."""
    return {
        "id": plan_id,
        "user_id": user_id,
        "name": "Cut",
        "goal": "weight_loss",
        "daily_calories": 1800,
        "daily_protein": 140,
        "daily_carbs": 150,
        "daily_fat": 60,
        "is_active": True,
        "weekly_plan": {
            "monday": {
                "breakfast": [{"id": "A", "name": "Oats", "calories": 350, "protein": 12,
                               "carbohydrates": 58, "fats": 8}],
                "lunch": [{"id": "B", "name": "Salad", "calories": 450, "protein": 40,
                           "carbs": 18, "fat": 22},
                          {"id": "C", "name": "Soup", "calories": 200, "protein": 8,
                           "carbs": 25, "fat": 6}],
                "dinner": [],
                "snacks": [],
            },
        },
    }
