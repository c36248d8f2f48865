"""
Начальный справочник мышц и оборудования для калистеники.
Время восстановления - ориентир в часах между тренировками одной мышцы.
"""

INITIAL_MUSCLES = [
    # Верх тела - жимы
    {"name": "Chest", "muscle_group": "upper_body_push", "recommended_rest_hours": 48,
     "parts": [{"name": "Upper Chest", "slug": "upper-chest"}, {"name": "Lower Chest", "slug": "lower-chest"}]},
    {"name": "Front Deltoids", "muscle_group": "upper_body_push", "recommended_rest_hours": 48, "parts": []},
    {"name": "Side Deltoids", "muscle_group": "upper_body_push", "recommended_rest_hours": 48, "parts": []},
    {"name": "Triceps", "muscle_group": "upper_body_push", "recommended_rest_hours": 48,
     "parts": [{"name": "Long Head", "slug": "long-head"}, {"name": "Lateral Head", "slug": "lateral-head"}]},

    # Верх тела - тяги
    {"name": "Lats", "muscle_group": "upper_body_pull", "recommended_rest_hours": 48, "parts": []},
    {"name": "Rhomboids", "muscle_group": "upper_body_pull", "recommended_rest_hours": 48, "parts": []},
    {"name": "Rear Deltoids", "muscle_group": "upper_body_pull", "recommended_rest_hours": 48, "parts": []},
    {"name": "Biceps", "muscle_group": "upper_body_pull", "recommended_rest_hours": 48, "parts": []},
    {"name": "Forearms", "muscle_group": "upper_body_pull", "recommended_rest_hours": 24,
     "parts": [{"name": "Flexors", "slug": "flexors"}, {"name": "Extensors", "slug": "extensors"}]},

    # Кор
    {"name": "Abs", "muscle_group": "core", "recommended_rest_hours": 24, "parts": []},
    {"name": "Obliques", "muscle_group": "core", "recommended_rest_hours": 24, "parts": []},
    {"name": "Lower Back", "muscle_group": "core", "recommended_rest_hours": 48, "parts": []},
    {"name": "Transverse Abdominis", "muscle_group": "core", "recommended_rest_hours": 24, "parts": []},

    # Низ тела
    {"name": "Quadriceps", "muscle_group": "lower_body", "recommended_rest_hours": 72, "parts": []},
    {"name": "Hamstrings", "muscle_group": "lower_body", "recommended_rest_hours": 72, "parts": []},
    {"name": "Glutes", "muscle_group": "lower_body", "recommended_rest_hours": 72, "parts": []},
    {"name": "Calves", "muscle_group": "lower_body", "recommended_rest_hours": 48, "parts": []},
    {"name": "Hip Flexors", "muscle_group": "lower_body", "recommended_rest_hours": 48, "parts": []},
]

INITIAL_EQUIPMENT = [
    # Базовое
    {"name": "None (Bodyweight)", "category": "basic"},
    {"name": "Pull-up Bar", "category": "basic"},
    {"name": "Parallettes", "category": "basic"},
    {"name": "Rings", "category": "basic"},
    {"name": "Dip Bars", "category": "basic"},

    # Продвинутое
    {"name": "Weighted Vest", "category": "advanced"},
    {"name": "Resistance Bands", "category": "advanced"},
    {"name": "Wall Bars", "category": "advanced"},
    {"name": "TRX Straps", "category": "advanced"},

    # Специальное
    {"name": "Box/Platform", "category": "specialty"},
    {"name": "Handstand Blocks", "category": "specialty"},
    {"name": "Climbing Rope", "category": "specialty"},
    {"name": "Hanging Leg Raise Station", "category": "specialty"},
]
