"""Personalized diet, yoga and meditation plan from a health profile."""

from __future__ import annotations

import dataclasses
from datetime import datetime
from typing import Any

from oracle_pipeline.core import schema
from oracle_pipeline.core.types import MediaQuery, _require
from oracle_pipeline.fallback import ContentPool, Sampler
from oracle_pipeline.orchestrator import Feature, MediaSlot
from oracle_pipeline.prompts import PromptTemplate

from .common import listing

NAME = "diet_plan"


@dataclasses.dataclass(frozen=True, slots=True)
class HealthProfile:
    """Health profile; only ``description`` is required."""

    description: str
    age: str = ""
    gender: str = ""
    height: str = ""
    weight: str = ""
    medical_history: tuple[str, ...] = ()
    current_medications: str = ""
    allergies: str = ""
    fitness_level: str = ""
    health_goals: str = ""
    dietary_restrictions: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        _require(
            condition=isinstance(self.description, str) and self.description.strip() != "",
            message="must be a non-empty str",
            field_name="description",
        )
        object.__setattr__(self, "medical_history", tuple(self.medical_history))
        object.__setattr__(self, "dietary_restrictions", tuple(self.dietary_restrictions))


_string = schema.string
_list = schema.string_list

CONTRACT = schema.SchemaContract(
    NAME,
    (
        _string("title"),
        _string("description"),
        _list("benefits"),
        schema.obj("foods", (_list("include"), _list("avoid"))),
        schema.obj(
            "mealPlan",
            (_list("breakfast"), _list("lunch"), _list("dinner"), _list("snacks")),
        ),
        schema.object_list(
            "recipes",
            (
                _string("name"),
                _list("ingredients"),
                _string("duration"),
                schema.media_id("videoId"),
            ),
        ),
        schema.object_list(
            "supplements",
            (_string("name"), _string("dosage"), _string("benefits")),
        ),
        schema.object_list(
            "exercises",
            (
                _string("name"),
                _string("duration"),
                schema.enum(
                    "difficulty", ("Beginner", "Intermediate", "Advanced"),
                    fallback="Beginner",
                ),
                schema.media_id("videoId"),
            ),
        ),
        schema.obj(
            "yoga",
            (
                schema.obj(
                    "morningRoutine",
                    (
                        _string("name"),
                        _string("duration"),
                        _list("asanas"),
                        _string("benefits"),
                        schema.media_id("videoId"),
                    ),
                ),
                schema.obj(
                    "pranayama",
                    (
                        _string("technique"),
                        _list("steps"),
                        _string("duration"),
                        _string("benefits"),
                    ),
                ),
            ),
        ),
        schema.obj(
            "meditation",
            (
                _string("method"),
                _string("duration"),
                _string("mantra"),
                _string("benefits"),
                _list("instructions"),
                schema.media_id("videoId"),
            ),
        ),
        schema.obj(
            "timing",
            (
                _string("wakeUp"),
                _string("breakfast"),
                _string("lunch"),
                _string("dinner"),
                _string("sleep"),
                _string("notes", required=False, default="Stay hydrated through the day."),
            ),
        ),
    ),
)

TEMPLATE = PromptTemplate(
    name=NAME,
    system=(
        "You are a certified nutritionist and yoga therapist who blends modern "
        "nutrition with Ayurvedic wisdom. Give safe, practical, personalized "
        "plans and never replace medical advice."
    ),
    user=(
        "Health profile: age {age}, gender {gender}, height {height}, weight "
        "{weight}, fitness level {fitness_level}. Medical history: "
        "{medical_history}. Medications: {current_medications}. Allergies: "
        "{allergies}. Dietary restrictions: {dietary_restrictions}. Goals: "
        "{health_goals}. Concerns: {description}. Create a diet plan with "
        "benefits, foods to include and avoid, a meal plan, recipes, supplements, "
        "exercises, a yoga morning routine and pranayama, a meditation practice "
        "and a daily timing schedule."
    ),
    temperature=0.7,
    max_output_tokens=4096,
)

POOL = ContentPool(
    NAME,
    {
        "titles": (
            "Balanced Ayurvedic Wellness Plan",
            "Sattvic Nourishment Plan",
            "Holistic Energy Restoration Plan",
        ),
        "descriptions": (
            "A gentle, whole-food plan built around seasonal produce, mindful "
            "eating and daily movement.",
            "A plant-forward routine that supports digestion, steady energy and "
            "restful sleep.",
        ),
        "benefits": (
            "Improved digestion",
            "Steadier energy levels",
            "Better sleep quality",
            "Reduced inflammation",
            "Calmer mind",
            "Healthy weight management",
        ),
        "include": (
            "Seasonal vegetables",
            "Whole grains such as millet and brown rice",
            "Lentils and mung beans",
            "Fresh fruit",
            "Nuts and seeds",
            "Turmeric and ginger",
            "Buttermilk",
        ),
        "avoid": (
            "Refined sugar",
            "Deep-fried foods",
            "Highly processed snacks",
            "Excess caffeine",
            "Late-night heavy meals",
        ),
        "breakfast": (
            "Vegetable poha",
            "Oats porridge with nuts",
            "Moong dal chilla",
            "Fruit bowl with seeds",
        ),
        "lunch": (
            "Brown rice with dal and sabzi",
            "Millet roti with mixed vegetables",
            "Quinoa khichdi",
            "Fresh salad with sprouts",
        ),
        "dinner": (
            "Light vegetable soup",
            "Moong dal khichdi",
            "Steamed vegetables with paneer",
        ),
        "snacks": (
            "Roasted makhana",
            "Seasonal fruit",
            "Handful of almonds",
            "Herbal tea",
        ),
        "recipes": (
            {
                "name": "Moong Dal Khichdi",
                "ingredients": ["Moong dal", "Rice", "Ghee", "Cumin", "Turmeric"],
                "duration": "30 minutes",
            },
            {
                "name": "Vegetable Millet Upma",
                "ingredients": ["Foxtail millet", "Carrots", "Peas", "Mustard seeds"],
                "duration": "25 minutes",
            },
            {
                "name": "Golden Turmeric Latte",
                "ingredients": ["Milk", "Turmeric", "Black pepper", "Honey"],
                "duration": "10 minutes",
            },
        ),
        "supplements": (
            {"name": "Vitamin D3", "dosage": "1000 IU daily", "benefits": "Bone and immune health"},
            {"name": "Omega-3", "dosage": "1 capsule daily", "benefits": "Heart and brain health"},
            {"name": "Ashwagandha", "dosage": "300 mg at night", "benefits": "Stress relief"},
            {"name": "Triphala", "dosage": "1 tsp before bed", "benefits": "Gentle digestion support"},
        ),
        "exercises": (
            {"name": "Brisk Walking", "duration": "30 minutes", "difficulty": "Beginner"},
            {"name": "Bodyweight Circuit", "duration": "20 minutes", "difficulty": "Intermediate"},
            {"name": "Low-Impact Cardio", "duration": "25 minutes", "difficulty": "Beginner"},
            {"name": "Core Strength Routine", "duration": "15 minutes", "difficulty": "Intermediate"},
        ),
        "morning_routines": (
            {
                "name": "Sun Salutation Flow",
                "duration": "20 minutes",
                "asanas": ["Surya Namaskar", "Tadasana", "Trikonasana", "Bhujangasana"],
                "benefits": "Warms the body and energizes the mind",
            },
            {
                "name": "Gentle Morning Stretch",
                "duration": "15 minutes",
                "asanas": ["Marjaryasana", "Balasana", "Setu Bandhasana"],
                "benefits": "Improves flexibility and eases stiffness",
            },
        ),
        "pranayama": (
            {
                "technique": "Anulom Vilom",
                "steps": [
                    "Sit comfortably with a straight spine",
                    "Close the right nostril and inhale through the left",
                    "Switch sides and exhale through the right",
                    "Repeat, alternating nostrils",
                ],
                "duration": "10 minutes",
                "benefits": "Balances the nervous system",
            },
            {
                "technique": "Bhramari",
                "steps": [
                    "Sit with eyes closed",
                    "Inhale deeply through the nose",
                    "Exhale while humming like a bee",
                ],
                "duration": "5 minutes",
                "benefits": "Calms anxiety and relieves tension",
            },
        ),
        "meditations": (
            {
                "method": "Breath Awareness Meditation",
                "duration": "15 minutes",
                "mantra": "So Hum",
                "benefits": "Reduces stress and improves focus",
                "instructions": [
                    "Sit in a quiet place",
                    "Observe the natural breath",
                    "Silently repeat the mantra with each breath",
                ],
            },
            {
                "method": "Yoga Nidra",
                "duration": "20 minutes",
                "mantra": "Om Shanti",
                "benefits": "Deep relaxation and better sleep",
                "instructions": [
                    "Lie down in Shavasana",
                    "Set a sankalpa (intention)",
                    "Rotate awareness through the body",
                ],
            },
        ),
        "schedules": (
            {
                "wakeUp": "6:00 AM",
                "breakfast": "8:00 AM",
                "lunch": "1:00 PM",
                "dinner": "7:00 PM",
                "sleep": "10:00 PM",
                "notes": "Eat the largest meal at midday when digestion is strongest.",
            },
            {
                "wakeUp": "5:30 AM",
                "breakfast": "7:30 AM",
                "lunch": "12:30 PM",
                "dinner": "6:30 PM",
                "sleep": "9:30 PM",
                "notes": "Keep three hours between dinner and sleep.",
            },
        ),
    },
)


def _recipe(request: HealthProfile, sampler: Sampler, now: datetime) -> dict[str, Any]:
    return {
        "title": sampler.pick("titles"),
        "description": sampler.pick("descriptions"),
        "benefits": sampler.pick_many("benefits", 4),
        "foods": {
            "include": sampler.pick_many("include", 5),
            "avoid": sampler.pick_many("avoid", 3),
        },
        "mealPlan": {
            meal: sampler.pick_many(meal, 2)
            for meal in ("breakfast", "lunch", "dinner", "snacks")
        },
        "recipes": sampler.pick_many("recipes", 2),
        "supplements": sampler.pick_many("supplements", 2),
        "exercises": sampler.pick_many("exercises", 2),
        "yoga": {
            "morningRoutine": sampler.pick("morning_routines"),
            "pranayama": sampler.pick("pranayama"),
        },
        "meditation": sampler.pick("meditations"),
        "timing": sampler.pick("schedules"),
    }


def _bind(request: HealthProfile, now: datetime) -> dict[str, Any]:
    def _text(value: str) -> str:
        return value.strip() or "not specified"

    return {
        "age": _text(request.age),
        "gender": _text(request.gender),
        "height": _text(request.height),
        "weight": _text(request.weight),
        "fitness_level": _text(request.fitness_level),
        "medical_history": listing(request.medical_history),
        "current_medications": _text(request.current_medications),
        "allergies": _text(request.allergies),
        "dietary_restrictions": listing(request.dietary_restrictions),
        "health_goals": _text(request.health_goals),
        "description": request.description.strip(),
    }


def _media(value: Any) -> list[MediaSlot]:
    slots = [
        MediaSlot(
            ("recipes", i, "videoId"),
            MediaQuery(recipe["name"], category="healthy recipe", descriptor="cooking"),
        )
        for i, recipe in enumerate(value["recipes"])
    ]
    slots += [
        MediaSlot(
            ("exercises", i, "videoId"),
            MediaQuery(
                exercise["name"],
                category=f"{exercise['difficulty'].lower()} workout",
                descriptor=exercise["duration"],
            ),
        )
        for i, exercise in enumerate(value["exercises"])
    ]
    routine = value["yoga"]["morningRoutine"]
    slots.append(
        MediaSlot(
            ("yoga", "morningRoutine", "videoId"),
            MediaQuery(routine["name"], category="morning yoga", descriptor=routine["duration"]),
        )
    )
    meditation = value["meditation"]
    slots.append(
        MediaSlot(
            ("meditation", "videoId"),
            MediaQuery(
                meditation["method"],
                category="guided meditation",
                descriptor=meditation["duration"],
            ),
        )
    )
    return slots


FEATURE = Feature(
    name=NAME,
    contract=CONTRACT,
    template=TEMPLATE,
    pool=POOL,
    recipe=_recipe,
    bind=_bind,
    media=_media,
    retries=1,
    count_fallback_usage=True,
)
