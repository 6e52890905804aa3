"""Meal diary: food catalog overlay and weekly meal-slot scheduling."""
