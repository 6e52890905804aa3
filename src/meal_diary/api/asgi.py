"""ASGI entrypoint for the meal diary API."""

from meal_diary.api.app import create_app
from meal_diary.containers import build_container

app = create_app(build_container())
