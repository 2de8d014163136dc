"""
RecipeBox Backend — Resource Catalogue
========================================

What:  The resources this service exposes and the fields their HTML forms edit.
Why:   Recipes and categories share every route and every storage operation;
       only their names and form fields differ. Routers and the storage factory
       are built once per entry here instead of being copy-pasted per resource.
"""

from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class Resource:
    """A collection exposed under /api/<name> and /<name>."""

    name: str
    singular: str
    title: str
    form_fields: Tuple[str, ...]

    @property
    def api_prefix(self) -> str:
        return f"/api/{self.name}"

    @property
    def html_prefix(self) -> str:
        return f"/{self.name}"


RECIPES = Resource(
    name="recipes",
    singular="recipe",
    title="Recipes",
    form_fields=("name", "description", "ingredients", "instructions", "category"),
)

CATEGORIES = Resource(
    name="categories",
    singular="category",
    title="Categories",
    form_fields=("name", "description"),
)

RESOURCES: Tuple[Resource, ...] = (RECIPES, CATEGORIES)
