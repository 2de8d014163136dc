# Routes package init
"""
RecipeBox Backend — Routes Package
====================================

Route Inventory:
    - api.py:     /api/<resource>        JSON CRUD + search (recipes, categories)
    - views.py:   /<resource>            HTML pages for the same operations
    - health.py:  GET /health            storage connectivity probe

Design Principle:
    Routes are THIN. Each handler makes exactly one Storage Adapter call and
    formats the outcome; errors are left to the global handlers in main.py.
"""
