# arogya/__init__.py
