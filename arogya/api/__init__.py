# arogya/api/__init__.py
