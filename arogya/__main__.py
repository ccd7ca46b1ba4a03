# arogya/__main__.py
from arogya.main import run

run()
