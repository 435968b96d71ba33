# tests/scripts/__init__.py
