"""
github/ — Todo lo que habla con GitHub.

Módulos:
- client.py → Cliente REST (requests) con token opcional
- refs.py   → Parser de URLs y resolución a repo + ref
"""
