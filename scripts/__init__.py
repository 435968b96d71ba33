# scripts/__init__.py

"""
운영/개발용 스크립트 패키지입니다. (`python -m scripts.seed`)
"""
