# app/__init__.py

"""
LIMS FastAPI 애플리케이션의 메인 패키지입니다.

이 패키지는 애플리케이션의 진입점 (main.py)과
공통 설정, 데이터베이스 연결, 인증/권한 검사 유틸리티를 담는 core 서브패키지,
그리고 각 비즈니스 도메인(usr, corp, cyl, lims)을 대표하는 domains 서브패키지로 구성됩니다.
"""

APP_NAME = "LIMS FastAPI API"
APP_VERSION = "1.0.0"
API_PREFIX = "/api"  # API 라우트의 공통 접두사 (main.py에서 적용)

# PEP 440 (Version Identification and Dependency Specification)을 따르는 버전 정보
__version__ = APP_VERSION
__title__ = APP_NAME
__description__ = "Laboratory Information Management System (LIMS) API backend."
__all__ = []
