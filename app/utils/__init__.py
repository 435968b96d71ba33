# app/utils/__init__.py

"""
FastAPI 애플리케이션의 'utils' 패키지입니다.

이 패키지는 특정 비즈니스 도메인에 속하지 않는,
프로젝트 전반에서 재사용될 수 있는 범용 유틸리티 함수들을 포함합니다.

주요 서브모듈:
- `dates.py`: 경과 일수 계산 등 날짜/시간 관련 유틸리티 함수.
"""

# flake8: noqa
from . import dates

# 패키지 메타데이터
__title__ = "LIMS Application Utilities"
__description__ = "Provides common, reusable utility functions for the application."
__version__ = "1.0.0"
__all__ = ["dates"]
