# tests/core/__init__.py

"""
app.core 의 권한 캐시, 허용값 조회기, 인증, 권한 검사 게이트에 대한 단위 테스트 패키지입니다.
"""
