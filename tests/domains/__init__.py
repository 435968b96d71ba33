# tests/domains/__init__.py

"""
도메인별 API 통합 테스트 패키지입니다.

- `test_auth_n.py`: 로그인 / 현재 사용자 조회
- `test_usr_n.py`: 역할, 모듈, 역할-모듈 권한, 사용자
- `test_corp_n.py`: 회사, 현장, 담당자
- `test_cyl_n.py`: 용기, 용기 반출, 재고 현황
- `test_lims_n.py`: 분석 단가, 시료 접수, 작업지시, 작업지시 헤더
"""

__all__ = []
