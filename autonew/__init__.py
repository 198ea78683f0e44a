"""AutoNew 세차 예약 API 패키지.

AutoNew car-wash booking API package.
"""
