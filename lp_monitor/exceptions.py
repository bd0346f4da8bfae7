"""
오류 타입 정의

코어 계산에서 발생하는 모든 오류는 LPMonitorError를 상속합니다.
데이터/프로그래밍 오류이므로 코어 내부에서 재시도하지 않습니다.
"""


class LPMonitorError(Exception):
    """lp_monitor 공통 오류"""
    pass


class OutOfBoundsError(LPMonitorError, ValueError):
    """틱 또는 sqrtPriceX96이 유효 범위를 벗어난 경우"""
    pass


class InvalidArgumentError(LPMonitorError, ValueError):
    """문서화된 사전조건을 위반한 인자"""
    pass


class UnknownValueError(LPMonitorError, ValueError):
    """매핑 테이블에 없는 값 (fee tier ↔ tick spacing)"""
    pass


class PriceUnavailableError(LPMonitorError):
    """PriceSource가 가격을 제공하지 못한 경우"""

    def __init__(self, token_address: str, reason: str = ""):
        self.token_address = token_address
        message = f"가격을 가져올 수 없습니다: {token_address}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class ConfigurationError(LPMonitorError, ValueError):
    """설정값 검증 실패"""
    pass
