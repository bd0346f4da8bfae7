"""
Advisor configuration

리밸런싱 정책 임계값. 환경변수(.env) 또는 YAML 파일에서 로드할 수 있습니다.

환경변수:
    LP_BAND_BASIS_POINTS       새 범위 폭 (bps, 1 bp = 1 tick)
    LP_TIME_CAP_HOURS          리밸런싱 없이 허용하는 최대 시간
    LP_FEE_GAS_MULTIPLE        경제적 트리거 최소 수수료/가스 배수
    LP_ESTIMATED_GAS_COST_USD  리밸런싱 1회 예상 가스비 (USD)
    LP_MEDIUM_URGENCY_HOURS    MEDIUM 긴급도 기준 시간
"""
import os
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError

from .exceptions import ConfigurationError


ENV_PREFIX = "LP_"


class AdvisorConfig(BaseModel):
    """RebalanceAdvisor 설정"""
    band_basis_points: int = Field(default=100, description="Width of the proposed range in basis points", gt=0)
    time_cap_hours: float = Field(default=24.0, description="Max hours tolerated without a rebalance", gt=0)
    fee_gas_multiple: float = Field(default=3.0, description="Minimum fee/gas ratio that triggers a rebalance", gt=0)
    estimated_gas_cost_usd: float = Field(default=5.0, description="Estimated gas cost of one rebalance (USD)", gt=0)
    medium_urgency_hours: float = Field(default=20.0, description="Hours since last rebalance for MEDIUM urgency", ge=0)

    class Config:
        frozen = True
        json_schema_extra = {
            "example": {
                "band_basis_points": 100,
                "time_cap_hours": 24.0,
                "fee_gas_multiple": 3.0,
                "estimated_gas_cost_usd": 5.0,
                "medium_urgency_hours": 20.0
            }
        }

    @classmethod
    def from_mapping(cls, data: Dict[str, Any]) -> "AdvisorConfig":
        """dict에서 설정 생성

        Raises:
            ConfigurationError: 검증 실패
        """
        try:
            return cls(**data)
        except ValidationError as e:
            raise ConfigurationError(f"잘못된 설정값: {e}") from e

    @classmethod
    def from_env(cls, env_file: Optional[Union[str, Path]] = None) -> "AdvisorConfig":
        """환경변수(.env 포함)에서 설정 로드

        설정되지 않은 항목은 기본값을 사용합니다.
        """
        load_dotenv(env_file)

        data: Dict[str, Any] = {}
        for name in cls.model_fields:
            value = os.getenv(f"{ENV_PREFIX}{name.upper()}")
            if value is not None and value != "":
                data[name] = value
        return cls.from_mapping(data)

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> "AdvisorConfig":
        """YAML 파일에서 설정 로드

        최상위가 mapping이어야 하며 `advisor` 키 아래에 둘 수도 있습니다.
        """
        with open(path, "r") as f:
            data = yaml.safe_load(f) or {}

        if not isinstance(data, dict):
            raise ConfigurationError(f"YAML 최상위는 mapping이어야 합니다: {path}")

        section = data.get("advisor", data)
        if not isinstance(section, dict):
            raise ConfigurationError(f"advisor 섹션은 mapping이어야 합니다: {path}")
        return cls.from_mapping(section)
