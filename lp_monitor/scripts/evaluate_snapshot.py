#!/usr/bin/env python
"""
스냅샷 파일 하나를 평가해 RebalanceDecision을 JSON으로 출력

스냅샷 형식:
    {
      "poolState": {"currentTick": ..., "sqrtPriceX96": "...", ...},
      "position": {"token0": {...}, "token1": {...}, "feeTier": 3000, ...},
      "prices": {"0x...": 1.0, ...},      # 선택 (--prices로 대체 가능)
      "timestamp": 1700000000            # 선택 (기본: 현재 시각)
    }

Usage:
  python -m lp_monitor.scripts.evaluate_snapshot snapshot.json
  python -m lp_monitor.scripts.evaluate_snapshot snapshot.json --config advisor.yaml
  python -m lp_monitor.scripts.evaluate_snapshot snapshot.json --previous last.json --prices prices.json
"""
import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, Optional

from lp_monitor.config import AdvisorConfig
from lp_monitor.data.price_source import StaticPriceSource
from lp_monitor.data.types import PoolState, Position, RebalanceDecision
from lp_monitor.exceptions import LPMonitorError
from lp_monitor.strategy.rebalance_advisor import RebalanceAdvisor

logger = logging.getLogger(__name__)


def load_json(path: Path) -> Dict[str, Any]:
    with open(path, "r") as f:
        return json.load(f)


def evaluate_snapshot(
    snapshot: Dict[str, Any],
    config: AdvisorConfig,
    prices: Optional[Dict[str, float]] = None,
    previous: Optional[RebalanceDecision] = None
) -> RebalanceDecision:
    """스냅샷 dict 평가

    prices가 주어지면 스냅샷의 "prices"보다 우선합니다.
    """
    pool_state = PoolState.from_dict(snapshot["poolState"])
    position = Position.from_dict(snapshot["position"])
    price_source = StaticPriceSource(prices if prices is not None else snapshot.get("prices", {}))

    advisor = RebalanceAdvisor(price_source, config)
    return advisor.evaluate(pool_state, position, previous, snapshot.get("timestamp"))


def main():
    parser = argparse.ArgumentParser(
        description="포지션 스냅샷 리밸런싱 평가",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m lp_monitor.scripts.evaluate_snapshot snapshot.json
  python -m lp_monitor.scripts.evaluate_snapshot snapshot.json --config advisor.yaml
        """
    )
    parser.add_argument("snapshot", type=Path, help="스냅샷 JSON 파일")
    parser.add_argument("--config", type=Path, default=None,
                        help="AdvisorConfig YAML (미지정시 환경변수/.env)")
    parser.add_argument("--previous", type=Path, default=None,
                        help="이전 리밸런싱 결정 JSON")
    parser.add_argument("--prices", type=Path, default=None,
                        help="토큰 주소 -> USD 가격 JSON")
    parser.add_argument("--log-level", type=str, default="INFO",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"])

    args = parser.parse_args()

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        config = AdvisorConfig.from_yaml(args.config) if args.config else AdvisorConfig.from_env()
        snapshot = load_json(args.snapshot)
        prices = load_json(args.prices) if args.prices else None
        previous = RebalanceDecision.from_dict(load_json(args.previous)) if args.previous else None

        decision = evaluate_snapshot(snapshot, config, prices, previous)
    except (LPMonitorError, OSError, KeyError, json.JSONDecodeError) as e:
        logger.error("평가 실패: %s", e)
        sys.exit(1)

    print(json.dumps(decision.to_dict(), indent=2))


if __name__ == "__main__":
    main()
