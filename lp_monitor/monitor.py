"""
Monitoring cycle

컨트랙트 리더 -> RebalanceAdvisor -> 결정 기록/알림을 한 주기로 묶습니다.

한 주기의 실패는 다음 주기에 상태를 남기지 않습니다. 조회, 평가, 기록,
알림 중 어디서 실패하든 notifier.notify_error로 운영자에게 알리고 None을
반환합니다. 평가가 실패한 주기는 결정을 저장하지 않습니다.
"""

import json
import logging
from pathlib import Path
from typing import List, Optional, Protocol, Union

from .data.types import PoolState, Position, RebalanceDecision
from .strategy.rebalance_advisor import RebalanceAdvisor

logger = logging.getLogger(__name__)


class ContractReader(Protocol):
    """온체인 스냅샷 제공자 (재시도/타임아웃은 구현 책임)"""

    def read_pool_state(self) -> PoolState:
        ...

    def read_position(self) -> Position:
        ...


class DecisionSink(Protocol):
    """결정 기록 저장소 (append-only)"""

    def append(self, decision: RebalanceDecision) -> None:
        ...

    def last_rebalance(self) -> Optional[RebalanceDecision]:
        ...


class Notifier(Protocol):

    def notify_decision(self, decision: RebalanceDecision) -> None:
        ...

    def notify_error(self, error: Exception) -> None:
        ...


class LoggingNotifier:
    """로그로만 알리는 Notifier"""

    def notify_decision(self, decision: RebalanceDecision) -> None:
        if decision.should_rebalance:
            logger.warning(
                "리밸런싱 필요 [%s/%s]: %s",
                decision.reason.value, decision.urgency.value, decision.new_range
            )

    def notify_error(self, error: Exception) -> None:
        logger.error("모니터링 주기 실패: %s: %s", type(error).__name__, error)


class InMemoryDecisionHistory:
    """메모리 내 결정 기록"""

    def __init__(self):
        self._decisions: List[RebalanceDecision] = []

    def __len__(self) -> int:
        return len(self._decisions)

    @property
    def decisions(self) -> List[RebalanceDecision]:
        return list(self._decisions)

    def append(self, decision: RebalanceDecision) -> None:
        self._decisions.append(decision)

    def last(self) -> Optional[RebalanceDecision]:
        return self._decisions[-1] if self._decisions else None

    def last_rebalance(self) -> Optional[RebalanceDecision]:
        """리밸런싱을 권고한 마지막 결정"""
        for decision in reversed(self._decisions):
            if decision.should_rebalance:
                return decision
        return None


class JsonLinesDecisionHistory(InMemoryDecisionHistory):
    """JSON Lines 파일 기반 결정 기록

    한 줄에 결정 하나. 기존 파일이 있으면 로드한 뒤 이어서 추가합니다.
    """

    def __init__(self, path: Union[str, Path]):
        super().__init__()
        self.path = Path(path)

        if self.path.exists():
            with open(self.path, "r") as f:
                for line in f:
                    line = line.strip()
                    if line:
                        self._decisions.append(RebalanceDecision.from_dict(json.loads(line)))
            logger.info("결정 기록 로드: %s (%d건)", self.path, len(self._decisions))

    def append(self, decision: RebalanceDecision) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "a") as f:
            f.write(json.dumps(decision.to_dict()) + "\n")
        super().append(decision)


class MonitoringCycle:
    """한 포지션에 대한 모니터링 주기

    사용법:
        cycle = MonitoringCycle(reader, advisor, JsonLinesDecisionHistory("decisions.jsonl"))
        decision = cycle.run_once()
    """

    def __init__(
        self,
        reader: ContractReader,
        advisor: RebalanceAdvisor,
        history: DecisionSink,
        notifier: Optional[Notifier] = None
    ):
        self.reader = reader
        self.advisor = advisor
        self.history = history
        self.notifier = notifier or LoggingNotifier()

    def run_once(self, now: Optional[float] = None) -> Optional[RebalanceDecision]:
        """스냅샷을 읽고 평가해 결정을 기록

        Returns:
            RebalanceDecision, 주기가 실패하면 None
        """
        try:
            pool_state = self.reader.read_pool_state()
            position = self.reader.read_position()
            decision = self.advisor.evaluate(
                pool_state, position, self.history.last_rebalance(), now
            )
            self.history.append(decision)
            self.notifier.notify_decision(decision)
        except Exception as e:
            logger.exception("모니터링 주기 실패")
            self.notifier.notify_error(e)
            return None

        return decision
