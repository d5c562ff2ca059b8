"""
초기 추정기 공통 인터페이스

모든 전략은 Initializer를 직접 상속한다 (상속 깊이 1).
호출 순서 (프레임당):
    initializer.pre_execution_tasks()           # 1회
    for sid in subsets:
        status = initializer.initial_guess(sid, deformation)
"""

from abc import ABC, abstractmethod

import numpy as np

from ..context import FieldContext


class Initializer(ABC):
    """초기 추정 전략"""

    name = 'base'

    def __init__(self, context: FieldContext):
        self.context = context

    def pre_execution_tasks(self):
        """프레임당 1회, 서브셋 처리 전에 호출. 기본은 아무것도 하지 않음."""

    @abstractmethod
    def initial_guess(self, subset_id: int, deformation: np.ndarray) -> int:
        """
        deformation을 in-place로 채우고 상태 코드를 반환

        Returns:
            INITIALIZE_* 상태 코드
        """
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}(frame={self.context.image_frame})"
