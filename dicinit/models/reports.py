"""
프레임 단위 초기 추정 결과 데이터 모델
"""

from dataclasses import dataclass, field
from typing import List, Dict, Optional
import numpy as np

from .status import STATUS_NAMES, INITIALIZE_FAILED, is_success


@dataclass
class SubsetInitResult:
    """단일 서브셋 초기 추정 결과"""
    subset_id: int
    status: int
    deformation: np.ndarray
    strategy: str = ""
    used_fallback: bool = False
    sigma: float = -1.0

    @property
    def success(self) -> bool:
        return is_success(self.status)

    @property
    def status_name(self) -> str:
        return STATUS_NAMES.get(self.status, 'unknown')

    def __str__(self) -> str:
        u, v, t = self.deformation[:3]
        return (f"subset {self.subset_id}: {self.status_name} "
                f"u={u:.3f} v={v:.3f} theta={t:.4f}")


@dataclass
class FrameReport:
    """단일 프레임 결과"""
    frame: int
    motion_detected: bool = True
    skipped: bool = False
    results: List[SubsetInitResult] = field(default_factory=list)
    global_shift: Optional[tuple] = None
    processing_time: float = 0.0

    @property
    def n_subsets(self) -> int:
        return len(self.results)

    @property
    def n_failed(self) -> int:
        return sum(1 for r in self.results if r.status == INITIALIZE_FAILED)

    @property
    def n_fallback(self) -> int:
        return sum(1 for r in self.results if r.used_fallback)

    @property
    def status_counts(self) -> Dict[str, int]:
        counts = {}
        for r in self.results:
            counts[r.status_name] = counts.get(r.status_name, 0) + 1
        return counts

    def result_for(self, subset_id: int) -> Optional[SubsetInitResult]:
        for r in self.results:
            if r.subset_id == subset_id:
                return r
        return None

    @property
    def summary(self) -> str:
        if self.skipped:
            return f"프레임 {self.frame}: 움직임 없음, 스킵"
        counts = ", ".join(f"{k}={v}" for k, v in sorted(self.status_counts.items()))
        return (f"프레임 {self.frame}: {self.n_subsets}개 서브셋 ({counts}), "
                f"fallback {self.n_fallback}개, {self.processing_time:.3f}s")


@dataclass
class SequenceReport:
    """프레임 시퀀스 결과"""
    frames: List[FrameReport] = field(default_factory=list)
    total_processing_time: float = 0.0

    @property
    def n_frames(self) -> int:
        return len(self.frames)

    @property
    def n_skipped(self) -> int:
        return sum(1 for f in self.frames if f.skipped)

    @property
    def n_failed(self) -> int:
        return sum(f.n_failed for f in self.frames)

    @property
    def summary(self) -> str:
        return (f"총 {self.n_frames}개 프레임 중 {self.n_skipped}개 스킵, "
                f"실패 서브셋 {self.n_failed}개, "
                f"{self.total_processing_time:.2f}s")
