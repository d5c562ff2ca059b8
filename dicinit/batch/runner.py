"""
프레임 시퀀스 처리 모듈

프레임마다:
    1. 컨텍스트 프레임 전진
    2. (선택) 움직임 검사 → 움직임 없으면 프레임 스킵, 직전 해 유지
    3. 전략의 pre_execution_tasks() 1회
    4. 서브셋마다 initial_guess() 1회, 실패 시 fallback 전략
    5. solver(외부 최적화기 자리)로 해를 얻어 컨텍스트에 기록
"""

import time
import logging
import numpy as np
from pathlib import Path
from typing import Optional, Callable, Iterable, Mapping, Union

from ..core.context import FieldContext
from ..core.subset import REF_INTENSITIES
from ..core.motion import MotionTestUtility
from ..core.initial_guess.base import Initializer
from ..core.initial_guess.phase_correlation import PhaseCorrelationInitializer
from ..models.deformation import NO_SOLUTION, new_deformation
from ..models.status import INITIALIZE_FAILED, is_success
from ..models.reports import SubsetInitResult, FrameReport, SequenceReport
from ..io.loader import load_image, get_image_files

_logger = logging.getLogger(__name__)

# solver(subset_id, deformation) -> sigma (-1.0 이면 수렴 실패)
Solver = Callable[[int, np.ndarray], float]


class SequenceRunner:
    """
    초기 추정 시퀀스 실행기

    Usage:
        runner = SequenceRunner(ctx, FieldValueInitializer(ctx),
                                fallback=path_initializer,
                                motion_utility=MotionTestUtility(0, 0, 64, 64))
        report = runner.process_sequence(images)
        print(report.summary)
    """

    def __init__(self,
                 context: FieldContext,
                 initializer: Initializer,
                 fallback: Optional[Initializer] = None,
                 motion_utility: Optional[MotionTestUtility] = None,
                 solver: Optional[Solver] = None,
                 subsets: Optional[Mapping] = None,
                 reference_image: Optional[np.ndarray] = None):
        """
        Args:
            context: 필드 컨텍스트
            initializer: 주 전략
            fallback: 주 전략이 INITIALIZE_FAILED일 때 쓸 전략
            motion_utility: 움직임 검사기 (None이면 모든 프레임 처리)
            solver: 외부 최적화기 자리. None이면 성공한 초기값을 sigma=0.0으로 기록
            subsets: {subset_id: 서브셋 평가기} - reference_image와 함께 주면
                     생성 시 참조 서브셋을 initialize 한다
            reference_image: 참조 이미지
        """
        self.context = context
        self.initializer = initializer
        self.fallback = fallback
        self.motion_utility = motion_utility
        self.solver = solver

        if subsets is not None and reference_image is not None:
            for subset in subsets.values():
                subset.initialize(reference_image, REF_INTENSITIES, new_deformation())
            _logger.debug(f"참조 서브셋 {len(subsets)}개 초기화")

    def _initialize_subset(self, subset_id: int) -> SubsetInitResult:
        deformation = new_deformation()
        strategy = self.initializer
        status = strategy.initial_guess(subset_id, deformation)
        used_fallback = False

        if status == INITIALIZE_FAILED and self.fallback is not None:
            _logger.debug(f"subset {subset_id}: {strategy.name} 실패 → {self.fallback.name}")
            strategy = self.fallback
            deformation = new_deformation()
            status = strategy.initial_guess(subset_id, deformation)
            used_fallback = True

        sigma = NO_SOLUTION
        if is_success(status):
            sigma = 0.0 if self.solver is None else float(self.solver(subset_id, deformation))
            if sigma != NO_SOLUTION:
                self.context.store_solution(subset_id, deformation, sigma)

        return SubsetInitResult(
            subset_id=subset_id,
            status=status,
            deformation=deformation,
            strategy=strategy.name,
            used_fallback=used_fallback,
            sigma=sigma,
        )

    def process_frame(self,
                      def_image: np.ndarray,
                      progress_callback: Optional[Callable[[int, int, int], None]] = None
                      ) -> FrameReport:
        """
        단일 프레임 처리

        Args:
            def_image: 현재 프레임 이미지
            progress_callback: 진행 콜백 (current, total, subset_id)
        """
        start_time = time.time()
        ctx = self.context
        frame = ctx.advance_frame(def_image)
        report = FrameReport(frame=frame)

        if self.motion_utility is not None:
            if not self.motion_utility.motion_detected(def_image, frame):
                report.motion_detected = False
                report.skipped = True
                report.processing_time = time.time() - start_time
                _logger.info(report.summary)
                return report

        self.initializer.pre_execution_tasks()
        if self.fallback is not None:
            self.fallback.pre_execution_tasks()

        for strategy in (self.initializer, self.fallback):
            if isinstance(strategy, PhaseCorrelationInitializer):
                report.global_shift = strategy.global_shift

        subset_ids = ctx.subset_ids
        total = len(subset_ids)
        for idx, sid in enumerate(subset_ids):
            if progress_callback:
                progress_callback(idx + 1, total, sid)
            report.results.append(self._initialize_subset(sid))

        report.processing_time = time.time() - start_time
        _logger.info(report.summary)
        return report

    def process_sequence(self,
                         images: Iterable[np.ndarray],
                         progress_callback: Optional[Callable[[int, int, int], None]] = None
                         ) -> SequenceReport:
        """이미지 시퀀스 처리 (프레임 순서대로)"""
        start_time = time.time()
        report = SequenceReport()
        for image in images:
            report.frames.append(self.process_frame(image, progress_callback))
        report.total_processing_time = time.time() - start_time
        _logger.info(report.summary)
        return report

    def process_folder(self,
                       folder_path: Union[str, Path],
                       progress_callback: Optional[Callable[[int, int, str], None]] = None
                       ) -> SequenceReport:
        """
        폴더 내 이미지를 이름순으로 처리

        Args:
            folder_path: 이미지 폴더 경로
            progress_callback: 진행 콜백 (current, total, filename)
        """
        start_time = time.time()
        files = get_image_files(folder_path)
        total = len(files)
        report = SequenceReport()

        for idx, file_path in enumerate(files):
            if progress_callback:
                progress_callback(idx + 1, total, file_path.name)
            image = load_image(file_path)
            if image is None:
                _logger.warning(f"이미지 로드 실패, 건너뜀: {file_path.name}")
                continue
            report.frames.append(self.process_frame(image))

        report.total_processing_time = time.time() - start_time
        _logger.info(report.summary)
        return report
