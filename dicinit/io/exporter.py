"""결과 내보내기 모듈"""

import csv
import json
from pathlib import Path
from datetime import datetime
from typing import Dict, Optional

from ..models.deformation import DEFORMATION_SIZE, FIELD_NAMES
from ..models.reports import SequenceReport
from .loader import write_points


class ResultExporter:
    """초기 추정 결과 내보내기"""

    def __init__(self, output_dir: str = "results"):
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self.timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")

    def export_csv(self,
                   report: SequenceReport,
                   filename: Optional[str] = None) -> Path:
        """
        서브셋별 초기값 CSV (스킵된 프레임은 서브셋 없이 1행)

        Returns:
            저장된 파일 경로
        """
        if filename is None:
            filename = f"initial_guess_{self.timestamp}.csv"

        output_path = self.output_dir / filename
        dof_names = [FIELD_NAMES[i] for i in range(DEFORMATION_SIZE)]

        with open(output_path, 'w', newline='', encoding='utf-8-sig') as f:
            writer = csv.writer(f)
            writer.writerow(['Frame', 'Subset', 'Strategy', 'Status',
                             'Fallback', 'Skipped', *dof_names, 'Sigma'])

            for frame in report.frames:
                if frame.skipped:
                    writer.writerow([frame.frame, '', '', '', '', True,
                                     *([''] * DEFORMATION_SIZE), ''])
                    continue
                for r in frame.results:
                    writer.writerow([
                        frame.frame,
                        r.subset_id,
                        r.strategy,
                        r.status_name,
                        r.used_fallback,
                        False,
                        *(f"{x:.6f}" for x in r.deformation),
                        f"{r.sigma:.6f}",
                    ])

        return output_path

    def export_json(self,
                    report: SequenceReport,
                    parameters: Dict,
                    filename: Optional[str] = None) -> Path:
        """
        프레임별 요약 JSON

        Args:
            report: 시퀀스 결과
            parameters: 사용된 설정
        """
        if filename is None:
            filename = f"initial_guess_{self.timestamp}.json"

        output_path = self.output_dir / filename

        data = {
            "metadata": {
                "export_time": datetime.now().isoformat(),
                "total_frames": report.n_frames,
                "skipped_frames": report.n_skipped,
                "failed_subsets": report.n_failed,
                "processing_time": report.total_processing_time,
            },
            "parameters": parameters,
            "frames": [
                {
                    "frame": fr.frame,
                    "skipped": fr.skipped,
                    "global_shift": list(fr.global_shift) if fr.global_shift else None,
                    "status_counts": fr.status_counts,
                    "n_fallback": fr.n_fallback,
                    "processing_time": fr.processing_time,
                }
                for fr in report.frames
            ],
        }

        with open(output_path, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=2, ensure_ascii=False)

        return output_path

    def export_triads(self, path_index, filename: str = "triads.txt") -> Path:
        """경로 인덱스 triad 집합 덤프"""
        return write_points(path_index.points, self.output_dir / filename)
