"""설정 저장/불러오기 관리"""

import json
import logging
from pathlib import Path
from typing import Dict, Any, Optional, Union

_logger = logging.getLogger(__name__)


class SettingsManager:
    """초기 추정 설정 관리"""

    DEFAULT_SETTINGS = {
        # 초기 추정 전략: 'path' | 'phase_correlation' | 'field_values'
        'initializer': 'field_values',
        'fallback_initializer': None,

        # 필드 값 초기화
        'initialization_method': 'use_field_values',
        'projection_method': 'displacement_based',
        'translation_enabled': True,
        'rotation_enabled': True,
        'normal_strain_enabled': False,
        'shear_strain_enabled': False,

        # 경로 초기화
        'path_file': '',
        'num_neighbors': 6,

        # 위상 상관
        'subpixel': False,

        # 움직임 검사 (width/height 0 이면 사용 안 함)
        'motion_window': [0, 0, 0, 0],
        'motion_tolerance': -1.0,
        'gauss_filter_mask_size': 7,

        # 서브셋 평가
        'subset_size': 21,
        'interpolation_order': 3,
    }

    def __init__(self, config_path: Optional[Union[str, Path]] = None):
        if config_path is None:
            # 사용자 홈 디렉토리에 설정 저장
            config_dir = Path.home() / '.dicinit'
            config_dir.mkdir(exist_ok=True)
            self.config_path = config_dir / 'settings.json'
        else:
            self.config_path = Path(config_path)

        self.settings = dict(self.DEFAULT_SETTINGS)
        self.load()

    def load(self):
        """설정 파일 로드"""
        try:
            if self.config_path.exists():
                with open(self.config_path, 'r', encoding='utf-8') as f:
                    saved = json.load(f)
                    self.settings.update(saved)
                _logger.info(f"설정 로드: {self.config_path}")
        except (OSError, ValueError) as e:
            _logger.warning(f"설정 로드 실패: {e}")

    def save(self):
        """설정 파일 저장"""
        try:
            self.config_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.config_path, 'w', encoding='utf-8') as f:
                json.dump(self.settings, f, indent=2, ensure_ascii=False)
            _logger.info(f"설정 저장: {self.config_path}")
        except OSError as e:
            _logger.warning(f"설정 저장 실패: {e}")

    def get(self, key: str, default=None):
        return self.settings.get(key, default)

    def set(self, key: str, value):
        self.settings[key] = value

    def update(self, params: Dict[str, Any]):
        self.settings.update(params)

    def get_context_params(self) -> Dict[str, Any]:
        """FieldContext에 적용할 방식/자유도 플래그"""
        keys = ['initialization_method', 'projection_method',
                'translation_enabled', 'rotation_enabled',
                'normal_strain_enabled', 'shear_strain_enabled']
        return {k: self.settings.get(k) for k in keys}

    def get_initializer_params(self, name: Optional[str] = None) -> Dict[str, Any]:
        """초기 추정 전략 생성 파라미터 (name 생략 시 'initializer' 설정)"""
        if name is None:
            name = self.settings.get('initializer')
        if name == 'path':
            return {'file_name': self.settings.get('path_file'),
                    'num_neighbors': self.settings.get('num_neighbors')}
        if name == 'phase_correlation':
            return {'subpixel': self.settings.get('subpixel')}
        return {}

    def get_motion_params(self) -> Optional[Dict[str, Any]]:
        """움직임 검사 파라미터 (창 크기가 0이면 None)"""
        x, y, w, h = self.settings.get('motion_window') or [0, 0, 0, 0]
        if w <= 0 or h <= 0:
            return None
        return {
            'origin_x': x,
            'origin_y': y,
            'width': w,
            'height': h,
            'tol': self.settings.get('motion_tolerance'),
            'gauss_filter_mask_size': self.settings.get('gauss_filter_mask_size'),
        }
