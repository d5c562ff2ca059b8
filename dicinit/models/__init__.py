"""초기 추정 데이터 모델"""

from .deformation import (
    DISPLACEMENT_X,
    DISPLACEMENT_Y,
    ROTATION_Z,
    NORMAL_STRAIN_X,
    NORMAL_STRAIN_Y,
    SHEAR_STRAIN_XY,
    DEFORMATION_SIZE,
    SIGMA,
    GAMMA,
    NEIGHBOR_ID,
    NUM_FIELDS,
    FIELD_NAMES,
    NO_SOLUTION,
    NO_NEIGHBOR,
    Triad,
    new_deformation,
    check_deformation,
)
from .status import (
    INITIALIZE_SUCCESSFUL,
    INITIALIZE_USING_PREVIOUS_FRAME_SUCCESSFUL,
    INITIALIZE_USING_NEIGHBOR_VALUE_SUCCESSFUL,
    INITIALIZE_FAILED,
    STATUS_NAMES,
    is_success,
)
from .reports import SubsetInitResult, FrameReport, SequenceReport

__all__ = [
    'DISPLACEMENT_X',
    'DISPLACEMENT_Y',
    'ROTATION_Z',
    'NORMAL_STRAIN_X',
    'NORMAL_STRAIN_Y',
    'SHEAR_STRAIN_XY',
    'DEFORMATION_SIZE',
    'SIGMA',
    'GAMMA',
    'NEIGHBOR_ID',
    'NUM_FIELDS',
    'FIELD_NAMES',
    'NO_SOLUTION',
    'NO_NEIGHBOR',
    'Triad',
    'new_deformation',
    'check_deformation',
    'INITIALIZE_SUCCESSFUL',
    'INITIALIZE_USING_PREVIOUS_FRAME_SUCCESSFUL',
    'INITIALIZE_USING_NEIGHBOR_VALUE_SUCCESSFUL',
    'INITIALIZE_FAILED',
    'STATUS_NAMES',
    'is_success',
    'SubsetInitResult',
    'FrameReport',
    'SequenceReport',
]
