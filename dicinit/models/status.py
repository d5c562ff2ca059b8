"""
초기 추정 상태 코드
"""

INITIALIZE_SUCCESSFUL = 0
INITIALIZE_USING_PREVIOUS_FRAME_SUCCESSFUL = 1
INITIALIZE_USING_NEIGHBOR_VALUE_SUCCESSFUL = 2
INITIALIZE_FAILED = 3

STATUS_NAMES = {
    INITIALIZE_SUCCESSFUL: 'successful',
    INITIALIZE_USING_PREVIOUS_FRAME_SUCCESSFUL: 'previous_frame',
    INITIALIZE_USING_NEIGHBOR_VALUE_SUCCESSFUL: 'neighbor_value',
    INITIALIZE_FAILED: 'failed',
}


def is_success(status: int) -> bool:
    return status != INITIALIZE_FAILED
