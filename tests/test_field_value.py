"""필드 값 전파 초기 추정 테스트"""

import sys
from pathlib import Path

import numpy as np
import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from dicinit.core import (
    FieldContext,
    USE_NEIGHBOR_VALUES,
    USE_NEIGHBOR_VALUES_FIRST_STEP_ONLY,
    VELOCITY_BASED,
)
from dicinit.core.initial_guess import FieldValueInitializer
from dicinit.models import (
    DISPLACEMENT_X,
    DISPLACEMENT_Y,
    ROTATION_Z,
    NORMAL_STRAIN_X,
    NORMAL_STRAIN_Y,
    SHEAR_STRAIN_XY,
    INITIALIZE_USING_PREVIOUS_FRAME_SUCCESSFUL,
    INITIALIZE_USING_NEIGHBOR_VALUE_SUCCESSFUL,
    INITIALIZE_FAILED,
    new_deformation,
)

IMAGE = np.zeros((8, 8))


def deformation_of(u=0.0, v=0.0, t=0.0, ex=0.0, ey=0.0, gxy=0.0):
    d = new_deformation()
    d[:] = (u, v, t, ex, ey, gxy)
    return d


def run_frames(ctx, solutions, subset_id=0):
    """frame 0..n-1 에서 solutions[k]를 기록하고 frame n으로 전진"""
    for solution in solutions:
        ctx.advance_frame(IMAGE)
        ctx.store_solution(subset_id, solution, sigma=0.01)
    ctx.advance_frame(IMAGE)


def test_no_prior_solution_fails_untouched():
    ctx = FieldContext([0])
    ctx.advance_frame(IMAGE)
    init = FieldValueInitializer(ctx)

    deformation = deformation_of(9.0, 9.0, 0.9, 0.9, 0.9, 0.9)
    before = deformation.copy()
    assert init.initial_guess(0, deformation) == INITIALIZE_FAILED
    assert np.array_equal(deformation, before)


def test_copies_previous_frame_values():
    ctx = FieldContext([0])
    run_frames(ctx, [deformation_of(1.5, -2.0, 0.03)])
    init = FieldValueInitializer(ctx)

    deformation = new_deformation()
    assert init.initial_guess(0, deformation) == INITIALIZE_USING_PREVIOUS_FRAME_SUCCESSFUL
    assert deformation[DISPLACEMENT_X] == 1.5
    assert deformation[DISPLACEMENT_Y] == -2.0
    assert deformation[ROTATION_Z] == 0.03


def test_translation_only_touches_displacements():
    ctx = FieldContext([0], rotation_enabled=False)
    run_frames(ctx, [deformation_of(1.0, 2.0, 0.05, 0.01, 0.02, 0.03)])
    init = FieldValueInitializer(ctx)

    deformation = deformation_of(t=-0.1, ex=-0.2, ey=-0.3, gxy=-0.4)
    init.initial_guess(0, deformation)
    assert deformation.tolist() == [1.0, 2.0, -0.1, -0.2, -0.3, -0.4]


def test_strains_copied_when_enabled():
    ctx = FieldContext([0], normal_strain_enabled=True, shear_strain_enabled=True,
                       projection_method=VELOCITY_BASED)
    run_frames(ctx, [deformation_of(ex=0.001, ey=0.002, gxy=0.003),
                     deformation_of(ex=0.002, ey=0.003, gxy=0.004),
                     deformation_of(ex=0.004, ey=0.005, gxy=0.006)])
    init = FieldValueInitializer(ctx)

    deformation = new_deformation()
    init.initial_guess(0, deformation)
    # 변형률은 외삽 없이 복사
    assert deformation[NORMAL_STRAIN_X] == 0.004
    assert deformation[NORMAL_STRAIN_Y] == 0.005
    assert deformation[SHEAR_STRAIN_XY] == 0.006


def test_velocity_based_extrapolates_after_frame_two():
    ctx = FieldContext([0], projection_method=VELOCITY_BASED)
    run_frames(ctx, [deformation_of(1.0, 1.0, 0.01),
                     deformation_of(2.0, 1.5, 0.02),
                     deformation_of(4.0, 1.75, 0.05)])
    assert ctx.image_frame == 3
    init = FieldValueInitializer(ctx)

    deformation = new_deformation()
    assert init.initial_guess(0, deformation) == INITIALIZE_USING_PREVIOUS_FRAME_SUCCESSFUL
    assert deformation[DISPLACEMENT_X] == 2 * 4.0 - 2.0
    assert deformation[DISPLACEMENT_Y] == 2 * 1.75 - 1.5
    assert deformation[ROTATION_Z] == pytest.approx(2 * 0.05 - 0.02)


def test_velocity_based_copies_until_frame_three():
    ctx = FieldContext([0], projection_method=VELOCITY_BASED)
    run_frames(ctx, [deformation_of(1.0), deformation_of(3.0)])
    assert ctx.image_frame == 2
    init = FieldValueInitializer(ctx)

    deformation = new_deformation()
    init.initial_guess(0, deformation)
    assert deformation[DISPLACEMENT_X] == 3.0


def test_neighbor_values_redirect():
    ctx = FieldContext([0, 1], initialization_method=USE_NEIGHBOR_VALUES)
    ctx.set_neighbor(1, 0)
    ctx.advance_frame(IMAGE)
    ctx.store_solution(0, deformation_of(0.7, 0.8), sigma=0.01)
    ctx.advance_frame(IMAGE)
    init = FieldValueInitializer(ctx)

    assert init.source_id(1) == 0
    deformation = new_deformation()
    assert init.initial_guess(1, deformation) == INITIALIZE_USING_NEIGHBOR_VALUE_SUCCESSFUL
    assert (deformation[DISPLACEMENT_X], deformation[DISPLACEMENT_Y]) == (0.7, 0.8)

    # 이웃 미지정이면 자기 자신
    assert init.source_id(0) == 0
    assert init.initial_guess(0, new_deformation()) == INITIALIZE_USING_PREVIOUS_FRAME_SUCCESSFUL


def test_neighbor_values_first_step_only():
    ctx = FieldContext([0, 1], initialization_method=USE_NEIGHBOR_VALUES_FIRST_STEP_ONLY)
    ctx.set_neighbor(1, 0)
    init = FieldValueInitializer(ctx)

    ctx.advance_frame(IMAGE)
    assert init.source_id(1) == 0
    ctx.store_solution(0, deformation_of(1.0), sigma=0.01)
    ctx.store_solution(1, deformation_of(2.0), sigma=0.01)

    ctx.advance_frame(IMAGE)
    assert init.source_id(1) == 1
    deformation = new_deformation()
    assert init.initial_guess(1, deformation) == INITIALIZE_USING_PREVIOUS_FRAME_SUCCESSFUL
    assert deformation[DISPLACEMENT_X] == 2.0


def test_neighbor_without_solution_fails():
    ctx = FieldContext([0, 1], initialization_method=USE_NEIGHBOR_VALUES)
    ctx.set_neighbor(1, 0)
    ctx.advance_frame(IMAGE)
    ctx.store_solution(1, deformation_of(5.0), sigma=0.01)
    ctx.advance_frame(IMAGE)
    init = FieldValueInitializer(ctx)
    assert init.initial_guess(1, new_deformation()) == INITIALIZE_FAILED


def test_neighbor_outside_context_rejected():
    ctx = FieldContext([0, 1], initialization_method=USE_NEIGHBOR_VALUES)
    ctx.set_neighbor(1, 42)
    ctx.advance_frame(IMAGE)
    init = FieldValueInitializer(ctx)
    with pytest.raises(RuntimeError):
        init.initial_guess(1, new_deformation())


def test_unknown_subset_rejected():
    ctx = FieldContext([0])
    ctx.advance_frame(IMAGE)
    init = FieldValueInitializer(ctx)
    with pytest.raises(RuntimeError):
        init.initial_guess(7, new_deformation())


def test_invalid_deformation_rejected():
    ctx = FieldContext([0])
    ctx.advance_frame(IMAGE)
    init = FieldValueInitializer(ctx)
    with pytest.raises(ValueError):
        init.initial_guess(0, np.zeros(3))


if __name__ == "__main__":
    sys.exit(pytest.main([__file__, "-v"]))
