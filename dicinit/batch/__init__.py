"""시퀀스 처리 모듈"""

from .runner import SequenceRunner

__all__ = ['SequenceRunner']
