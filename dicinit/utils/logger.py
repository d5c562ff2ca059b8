"""로깅 설정 모듈"""

import logging
import sys
from pathlib import Path
from datetime import datetime


def setup_logger(name: str = "dicinit",
                 level: int = logging.INFO,
                 log_file: bool = False,
                 log_dir: str = "logs") -> logging.Logger:
    """
    로거 설정

    Args:
        name: 로거 이름 (패키지 하위 모듈 로거는 이 로거로 전파됨)
        level: 로깅 레벨
        log_file: 파일 출력 여부
        log_dir: 로그 파일 폴더
    """
    logger = logging.getLogger(name)

    if logger.handlers:
        logger.setLevel(level)
        return logger

    logger.setLevel(level)

    formatter = logging.Formatter(
        '[%(asctime)s] %(levelname)s - %(name)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_dir)
        log_path.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(
            log_path / f"dicinit_{datetime.now():%Y%m%d}.log",
            encoding='utf-8'
        )
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


# 전역 로거
logger = setup_logger()
