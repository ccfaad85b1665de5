import logging
import sys
from pathlib import Path
from typing import Callable, Dict, Optional, Union

LOG_FORMAT = "%(asctime)s.%(msecs)03d [%(levelname)s] %(name)s:%(lineno)d | %(message)s"


def setup_logging(level: Union[int, str] = logging.INFO, log_file: Optional[str] = None):
    """
    Настраивает глобальный логгер для хоста планировщика.
    - Устанавливает формат сообщений.
    - Выводит логи в консоль (stdout).
    - При необходимости дублирует их в файл log_file.
    """
    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(path, mode="w", encoding="utf-8"))

    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        datefmt="%H:%M:%S",
        handlers=handlers,
        force=True,  # убирает старые хендлеры, чтобы не было дублей
    )

    logging.getLogger("colony_planner").setLevel(level)
    logging.getLogger("numba").setLevel(logging.WARNING)


class LogThrottle:
    """Пропускает одно и то же сообщение (по ключу) не чаще раза в interval тиков."""

    def __init__(self, clock: Callable[[], int], interval: int = 100):
        self.clock = clock
        self.interval = int(interval)
        self._last: Dict[str, int] = {}

    def allow(self, key: str) -> bool:
        now = self.clock()
        last = self._last.get(key)
        if last is not None and now - last < self.interval:
            return False
        self._last[key] = now
        return True

    def log(self, logger: logging.Logger, level: int, key: str, msg: str, *args) -> bool:
        if not self.allow(key):
            return False
        logger.log(level, msg, *args)
        return True
