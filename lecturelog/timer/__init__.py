from lecturelog.timer.engine import LectureTimer
from lecturelog.timer.time_utils import format_time

__all__ = ["LectureTimer", "format_time"]
