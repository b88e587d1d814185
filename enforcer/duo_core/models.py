"""
Data model: Lesson, DailyProgress, SharedStatus.

SharedStatus is the externally visible state. Its JSON shape is what
GET /api/status returns:

    {"blocked": bool, "xp_today": int, "xp_goal": int,
     "lessons_today": [{"time": int, "xp": int}, ...],
     "last_error": str | null}
"""

from dataclasses import dataclass, field, asdict

from .errors import RemoteProtocolError


def _as_int(value, name):
    # bool is an int subclass; a remote `true` is never a valid count
    if isinstance(value, bool) or not isinstance(value, int):
        if isinstance(value, float) and value.is_integer():
            return int(value)
        raise RemoteProtocolError(f"{name} must be an integer, got {value!r}")
    return value


def is_blocked(xp_today, requirement) -> bool:
    return xp_today < requirement


@dataclass(frozen=True)
class Lesson:
    time: int    # seconds since epoch (remote clock)
    xp: int

    @classmethod
    def from_dict(cls, data):
        if not isinstance(data, dict):
            raise RemoteProtocolError(f"lesson must be an object, got {data!r}")
        try:
            time_ = _as_int(data["time"], "time")
            xp = _as_int(data["xp"], "xp")
        except KeyError as e:
            raise RemoteProtocolError(f"lesson missing field {e}") from e
        if xp < 0:
            raise RemoteProtocolError(f"lesson xp must be non-negative, got {xp}")
        return cls(time=time_, xp=xp)

    def to_dict(self):
        return {"time": self.time, "xp": self.xp}


@dataclass(frozen=True)
class DailyProgress:
    xp_goal: int
    lessons_today: tuple = ()

    @property
    def xp_today(self) -> int:
        return sum(lesson.xp for lesson in self.lessons_today)

    @classmethod
    def from_lessons(cls, xp_goal, lessons, cutoff):
        """Keep only the lessons strictly after `cutoff`."""
        return cls(
            xp_goal=xp_goal,
            lessons_today=tuple(l for l in lessons if l.time > cutoff),
        )


@dataclass(frozen=True)
class SharedStatus:
    blocked: bool = True
    xp_today: int = 0
    xp_goal: int = 0
    lessons: tuple = field(default_factory=tuple)
    last_error: str = None

    def to_dict(self):
        data = asdict(self)
        data["lessons_today"] = [lesson.to_dict() for lesson in self.lessons]
        del data["lessons"]
        return data

    @classmethod
    def from_dict(cls, data):
        return cls(
            blocked=bool(data["blocked"]),
            xp_today=int(data["xp_today"]),
            xp_goal=int(data["xp_goal"]),
            lessons=tuple(Lesson.from_dict(l) for l in data.get("lessons_today", [])),
            last_error=data.get("last_error"),
        )
