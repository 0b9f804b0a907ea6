from enum import Enum


class EntityKind(str, Enum):
    """Which placeholder image an entity falls back to."""

    BRANCH = "branch"
    TEAM = "team"
    GENERIC = "generic"


class TeamCategory(str, Enum):
    BOARD = "board"
    RESEARCH = "research"
    INTERN = "intern"


class ViewState(str, Enum):
    LOADING = "loading"
    SUCCESS = "success"
    EMPTY = "empty"
    ERROR = "error"
    NOT_FOUND = "not_found"
