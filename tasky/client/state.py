# tasky/client/state.py
"""
Client-side state for the session and the task list.

State objects are immutable; every change goes through a reducer
``(state, action) -> new state``. Reducers are pure and know nothing about
HTTP, that part lives in ``tasky.client.store``.
"""
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Dict, Optional, Tuple


class OAuthStatus(str, Enum):
    IDLE = "idle"
    REDIRECTED = "redirected"
    RETURNED_WITH_TOKEN = "returned_with_token"
    RETURNED_WITH_ERROR = "returned_with_error"
    AUTHENTICATED = "authenticated"
    ERROR = "error"


class ActionType(str, Enum):
    # Session
    SESSION_INIT_START = "session/initStart"
    SESSION_INIT_SUCCESS = "session/initSuccess"
    SESSION_INIT_FAILURE = "session/initFailure"
    AUTH_PENDING = "session/authPending"
    AUTH_SUCCESS = "session/authSuccess"
    AUTH_FAILURE = "session/authFailure"
    LOGOUT = "session/logout"
    OAUTH_REDIRECTED = "session/oauthRedirected"
    OAUTH_TOKEN_RECEIVED = "session/oauthTokenReceived"
    OAUTH_RETURNED_WITH_ERROR = "session/oauthReturnedWithError"
    OAUTH_AUTHENTICATED = "session/oauthAuthenticated"
    OAUTH_FAILED = "session/oauthFailed"
    SESSION_CLEAR_ERROR = "session/clearError"

    # Tasks
    TASKS_FETCH_PENDING = "tasks/fetchPending"
    TASKS_FETCH_SUCCESS = "tasks/fetchSuccess"
    TASKS_FETCH_FAILURE = "tasks/fetchFailure"
    TASK_MUTATION_PENDING = "tasks/mutationPending"
    TASK_CREATED = "tasks/created"
    TASK_UPDATED = "tasks/updated"
    TASK_DELETED = "tasks/deleted"
    TASK_MUTATION_FAILURE = "tasks/mutationFailure"
    TASKS_CLEAR_ERROR = "tasks/clearError"
    TASKS_CLEAR = "tasks/clear"


@dataclass(frozen=True)
class Action:
    type: ActionType
    payload: Any = None


@dataclass(frozen=True)
class SessionState:
    token: Optional[str] = None
    user: Optional[Dict[str, Any]] = None
    # True until init() has resolved the stored token
    loading: bool = True
    error: Optional[str] = None
    oauth_status: OAuthStatus = OAuthStatus.IDLE

    @property
    def is_authenticated(self) -> bool:
        return self.token is not None and self.user is not None


@dataclass(frozen=True)
class TaskState:
    tasks: Tuple[Dict[str, Any], ...] = ()
    loading: bool = False
    error: Optional[str] = None


# Codes the server and the OAuth callback put into /login?error=<code>
LOGIN_ERROR_MESSAGES = {
    "oauth_failed": "Google authentication failed. Please try again.",
    "oauth_error": "There was an error with Google authentication.",
    "no_token": "Authentication completed but no token received.",
    "callback_failed": "Authentication callback failed.",
    "email_in_use": "This email is already registered with a password. Please sign in with your password.",
    "oauth_unavailable": "Google sign-in is not available right now.",
}


def describe_login_error(code: Optional[str]) -> Optional[str]:
    if not code:
        return None
    return LOGIN_ERROR_MESSAGES.get(code, "Authentication failed")


STATUS_LABELS = {
    "pending": "To Do",
    "in-progress": "In Progress",
    "completed": "Completed",
}

PRIORITY_LABELS = {
    "low": "Low",
    "medium": "Medium",
    "high": "High",
}


def status_label(code: str) -> str:
    return STATUS_LABELS.get(code, code)


def priority_label(code: str) -> str:
    return PRIORITY_LABELS.get(code, code)


def select_tasks(
    state: TaskState,
    search: str = "",
    status: Optional[str] = None,
    priority: Optional[str] = None,
) -> Tuple[Dict[str, Any], ...]:
    """
    Отбирает задачи из кэша для отображения, не трогая сам кэш.

    Args:
        state: Текущее состояние задач.
        search: Подстрока для поиска в title или description, без учета регистра.
        status: Точный статус; None, '' или 'all' - без фильтра.
        priority: Точный приоритет; None, '' или 'all' - без фильтра.

    Returns:
        Подходящие задачи в порядке кэша.
    """
    needle = (search or "").strip().lower()
    status = None if status in (None, "", "all") else status
    priority = None if priority in (None, "", "all") else priority

    def matches(task: Dict[str, Any]) -> bool:
        if status is not None and task.get("status") != status:
            return False
        if priority is not None and task.get("priority") != priority:
            return False
        if needle:
            title = (task.get("title") or "").lower()
            description = (task.get("description") or "").lower()
            return needle in title or needle in description
        return True

    return tuple(task for task in state.tasks if matches(task))


def session_reducer(state: SessionState, action: Action) -> SessionState:
    t = action.type
    if t == ActionType.SESSION_INIT_START:
        return replace(state, loading=True)
    if t in (ActionType.SESSION_INIT_SUCCESS, ActionType.AUTH_SUCCESS):
        return replace(
            state,
            token=action.payload["token"],
            user=action.payload["user"],
            loading=False,
            error=None,
        )
    if t == ActionType.SESSION_INIT_FAILURE:
        return replace(state, token=None, user=None, loading=False)
    if t == ActionType.AUTH_PENDING:
        return replace(state, loading=True, error=None)
    if t == ActionType.AUTH_FAILURE:
        return replace(state, loading=False, error=action.payload)
    if t == ActionType.LOGOUT:
        return SessionState(loading=False)
    if t == ActionType.OAUTH_REDIRECTED:
        return replace(state, oauth_status=OAuthStatus.REDIRECTED, error=None)
    if t == ActionType.OAUTH_TOKEN_RECEIVED:
        # Token is only in the token store until the profile is known
        return replace(state, oauth_status=OAuthStatus.RETURNED_WITH_TOKEN, loading=True, error=None)
    if t == ActionType.OAUTH_RETURNED_WITH_ERROR:
        return replace(
            state,
            oauth_status=OAuthStatus.RETURNED_WITH_ERROR,
            loading=False,
            error=describe_login_error(action.payload),
        )
    if t == ActionType.OAUTH_AUTHENTICATED:
        return replace(
            state,
            token=action.payload["token"],
            user=action.payload["user"],
            oauth_status=OAuthStatus.AUTHENTICATED,
            loading=False,
            error=None,
        )
    if t == ActionType.OAUTH_FAILED:
        return replace(
            state,
            token=None,
            user=None,
            oauth_status=OAuthStatus.ERROR,
            loading=False,
            error=describe_login_error(action.payload),
        )
    if t == ActionType.SESSION_CLEAR_ERROR:
        return replace(state, error=None)
    return state


def task_reducer(state: TaskState, action: Action) -> TaskState:
    t = action.type
    if t == ActionType.TASKS_FETCH_PENDING:
        return replace(state, loading=True, error=None)
    if t == ActionType.TASKS_FETCH_SUCCESS:
        return replace(state, tasks=tuple(action.payload), loading=False, error=None)
    if t == ActionType.TASKS_FETCH_FAILURE:
        return replace(state, loading=False, error=action.payload)
    if t == ActionType.TASK_MUTATION_PENDING:
        return replace(state, error=None)
    if t == ActionType.TASK_CREATED:
        return replace(state, tasks=(action.payload,) + state.tasks, error=None)
    if t == ActionType.TASK_UPDATED:
        updated = action.payload
        # No local match: the change stays server-side only
        tasks = tuple(updated if task["id"] == updated["id"] else task for task in state.tasks)
        return replace(state, tasks=tasks, error=None)
    if t == ActionType.TASK_DELETED:
        return replace(state, tasks=tuple(task for task in state.tasks if task["id"] != action.payload), error=None)
    if t == ActionType.TASK_MUTATION_FAILURE:
        return replace(state, error=action.payload)
    if t == ActionType.TASKS_CLEAR_ERROR:
        return replace(state, error=None)
    if t == ActionType.TASKS_CLEAR:
        return replace(state, tasks=())
    return state
