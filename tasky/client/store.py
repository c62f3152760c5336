# tasky/client/store.py
import logging
from typing import Any, Callable, Dict, Generic, List, Mapping, Optional, TypeVar

from .api import ApiClient, ApiError
from .config import ClientSettings
from .state import (
    Action,
    ActionType,
    SessionState,
    TaskState,
    session_reducer,
    task_reducer,
)
from .token_store import FileTokenStore, TokenStore

logger = logging.getLogger(__name__)

S = TypeVar("S")


class Store(Generic[S]):
    """Контейнер состояния: хранит текущее состояние и прогоняет действия через reducer."""

    def __init__(self, reducer: Callable[[S, Action], S], initial_state: S):
        self._reducer = reducer
        self._state = initial_state
        self._listeners: List[Callable[[S], None]] = []

    @property
    def state(self) -> S:
        return self._state

    def dispatch(self, action: Action) -> S:
        self._state = self._reducer(self._state, action)
        for listener in list(self._listeners):
            listener(self._state)
        return self._state

    def subscribe(self, listener: Callable[[S], None]) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe


class SessionController:
    """
    Вход, регистрация, выход и завершение Google OAuth на стороне клиента.

    Токен и пользователь попадают в состояние одним действием; единственное
    исключение - OAuth, где токен лежит в token_store до загрузки профиля
    и удаляется, если профиль получить не удалось.
    """

    def __init__(self, store: Store[SessionState], api: ApiClient, token_store: TokenStore):
        self.store = store
        self.api = api
        self.token_store = token_store

    @property
    def state(self) -> SessionState:
        return self.store.state

    def init(self) -> SessionState:
        """Восстанавливает сессию из сохраненного токена (один раз при старте)."""
        self.store.dispatch(Action(ActionType.SESSION_INIT_START))
        token = self.token_store.load()
        if not token:
            return self.store.dispatch(Action(ActionType.SESSION_INIT_FAILURE))

        try:
            data = self.api.profile(token)
            user = data["user"]
        except (ApiError, KeyError, TypeError) as e:
            logger.info(f"Stored token rejected, discarding it: {e}")
            self.token_store.clear()
            return self.store.dispatch(Action(ActionType.SESSION_INIT_FAILURE))

        return self.store.dispatch(Action(ActionType.SESSION_INIT_SUCCESS, {"token": token, "user": user}))

    def _authenticate(self, call: Callable[[], Dict[str, Any]], fallback: str) -> bool:
        self.store.dispatch(Action(ActionType.AUTH_PENDING))
        try:
            data = call()
        except ApiError as e:
            self.store.dispatch(Action(ActionType.AUTH_FAILURE, e.message or fallback))
            return False

        self.token_store.save(data["token"])
        self.store.dispatch(Action(ActionType.AUTH_SUCCESS, {"token": data["token"], "user": data["user"]}))
        return True

    def login(self, email: str, password: str) -> bool:
        return self._authenticate(lambda: self.api.login(email, password), "Login failed")

    def register(self, name: str, email: str, password: str) -> bool:
        return self._authenticate(lambda: self.api.register(name, email, password), "Registration failed")

    def logout(self) -> None:
        try:
            self.api.logout()
        except ApiError as e:
            # Сервер уведомляем по возможности, локальный выход не блокируем
            logger.warning(f"Logout notification failed: {e}")
        finally:
            self.token_store.clear()
            self.store.dispatch(Action(ActionType.LOGOUT))

    def start_oauth(self) -> str:
        """Возвращает URL, на который нужно отправить браузер."""
        self.store.dispatch(Action(ActionType.OAUTH_REDIRECTED))
        return self.api.google_auth_url()

    def complete_oauth(self, params: Mapping[str, str]) -> str:
        """
        Обрабатывает возврат на /auth/callback.

        Args:
            params: Query-параметры callback URL (token или error).

        Returns:
            Путь, куда перейти дальше: /dashboard или /login?error=<code>.
        """
        error = params.get("error")
        token = params.get("token")

        if error:
            logger.error(f"OAuth error: {error}")
            self.token_store.clear()
            self.store.dispatch(Action(ActionType.OAUTH_RETURNED_WITH_ERROR, "oauth_failed"))
            return "/login?error=oauth_failed"

        if not token:
            logger.error("No token received")
            self.token_store.clear()
            self.store.dispatch(Action(ActionType.OAUTH_FAILED, "no_token"))
            return "/login?error=no_token"

        self.token_store.save(token)
        self.store.dispatch(Action(ActionType.OAUTH_TOKEN_RECEIVED))
        try:
            data = self.api.profile(token)
            user = data["user"]
        except (ApiError, KeyError, TypeError) as e:
            logger.error(f"Callback handling error: {e}")
            self.token_store.clear()
            self.store.dispatch(Action(ActionType.OAUTH_FAILED, "callback_failed"))
            return "/login?error=callback_failed"

        self.store.dispatch(Action(ActionType.OAUTH_AUTHENTICATED, {"token": token, "user": user}))
        return "/dashboard"

    def clear_error(self) -> None:
        self.store.dispatch(Action(ActionType.SESSION_CLEAR_ERROR))


class TaskController:
    """
    Локальный кэш задач текущего пользователя.

    Ответы не согласуются между собой: что пришло последним, то и показано.
    """

    def __init__(self, store: Store[TaskState], api: ApiClient):
        self.store = store
        self.api = api

    @property
    def state(self) -> TaskState:
        return self.store.state

    def refresh(self, filters: Optional[Dict[str, Any]] = None) -> TaskState:
        self.store.dispatch(Action(ActionType.TASKS_FETCH_PENDING))
        try:
            tasks = self.api.list_tasks(filters)
        except ApiError as e:
            return self.store.dispatch(Action(ActionType.TASKS_FETCH_FAILURE, e.message or "Failed to fetch tasks"))
        return self.store.dispatch(Action(ActionType.TASKS_FETCH_SUCCESS, tasks))

    def _mutate(self, call: Callable[[], Any], fallback: str) -> Any:
        self.store.dispatch(Action(ActionType.TASK_MUTATION_PENDING))
        try:
            return call()
        except ApiError as e:
            self.store.dispatch(Action(ActionType.TASK_MUTATION_FAILURE, e.message or fallback))
            return None

    def create(self, fields: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        response = self._mutate(lambda: self.api.create_task(fields), "Failed to create task")
        if response is None:
            return None
        task = response["task"]
        self.store.dispatch(Action(ActionType.TASK_CREATED, task))
        return task

    def update(self, task_id: str, fields: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        response = self._mutate(lambda: self.api.update_task(task_id, fields), "Failed to update task")
        if response is None:
            return None
        task = response["task"]
        self.store.dispatch(Action(ActionType.TASK_UPDATED, task))
        return task

    def delete(self, task_id: str) -> bool:
        response = self._mutate(lambda: self.api.delete_task(task_id), "Failed to delete task")
        if response is None:
            return False
        self.store.dispatch(Action(ActionType.TASK_DELETED, task_id))
        return True

    def clear_error(self) -> None:
        self.store.dispatch(Action(ActionType.TASKS_CLEAR_ERROR))

    def clear(self) -> None:
        self.store.dispatch(Action(ActionType.TASKS_CLEAR))


class TaskyClient:
    """Собирает API-клиент, хранилище токена и оба контроллера."""

    def __init__(self, api: ApiClient):
        self.api = api
        self.session = SessionController(Store(session_reducer, SessionState()), api, api.token_store)
        self.tasks = TaskController(Store(task_reducer, TaskState()), api)

    @classmethod
    def from_settings(cls, settings: Optional[ClientSettings] = None) -> "TaskyClient":
        settings = settings or ClientSettings()
        api = ApiClient(base_url=settings.API_URL, token_store=FileTokenStore(settings.TOKEN_PATH))
        return cls(api)

    def logout(self) -> None:
        self.session.logout()
        self.tasks.clear()
