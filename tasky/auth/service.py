import logging
from urllib.parse import urlencode

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

# --- Импорты для работы с Google Auth ---
from google.oauth2 import id_token
from google.auth.transport import requests as google_requests
from google_auth_oauthlib.flow import Flow

# --- Импорты из нашего приложения ---
from tasky.core.config import settings
from tasky.core.errors import ConflictError, InvalidCredentials, UnauthorizedError
from tasky.users import crud as users_crud
from tasky.users.models import User, ACCOUNT_GOOGLE
from . import security
from .schemas import AuthResponse, GoogleProfile, UserOut

# --- Настройка логгера ---
logger = logging.getLogger(__name__)

GOOGLE_ISSUERS = ['accounts.google.com', 'https://accounts.google.com']


class OAuthError(Exception):
    """Ошибка Google OAuth, которую нужно вернуть на фронтенд кодом в redirect."""

    def __init__(self, code: str, message: str = ""):
        super().__init__(message or code)
        self.code = code


class AuthService:
    """
    Сервисный слой, отвечающий за регистрацию, вход по паролю,
    вход через Google и проверку bearer-токенов.
    """

    def __init__(self, db_session: Session):
        """
        Инициализирует сервис с сессией базы данных.

        Args:
            db_session: Активная сессия SQLAlchemy.
        """
        self.db = db_session

    def _issue(self, user: User, message: str) -> AuthResponse:
        token = security.create_access_token(user.id)
        return AuthResponse(message=message, token=token, user=UserOut.model_validate(user))

    # --- Локальные аккаунты ---

    def register(self, name: str, email: str, password: str) -> AuthResponse:
        """
        Создает локальный аккаунт и сразу выдает токен.

        Raises:
            ConflictError: Если email уже занят.
        """
        if users_crud.get_user_by_email(self.db, email):
            logger.info(f"Registration rejected, email already in use: {users_crud.normalize_email(email)}")
            raise ConflictError("User already exists")

        try:
            user = users_crud.create_local_user(
                self.db,
                name=name,
                email=email,
                password_hash=security.hash_password(password),
            )
        except IntegrityError:
            # Параллельная регистрация с тем же email успела раньше
            raise ConflictError("User already exists")

        logger.info(f"User registered: {user.email} (ID: {user.id})")
        return self._issue(user, "User registered successfully")

    def login(self, email: str, password: str) -> AuthResponse:
        """
        Проверяет email и пароль.

        Raises:
            InvalidCredentials: Нет такого пользователя, аккаунт Google или неверный пароль.
        """
        user = users_crud.get_user_by_email(self.db, email)
        if not user:
            security.dummy_verify()
            logger.info("Login failed: unknown email")
            raise InvalidCredentials()

        if user.account_type == ACCOUNT_GOOGLE:
            logger.info(f"Login rejected for Google account {user.email}")
            raise InvalidCredentials("This account uses Google authentication. Please sign in with Google.")

        if not security.verify_password(password, user.password_hash):
            logger.info(f"Login failed: wrong password for {user.email}")
            raise InvalidCredentials()

        logger.info(f"User logged in: {user.email}")
        return self._issue(user, "Login successful")

    def authenticate_request(self, token: str | None) -> User:
        """
        Возвращает пользователя, которому принадлежит bearer-токен.

        Raises:
            UnauthorizedError: Токена нет, он невалиден или пользователь не найден.
        """
        if not token:
            raise UnauthorizedError("Access token required")

        user_id = security.decode_access_token(token)
        user = users_crud.get_user_by_id(self.db, user_id)
        if not user:
            logger.warning(f"Valid token for unknown user ID {user_id}")
            raise UnauthorizedError("Invalid or expired token")
        return user

    # --- Google OAuth ---

    @staticmethod
    def _build_flow() -> Flow:
        client_config = {
            "web": {
                "client_id": settings.GOOGLE_CLIENT_ID,
                "client_secret": settings.GOOGLE_CLIENT_SECRET,
                "auth_uri": "https://accounts.google.com/o/oauth2/auth",
                "token_uri": "https://oauth2.googleapis.com/token",
                "redirect_uris": [settings.GOOGLE_REDIRECT_URI],
            }
        }
        # Без PKCE: callback обрабатывается новым Flow, verifier между запросами не хранится
        return Flow.from_client_config(
            client_config=client_config,
            scopes=settings.OAUTH_SCOPES,
            redirect_uri=settings.GOOGLE_REDIRECT_URI,
            autogenerate_code_verifier=False,
        )

    def build_authorization_url(self) -> str:
        """URL страницы согласия Google (scopes profile и email)."""
        if not settings.google_oauth_enabled:
            raise OAuthError("oauth_unavailable", "Google OAuth is not configured")

        flow = self._build_flow()
        authorization_url, _state = flow.authorization_url(
            access_type="online",
            include_granted_scopes="true",
            prompt="select_account",
        )
        return authorization_url

    def exchange_oauth_code(self, code: str) -> GoogleProfile:
        """
        Обменивает authorization code на токены и проверяет ID Token.

        Raises:
            OAuthError: Обмен кода или проверка ID Token не удались.
        """
        try:
            flow = self._build_flow()
            # Этот вызов делает синхронный HTTP-запрос к Google
            flow.fetch_token(code=code)
            raw_id_token = flow.credentials.id_token
            if not raw_id_token:
                raise ValueError("Google did not return an ID token.")

            id_info = id_token.verify_oauth2_token(
                raw_id_token, google_requests.Request(), settings.GOOGLE_CLIENT_ID
            )
            if id_info.get('iss') not in GOOGLE_ISSUERS:
                raise ValueError('Wrong issuer.')
            if not id_info.get('sub') or not id_info.get('email'):
                raise ValueError("ID token has no subject or email.")
        except Exception as e:
            logger.error(f"Google code exchange failed: {e}", exc_info=True)
            raise OAuthError("oauth_error", str(e))

        return GoogleProfile(
            google_id=id_info['sub'],
            email=id_info['email'],
            name=id_info.get('name'),
        )

    def complete_oauth(self, profile: GoogleProfile) -> AuthResponse:
        """
        Находит или создает Google-пользователя и выдает токен.

        Raises:
            OAuthError: email уже принадлежит локальному аккаунту.
        """
        user = users_crud.get_user_by_google_id(self.db, profile.google_id)
        if user:
            logger.info(f"Google login for existing user {user.email}")
            return self._issue(user, "Login successful")

        if users_crud.get_user_by_email(self.db, profile.email):
            logger.warning(f"Google login refused, email {profile.email} belongs to a local account")
            raise OAuthError("email_in_use", "Email is already registered with a password")

        try:
            user = users_crud.create_google_user(
                self.db, google_id=profile.google_id, email=profile.email, name=profile.name
            )
        except IntegrityError:
            raise OAuthError("email_in_use", "Email is already registered")
        logger.info(f"Google user created: {user.email} (ID: {user.id})")
        return self._issue(user, "Login successful")

    @staticmethod
    def oauth_success_redirect(token: str) -> str:
        return f"{settings.CLIENT_URL}/auth/callback?{urlencode({'token': token})}"

    @staticmethod
    def oauth_error_redirect(code: str) -> str:
        return f"{settings.CLIENT_URL}/login?{urlencode({'error': code})}"
