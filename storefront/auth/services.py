from pydantic import ValidationError
from storefront.api.pipeline import RequestPipeline
from storefront.auth.constants import LOGIN_PATH, REGISTER_PATH, logger
from storefront.auth.models import AuthOut, LoginIn, RegisterIn
from storefront.auth.session import SessionManager
from storefront.common.custom_exceptions import AuthenticationFailure, TransportFailure, ValidationFailure
from storefront.user.models import UserProfile


def _parse_auth_response(data) -> AuthOut:
    try:
        return AuthOut.model_validate(data)
    except ValidationError as exc:
        raise TransportFailure("malformed authentication response", details=exc.errors()) from exc


class AuthService:

    def __init__(self, pipeline: RequestPipeline, session: SessionManager):
        self.pipeline = pipeline
        self.session = session

    async def _issue_session(self, path: str, payload: dict, email: str) -> UserProfile:
        data = await self.pipeline.post(path, payload)
        auth = _parse_auth_response(data)

        if not auth.token:
            logger.warning("auth.tokens.missing", extra={"path": path, "email": email})
            raise AuthenticationFailure("server did not issue a token")

        self.session.establish(auth.token, auth.user)
        return auth.user

    async def register(self, email: str, password: str, first_name: str, last_name: str) -> UserProfile:
        try:
            payload = RegisterIn(email=email, password=password, first_name=first_name, last_name=last_name)
        except ValidationError as exc:
            logger.warning("auth.register.invalid_input", extra={"email": email})
            raise ValidationFailure("invalid registration details", details=exc.errors()) from exc

        user = await self._issue_session(REGISTER_PATH, payload.to_api(), email)
        logger.info("auth.register.success", extra={"user_id": user.id})
        return user

    async def login(self, email: str, password: str) -> UserProfile:
        try:
            payload = LoginIn(email=email, password=password)
        except ValidationError as exc:
            logger.warning("auth.login.invalid_input", extra={"email": email})
            raise ValidationFailure("email and password are required", details=exc.errors()) from exc

        user = await self._issue_session(LOGIN_PATH, payload.to_api(), email)
        logger.info("auth.login.success", extra={"user_id": user.id})
        return user

    def logout(self) -> None:
        self.session.invalidate(reason="logout")
