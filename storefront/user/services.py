from typing import Optional
from pydantic import ValidationError
from storefront.api.pipeline import RequestPipeline
from storefront.auth.session import SessionManager
from storefront.common.custom_exceptions import TransportFailure, ValidationFailure
from storefront.user.constants import PROFILE_PATH, logger
from storefront.user.models import ProfileUpdateIn, UserProfile


def _parse_profile(data) -> UserProfile:
    try:
        return UserProfile.model_validate(data)
    except ValidationError as exc:
        raise TransportFailure("malformed profile response", details=exc.errors()) from exc


class UserService:

    def __init__(self, pipeline: RequestPipeline, session: SessionManager):
        self.pipeline = pipeline
        self.session = session

    async def get_profile(self) -> UserProfile:
        data = await self.pipeline.get(PROFILE_PATH)
        return _parse_profile(data)

    async def update_profile(self, first_name: Optional[str] = None, last_name: Optional[str] = None) -> UserProfile:
        try:
            payload = ProfileUpdateIn(first_name=first_name, last_name=last_name)
        except ValidationError as exc:
            raise ValidationFailure("invalid profile details", details=exc.errors()) from exc

        body = payload.to_api()
        if not body:
            raise ValidationFailure("nothing to update")

        user = _parse_profile(await self.pipeline.put(PROFILE_PATH, body))
        self.session.update_user(user)
        logger.info("user.profile.updated", extra={"user_id": user.id})
        return user
