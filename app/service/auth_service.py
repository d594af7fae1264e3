"""
Authentication service.
"""
import uuid
from sqlalchemy.orm import Session
from botocore.exceptions import ClientError
from app.aws import get_aws_client, CognitoIdentityProviderWrapper
from app.core.config import settings
from app.core.exceptions import EmailAlreadyExists, Forbidden, InvalidCredentials
from app.session import create_session, remove_session
from app.crud import user_crud
from app.model.user import User
from app.schema.auth import UserRegister, UserLogin, LoginResponse, UserInfo, UserProfile
from typing import Optional
import logging

logger = logging.getLogger(__name__)


def user_info(user: User) -> UserInfo:
    return UserInfo(
        id=str(user.id),
        email=user.email,
        name=user.name,
        avatar=user.avatar,
        role=user.role,
        is_active=bool(user.is_active),
    )


def user_profile(user: User) -> UserProfile:
    return UserProfile(
        **user_info(user).model_dump(),
        is_banned=bool(user.is_banned),
        is_chat_banned=bool(user.is_chat_banned),
        chat_ban_reason=user.chat_ban_reason,
        created_at=user.created_at,
    )


class AuthService:
    """Handles user authentication operations."""

    def __init__(self, db: Session, cognito: Optional[CognitoIdentityProviderWrapper] = None):
        self.db = db
        self.cognito = cognito or CognitoIdentityProviderWrapper(
            cognito_client=get_aws_client('cognito-idp'),
            user_pool_id=settings.COGNITO_USER_POOL_ID,
            client_id=settings.COGNITO_CLIENT_ID,
            client_secret=settings.COGNITO_CLIENT_SECRET
        )

    def register_user(self, user_data: UserRegister) -> User:
        """Register a new user in Cognito, then the local users table."""
        email = user_data.email.lower()
        if user_crud.get_by_email(self.db, email):
            raise EmailAlreadyExists()

        try:
            cognito_response = self.cognito.sign_up(
                email=email,
                password=user_data.password,
                name=user_data.name,
            )
        except ClientError as e:
            if e.response['Error']['Code'] == 'UsernameExistsException':
                raise EmailAlreadyExists()
            raise InvalidCredentials(message=e.response['Error']['Message'])

        user = user_crud.create_from_dict(self.db, obj_in={
            "id": uuid.uuid4(),
            "email": email,
            "name": user_data.name.strip(),
            "cognito_username": cognito_response['username'],
        })
        logger.info(f"User registered: {user.email}, Cognito Username: {cognito_response['username']}")
        return user

    def verify_email(self, email: str, code: str) -> None:
        user = user_crud.get_by_email(self.db, email)
        if not user or not user.cognito_username:
            raise InvalidCredentials(message="User not found")
        try:
            self.cognito.confirm_sign_up(user.cognito_username, code)
        except ClientError as e:
            raise InvalidCredentials(message=e.response['Error']['Message'])
        logger.info(f"Email verified: {email}")

    def login(self, login_data: UserLogin) -> LoginResponse:
        """Authenticate via Cognito, create a Redis session keyed by the IdToken."""
        email = login_data.email.lower()
        try:
            tokens = self.cognito.initiate_auth(email=email, password=login_data.password)
        except ClientError as e:
            if e.response['Error']['Code'] in ('NotAuthorizedException', 'UserNotFoundException'):
                raise InvalidCredentials()
            raise InvalidCredentials(message=e.response['Error']['Message'])

        user = user_crud.get_by_email(self.db, email)
        if not user:
            raise InvalidCredentials(message="User not found in local database")
        if user.is_banned:
            raise Forbidden(f"Account banned. Reason: {user.ban_reason or 'Violation of terms'}")

        id_token = tokens['id_token']
        create_session(id_token, {
            "user_id": str(user.id),
            "email": user.email,
            "access_token": tokens['access_token'],  # Stored for sign_out
        })
        logger.info(f"User logged in: {user.email}")

        return LoginResponse(
            message="Login successful",
            access_token=id_token,
            user=user_info(user),
        )

    def logout(self, token: str, session_data: dict) -> bool:
        """Sign out from Cognito and remove local session."""
        access_token = session_data.get('access_token')
        if access_token:
            try:
                self.cognito.global_sign_out(access_token)
            except ClientError as e:
                logger.warning(f"Cognito sign out failed: {e.response['Error']['Message']}")

        # Always remove local session
        return remove_session(token)
