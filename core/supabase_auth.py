# core/supabase_auth.py
# DRF authentication class that verifies Supabase JWTs issued to the dashboard

import logging
import jwt
from django.conf import settings
from django.contrib.auth import get_user_model
from rest_framework.authentication import BaseAuthentication
from rest_framework.exceptions import AuthenticationFailed

logger = logging.getLogger("cos")

User = get_user_model()


class SupabaseJWTAuthentication(BaseAuthentication):
    """
    Validates Supabase access tokens.

    1. Extracts the JWT from the Authorization header
    2. Verifies the HS256 signature with SUPABASE_JWT_SECRET
    3. Maps the Supabase user (sub claim) onto a local user, creating one on first sight
    """
    audience = "authenticated"

    def authenticate(self, request):
        auth_header = request.headers.get("Authorization", "")

        if not auth_header.startswith("Bearer "):
            return None  # Let other auth backends handle it

        secret = getattr(settings, "SUPABASE_JWT_SECRET", "")
        if not secret:
            return None

        token = auth_header.split(" ", 1)[1]

        try:
            payload = jwt.decode(
                token,
                secret,
                algorithms=["HS256"],
                audience=self.audience,
            )
        except jwt.ExpiredSignatureError:
            raise AuthenticationFailed("Token has expired")
        except jwt.InvalidTokenError as e:
            logger.debug(f"Invalid Supabase token: {e}")
            return None  # Let other auth backends try

        supabase_user_id = payload.get("sub")
        if not supabase_user_id:
            raise AuthenticationFailed("Invalid token: missing user ID")

        user = self._get_or_create_user(supabase_user_id, payload)
        return (user, payload)

    def authenticate_header(self, request):
        return "Bearer"

    def _get_or_create_user(self, supabase_user_id: str, payload: dict):
        user = User.objects.filter(supabase_id=supabase_user_id).first()
        if user:
            return user

        email = payload.get("email")
        if not email:
            raise AuthenticationFailed("Token missing email claim")

        user = User.objects.filter(email=email).first()
        if user:
            user.supabase_id = supabase_user_id
            user.save(update_fields=["supabase_id"])
            return user

        # Ensure unique username
        base_username = email.split("@")[0]
        username = base_username
        counter = 1
        while User.objects.filter(username=username).exists():
            username = f"{base_username}_{counter}"
            counter += 1

        metadata = payload.get("user_metadata") or {}
        user = User.objects.create(
            username=username,
            email=email,
            full_name=metadata.get("full_name", ""),
            supabase_id=supabase_user_id,
        )
        user.set_unusable_password()
        user.save(update_fields=["password"])
        logger.info(f"Created new user from Supabase: {email}")
        return user
