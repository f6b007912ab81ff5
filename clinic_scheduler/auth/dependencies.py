import jwt
from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from clinic_scheduler.auth import jwt_handler
from clinic_scheduler.core.actors import ROLES, Actor
from clinic_scheduler.services.registry import ServiceRegistry

security = HTTPBearer()


def get_registry(request: Request) -> ServiceRegistry:
    return request.app.state.registry


def get_current_actor(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    registry: ServiceRegistry = Depends(get_registry),
) -> Actor:
    token = credentials.credentials
    try:
        payload = jwt_handler.decode_access_token(registry.settings, token)
    except jwt.PyJWTError as exc:
        raise HTTPException(status_code=401, detail="Invalid token") from exc

    subject = payload.get("sub")
    role = payload.get("role")
    if not subject or not str(subject).isdigit():
        raise HTTPException(status_code=401, detail="Invalid token subject")
    if role not in ROLES:
        raise HTTPException(status_code=401, detail="Invalid token role")

    return Actor(user_id=int(subject), role=role)
