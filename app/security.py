from datetime import datetime, timedelta
from typing import Iterable, Optional
from fastapi import Depends, HTTPException
from fastapi.security import OAuth2PasswordBearer
from jose import jwt, JWTError

from .config import get_settings

settings = get_settings()
ALGO = "HS256"
# Los tokens los emite el sistema anfitrión; aquí solo se validan
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login")

CAPABILITIES = {
    "manage_kennel": "Gestionar la configuración del criadero",
    "manage_dogs": "Gestionar perros",
    "manage_litters": "Gestionar camadas",
    "manage_puppies": "Gestionar cachorros",
    "manage_people": "Gestionar personas",
    "view_reports": "Ver informes",
    "manage_settings": "Cambiar ajustes y ejecutar migraciones",
}


def create_access_token(
    user_id: str,
    capabilities: Iterable[str] = (),
    expires_hours: Optional[int] = None,
) -> str:
    expire = datetime.utcnow() + timedelta(hours=expires_hours or settings.jwt_expires_hours)
    payload = {"sub": user_id, "caps": sorted(set(capabilities)), "exp": expire}
    return jwt.encode(payload, settings.jwt_secret, algorithm=ALGO)


async def get_current_user(token: str = Depends(oauth2_scheme)) -> dict:
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[ALGO])
    except JWTError:
        raise HTTPException(status_code=401, detail="Token inválido")
    sub = payload.get("sub")
    if not sub:
        raise HTTPException(status_code=401, detail="Token inválido")
    caps = [c for c in payload.get("caps") or [] if c in CAPABILITIES]
    return {"id": str(sub), "capabilities": caps}


def require_capability(capability: str):
    """Dependencia: exige que el usuario actual tenga `capability` (403 si no)."""
    if capability not in CAPABILITIES:
        raise ValueError(f"Capacidad desconocida: {capability}")

    async def checker(current: dict = Depends(get_current_user)) -> dict:
        if capability not in current["capabilities"]:
            raise HTTPException(status_code=403, detail="No tienes permiso para esta acción")
        return current

    return checker
