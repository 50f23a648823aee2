"""
Example routes showing the three access levels.
"""

from __future__ import annotations

from typing import Dict

from fastapi import APIRouter, Depends

from auth.dependencies import AuthContext, require_guest, require_session

router = APIRouter(prefix="/example", tags=["example"])


@router.get("/public")
async def public() -> Dict[str, str]:
    return {"message": "This is a public route. Anyone can access it."}


@router.get("/protected")
async def protected(ctx: AuthContext = Depends(require_session)) -> Dict[str, str]:
    return {"message": f"Welcome, {ctx.user.name}! This is a protected route."}


@router.get("/guest-only", dependencies=[Depends(require_guest)])
async def guest_only() -> Dict[str, str]:
    return {"message": "You are a guest. This route is only for unauthenticated users."}
