from fastapi import APIRouter

from src.teamledger.api.v1 import auth, invites, members, organizations

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(auth.router)
api_router.include_router(organizations.router)
api_router.include_router(members.router)
api_router.include_router(invites.router)
