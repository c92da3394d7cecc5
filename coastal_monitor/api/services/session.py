from fastapi import APIRouter, Depends, Response
import logging

from coastal_monitor.api.dependencies import TOKEN_COOKIE, current_user, get_user_entity
from coastal_monitor.api.models.schemas import User

logger = logging.getLogger(__name__)

router = APIRouter()

APP_TITLE = "Coastal Hazard Monitor"
APP_TAGLINE = "Real-time coastal hazard reporting and monitoring system for India's coastline"

NAVIGATION_ITEMS = [
    {"title": "Dashboard", "url": "/dashboard", "icon": "map",
     "roles": ["citizen", "official", "analyst"]},
    {"title": "Submit Report", "url": "/submit-report", "icon": "plus",
     "roles": ["citizen", "official", "analyst"]},
    {"title": "Analytics", "url": "/analytics", "icon": "bar-chart",
     "roles": ["official", "analyst"]},
]

ROLE_BADGES = {
    "official": "bg-blue-100 text-blue-800",
    "analyst": "bg-purple-100 text-purple-800",
}
DEFAULT_ROLE_BADGE = "bg-green-100 text-green-800"


def navigation_for(role):
    # Visibility only; the managed backend enforces access.
    return [
        {k: v for k, v in item.items() if k != "roles"}
        for item in NAVIGATION_ITEMS if role in item["roles"]
    ]


def can_view_analytics(user: User) -> bool:
    return any(item["url"] == "/analytics" for item in navigation_for(user.role))


@router.get("/api/session")
async def get_session(user: User = Depends(current_user)):
    return {
        "app": {"title": APP_TITLE, "tagline": APP_TAGLINE},
        "user": user.model_dump(),
        "role_badge": ROLE_BADGES.get(user.role, DEFAULT_ROLE_BADGE),
        "navigation": navigation_for(user.role)
    }


@router.get("/api/session/login")
async def get_login_url(next: str = "/", users=Depends(get_user_entity)):
    return {"login_url": users.login(next)}


@router.post("/api/session/logout")
async def logout(response: Response, users=Depends(get_user_entity)):
    await users.logout()
    response.delete_cookie(TOKEN_COOKIE)
    logger.info("User signed out")
    return {"status": "signed_out", "login_url": users.login("/")}
