"""
PWA install endpoints: browser detection and iOS banner dismissal.
"""
from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter, Request, Response

from fisio_gossos.schemas.pwa import (
    BrowserInfoResponse,
    InstallInstructionsResponse,
    PWADetectRequest,
    PWAStatusResponse,
)
from fisio_gossos.services.pwa_install_service import BANNER_COOKIE, PWAInstallService

router = APIRouter()

BANNER_COOKIE_MAX_AGE = 365 * 24 * 60 * 60


@router.post("/detect", response_model=PWAStatusResponse)
async def detect(payload: PWADetectRequest, request: Request) -> PWAStatusResponse:
    """
    Classify the browser and report which install affordances to show.
    """
    user_agent = payload.user_agent or request.headers.get("user-agent", "")
    browser = PWAInstallService.detect(
        user_agent,
        platform=payload.platform,
        max_touch_points=payload.max_touch_points,
    )
    installed = PWAInstallService.is_installed(
        display_mode_standalone=payload.display_mode_standalone,
        navigator_standalone=payload.navigator_standalone,
        query_string=payload.query_string,
        referrer=payload.referrer,
    )
    state = PWAInstallService.build_state(
        browser,
        is_installed=installed,
        install_prompt_available=payload.install_prompt_available,
        banner_dismissed=request.cookies.get(BANNER_COOKIE) == "true",
    )

    instructions = state.manual_install_instructions()
    return PWAStatusResponse(
        browser=BrowserInfoResponse(**asdict(browser), classification=browser.classification),
        is_installed=state.is_installed,
        is_installable=state.is_installable,
        show_install_button=state.should_show_install_button(),
        install_button_text=state.install_button_text(),
        show_ios_banner=state.show_ios_banner(),
        instructions=(
            InstallInstructionsResponse(**asdict(instructions)) if instructions else None
        ),
    )


@router.post("/dismiss-banner", status_code=204)
async def dismiss_banner() -> Response:
    """Remember that the iOS install banner was closed."""
    response = Response(status_code=204)
    response.set_cookie(BANNER_COOKIE, "true", max_age=BANNER_COOKIE_MAX_AGE, samesite="lax")
    return response
