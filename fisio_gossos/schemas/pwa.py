"""
Pydantic schemas for PWA install detection.
"""
from typing import Optional

from pydantic import BaseModel, Field


class PWADetectRequest(BaseModel):
    """
    Runtime facts reported by the browser shell.

    ``user_agent`` defaults to the request's User-Agent header.
    """
    user_agent: Optional[str] = None
    platform: str = ""
    max_touch_points: int = Field(default=0, ge=0)
    display_mode_standalone: bool = False
    navigator_standalone: bool = False
    query_string: str = ""
    referrer: str = ""
    install_prompt_available: bool = False


class BrowserInfoResponse(BaseModel):
    is_ios: bool
    is_android: bool
    is_chrome: bool
    is_safari: bool
    is_desktop: bool
    is_chrome_ios: bool
    is_safari_ios: bool
    is_chrome_desktop: bool
    is_chrome_android: bool
    ios_version: Optional[int]
    is_ipad: bool
    device_type: str
    classification: str


class InstallInstructionsResponse(BaseModel):
    platform: str
    device_type: str
    steps: list[str]
    benefits: list[str] = Field(default_factory=list)
    troubleshooting: list[str] = Field(default_factory=list)
    note: Optional[str] = None
    safari_recommendation: bool = False


class PWAStatusResponse(BaseModel):
    browser: BrowserInfoResponse
    is_installed: bool
    is_installable: bool
    show_install_button: bool
    install_button_text: str
    show_ios_banner: bool
    instructions: Optional[InstallInstructionsResponse] = None
