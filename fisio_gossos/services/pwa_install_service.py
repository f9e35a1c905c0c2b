"""
PWAInstallService - classifies the browser runtime and decides which install
affordance (native prompt, manual instructions, iOS banner) to offer.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Optional

BANNER_COOKIE = "ios-install-banner-seen"

_IOS = re.compile(r"iPad|iPhone|iPod")
_SAFARI = re.compile(r"^((?!chrome|android).)*safari", re.IGNORECASE)
_IOS_VERSION = re.compile(r"OS (\d+)_")


@dataclass(frozen=True)
class BrowserInfo:
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

    @property
    def classification(self) -> str:
        if self.is_safari_ios:
            return "safari_ios"
        if self.is_chrome_ios:
            return "chrome_ios"
        if self.is_chrome_desktop:
            return "chrome_desktop"
        if self.is_chrome_android:
            return "chrome_android"
        return "other"


@dataclass(frozen=True)
class InstallInstructions:
    platform: str
    device_type: str
    steps: list[str]
    benefits: list[str] = field(default_factory=list)
    troubleshooting: list[str] = field(default_factory=list)
    note: Optional[str] = None
    safari_recommendation: bool = False


@dataclass(frozen=True)
class PWAInstallState:
    """Install affordances for one browser session."""

    browser: BrowserInfo
    is_installed: bool
    install_prompt_available: bool = False
    banner_dismissed: bool = False

    @property
    def is_installable(self) -> bool:
        if self.is_installed:
            return False
        if self.install_prompt_available and (
            self.browser.is_chrome_desktop or self.browser.is_chrome_android
        ):
            return True
        return self.browser.is_safari_ios or self.browser.is_chrome_ios

    def should_show_install_button(self) -> bool:
        if self.is_installed:
            return False
        if self.install_prompt_available:
            return True
        return self.browser.classification != "other"

    def install_button_text(self) -> str:
        if self.browser.is_safari_ios or self.browser.is_chrome_ios:
            return "Añadir a Inicio"
        return "Instalar App"

    def show_ios_banner(self) -> bool:
        return self.browser.is_safari_ios and not self.is_installed and not self.banner_dismissed

    def manual_install_instructions(self) -> Optional[InstallInstructions]:
        b = self.browser
        if b.is_safari_ios:
            device = "iPad" if b.is_ipad else "iPhone"
            return InstallInstructions(
                platform=f"Safari iOS ({device})",
                device_type=device,
                steps=[
                    'En la parte inferior de Safari, toca el botón de "compartir" (cuadrado con flecha hacia arriba)',
                    'En el menú que aparece, desplázate hacia abajo hasta encontrar "Añadir a pantalla de inicio"',
                    'Toca "Añadir a pantalla de inicio"',
                    'Confirma tocando "Añadir" en la parte superior derecha',
                    "La app aparecerá en tu pantalla de inicio como cualquier otra aplicación",
                ],
                benefits=[
                    "Acceso rápido desde tu pantalla de inicio",
                    "Experiencia de aplicación nativa",
                    "Funciona sin conexión para ciertas funciones",
                    "Sin barra de direcciones del navegador",
                ],
                troubleshooting=[
                    "Si no ves el botón de compartir, asegúrate de estar usando Safari (no Chrome)",
                    'Si "Añadir a pantalla de inicio" no aparece, actualiza Safari a la última versión',
                    "Algunos bloqueadores de contenido pueden interferir - desactívalos temporalmente",
                ],
            )

        if b.is_chrome_ios:
            return InstallInstructions(
                platform="Chrome iOS",
                device_type="iPad" if b.is_ipad else "iPhone",
                steps=[
                    "Toca los tres puntos (⋯) en la esquina superior derecha de Chrome",
                    'Busca y selecciona "Añadir a pantalla de inicio"',
                    'Confirma tocando "Añadir"',
                ],
                note=(
                    "Chrome en iOS tiene limitaciones para PWAs. Para la mejor "
                    "experiencia, recomendamos usar Safari."
                ),
                safari_recommendation=True,
                benefits=[
                    "Acceso rápido desde tu pantalla de inicio",
                    "Marcador mejorado (no es una PWA completa en Chrome iOS)",
                ],
            )

        # With a native prompt available the button triggers it instead
        if self.install_prompt_available:
            return None

        if b.is_chrome_desktop:
            return InstallInstructions(
                platform="Chrome Desktop",
                device_type="Desktop",
                steps=[
                    "Toca los tres puntos (⋮) en la esquina superior derecha",
                    'Busca la opción "Enviar, guardar y compartir"',
                    'Haz clic en "Instalar página como aplicación"',
                    "La aplicación se abrirá en una ventana independiente",
                ],
                benefits=[
                    "Ventana de aplicación independiente",
                    "Acceso rápido desde el escritorio",
                    "Notificaciones del sistema",
                    "Funciona offline para ciertas funciones",
                ],
            )

        if b.is_chrome_android:
            return InstallInstructions(
                platform="Chrome Android",
                device_type="Android",
                steps=[
                    "Toca los tres puntos (⋮) en la esquina superior derecha",
                    'Selecciona "Añadir a pantalla de inicio" o "Instalar aplicación"',
                    'Confirma tocando "Añadir" o "Instalar"',
                    "La app aparecerá en tu cajón de aplicaciones y pantalla de inicio",
                ],
                benefits=[
                    "Aplicación nativa completa",
                    "Notificaciones push",
                    "Funciona offline",
                    "Acceso desde el cajón de aplicaciones",
                ],
            )

        return None


class PWAInstallService:
    """Stateless detection helpers."""

    @staticmethod
    def detect(user_agent: str, platform: str = "", max_touch_points: int = 0) -> BrowserInfo:
        ua = user_agent or ""
        is_ios = _IOS.search(ua) is not None
        is_android = "Android" in ua
        is_chrome = "Chrome" in ua and "Edg" not in ua
        is_safari = _SAFARI.search(ua) is not None
        is_desktop = not is_ios and not is_android

        is_chrome_ios = is_ios and "CriOS" in ua
        is_safari_ios = is_ios and not is_chrome_ios and "Safari" in ua

        version_match = _IOS_VERSION.search(ua) if is_ios else None
        ios_version = int(version_match.group(1)) if version_match else None

        # iPadOS reports itself as a Mac with touch support
        is_ipad = "iPad" in ua or (platform == "MacIntel" and max_touch_points > 1)

        if is_ipad:
            device_type = "iPad"
        elif is_ios:
            device_type = "iPhone"
        elif is_android:
            device_type = "Android"
        else:
            device_type = "Desktop"

        return BrowserInfo(
            is_ios=is_ios,
            is_android=is_android,
            is_chrome=is_chrome,
            is_safari=is_safari,
            is_desktop=is_desktop,
            is_chrome_ios=is_chrome_ios,
            is_safari_ios=is_safari_ios,
            is_chrome_desktop=is_desktop and is_chrome,
            is_chrome_android=is_android and is_chrome,
            ios_version=ios_version,
            is_ipad=is_ipad,
            device_type=device_type,
        )

    @staticmethod
    def is_installed(
        *,
        display_mode_standalone: bool = False,
        navigator_standalone: bool = False,
        query_string: str = "",
        referrer: str = "",
    ) -> bool:
        return (
            navigator_standalone
            or display_mode_standalone
            or "utm_source=homescreen" in (query_string or "")
            or "android-app://" in (referrer or "")
        )

    @staticmethod
    def build_state(
        browser: BrowserInfo,
        *,
        is_installed: bool,
        install_prompt_available: bool = False,
        banner_dismissed: bool = False,
    ) -> PWAInstallState:
        return PWAInstallState(
            browser=browser,
            is_installed=is_installed,
            install_prompt_available=install_prompt_available,
            banner_dismissed=banner_dismissed,
        )
